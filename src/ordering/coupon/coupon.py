"""Coupon aggregate — an operator-administered discount rule keyed by a code.

A coupon is checked against, in order:
    active flag → activation window (starts_at/ends_at) → minimum subtotal

and, when every check passes, yields a discount:
    percentage: subtotal * value / 100      flat: value
    capped at max_discount, then clamped to [0, subtotal]

Evaluation is pure: it never mutates the coupon and takes ``now`` explicitly.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String
from pydantic import BaseModel, ConfigDict

from ordering.domain import ordering
from shared import clock
from shared.money import quantize, to_decimal


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"


class CouponRejection(Enum):
    """Why a coupon did not apply. Each reason has its own customer-facing message."""

    NOT_FOUND = "not_found"
    NOT_YET_ACTIVE = "not_yet_active"
    EXPIRED = "expired"
    BELOW_MINIMUM = "below_minimum"


# Fields an operator may edit after creation
EDITABLE_FIELDS = (
    "label",
    "description",
    "discount_type",
    "value",
    "active",
    "starts_at",
    "ends_at",
    "min_subtotal",
    "max_discount",
)


def normalize_code(code) -> str:
    return str(code or "").strip().upper()


class CouponEvaluation(BaseModel):
    """Outcome of checking one coupon against one subtotal."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    code: str | None = None
    label: str | None = None
    discount_amount: float = 0.0
    rejection: CouponRejection | None = None
    message: str | None = None

    @classmethod
    def rejected(cls, rejection: CouponRejection, message: str, code: str | None = None) -> "CouponEvaluation":
        return cls(valid=False, code=code, rejection=rejection, message=message)


@ordering.aggregate
class Coupon:
    code = String(identifier=True, max_length=64)
    label = String(max_length=255, sanitize=False)
    description = String(max_length=1000, sanitize=False)
    discount_type = String(required=True, choices=DiscountType)
    value = Float(required=True, min_value=0.0)
    active = Boolean(default=True)
    starts_at = DateTime()
    ends_at = DateTime()
    min_subtotal = Float(min_value=0.0)
    max_discount = Float(min_value=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def window_must_be_ordered(self):
        if self.starts_at and self.ends_at and clock.as_utc(self.ends_at) < clock.as_utc(self.starts_at):
            raise ValidationError({"ends_at": ["ends_at must not be earlier than starts_at"]})

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and (self.value or 0) > 100:
            raise ValidationError({"value": ["Percentage coupons cannot exceed 100"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, code, discount_type, value, starts_at=None, ends_at=None, **fields) -> "Coupon":
        code = normalize_code(code)
        if not code:
            raise ValidationError({"code": ["Coupon code is required"]})
        now = clock.now()
        return cls(
            code=code,
            discount_type=_discount_type_value(discount_type),
            value=value,
            starts_at=clock.as_utc(starts_at),
            ends_at=clock.as_utc(ends_at),
            created_at=now,
            updated_at=now,
            **fields,
        )

    def edit(self, **changes) -> list[str]:
        """Apply an operator edit. Omitted fields are kept; returns the changed field names."""
        if "code" in changes:
            if normalize_code(changes.pop("code")) != self.code:
                raise ValidationError({"code": ["Coupon codes cannot be changed"]})
        unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError({field: ["This field cannot be edited"] for field in unknown})

        if "discount_type" in changes:
            changes["discount_type"] = _discount_type_value(changes["discount_type"])
        for field in ("starts_at", "ends_at"):
            if isinstance(changes.get(field), datetime):
                changes[field] = clock.as_utc(changes[field])

        with atomic_change(self):
            for field, value in changes.items():
                setattr(self, field, value)
            self.updated_at = clock.now()
        return sorted(changes)

    def disable(self) -> None:
        with atomic_change(self):
            self.active = False
            self.updated_at = clock.now()

    # -------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------
    def is_usable(self, now: datetime | None = None) -> bool:
        """Active and inside the activation window (subtotal not considered)."""
        now = clock.as_utc(now) or clock.now()
        return bool(self.active) and self._window_rejection(now) is None

    def _window_rejection(self, now: datetime) -> CouponEvaluation | None:
        if self.starts_at and now < clock.as_utc(self.starts_at):
            return CouponEvaluation.rejected(CouponRejection.NOT_YET_ACTIVE, "Coupon not active yet", self.code)
        if self.ends_at and now > clock.as_utc(self.ends_at):
            return CouponEvaluation.rejected(CouponRejection.EXPIRED, "Coupon expired", self.code)
        return None

    def evaluate(self, subtotal, now: datetime | None = None) -> CouponEvaluation:
        now = clock.as_utc(now) or clock.now()
        subtotal = quantize(max(to_decimal(subtotal), Decimal("0")))

        if not self.active:
            return CouponEvaluation.rejected(CouponRejection.NOT_FOUND, "Invalid coupon")

        window_rejection = self._window_rejection(now)
        if window_rejection is not None:
            return window_rejection

        if self.min_subtotal is not None and subtotal < to_decimal(self.min_subtotal):
            return CouponEvaluation.rejected(
                CouponRejection.BELOW_MINIMUM,
                f"Minimum subtotal is {_format_amount(self.min_subtotal)}",
                self.code,
            )

        return CouponEvaluation(
            valid=True,
            code=self.code,
            label=self.label or self.code,
            discount_amount=float(self.discount_for(subtotal)),
        )

    def discount_for(self, subtotal: Decimal) -> Decimal:
        if self.discount_type == DiscountType.PERCENTAGE.value:
            raw = subtotal * to_decimal(self.value) / Decimal(100)
        else:
            raw = to_decimal(self.value)

        if self.max_discount is not None:
            raw = min(raw, to_decimal(self.max_discount))

        return quantize(min(max(raw, Decimal("0")), subtotal))


def _discount_type_value(discount_type) -> str | None:
    if isinstance(discount_type, DiscountType):
        return discount_type.value
    return str(discount_type).strip().lower() if discount_type is not None else None


def _format_amount(amount: float) -> str:
    return f"{amount:.0f}" if float(amount).is_integer() else f"{amount:.2f}"
