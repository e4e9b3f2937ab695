"""Coupon lookup for checkout and for the standalone preview.

Checkout and preview ask the same question with different failure semantics:

- ``resolve_for_checkout`` never fails. A missing, inactive or ineligible
  coupon simply yields no discount and no coupon code.
- ``validate`` reports why a coupon did not apply, so the storefront can show
  a specific message before the customer places the order.
"""

from datetime import datetime
from decimal import Decimal

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from pydantic import BaseModel, ConfigDict

from ordering.coupon.coupon import Coupon, CouponEvaluation, CouponRejection, normalize_code
from shared.money import to_decimal

logger = structlog.get_logger(__name__)


class ResolvedDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    coupon_code: str | None = None
    discount_amount: float = 0.0


class DiscountResolver:
    def __init__(self, coupons=None) -> None:
        self._coupons = coupons if coupons is not None else current_domain.repository_for(Coupon)

    def resolve_for_checkout(self, code, subtotal, now: datetime | None = None) -> ResolvedDiscount:
        normalized = normalize_code(code)
        if not normalized:
            return ResolvedDiscount()

        coupon = self._coupons.find(normalized)
        evaluation = (
            coupon.evaluate(subtotal, now)
            if coupon is not None
            else CouponEvaluation.rejected(CouponRejection.NOT_FOUND, "Invalid coupon")
        )
        if not evaluation.valid:
            logger.info(
                "coupon.not_applied",
                coupon_code=normalized,
                rejection=evaluation.rejection.value,
            )
            return ResolvedDiscount()

        return ResolvedDiscount(coupon_code=evaluation.code, discount_amount=evaluation.discount_amount)

    def validate(self, code, subtotal, now: datetime | None = None) -> CouponEvaluation:
        normalized = normalize_code(code)
        if not normalized:
            raise ValidationError({"code": ["Coupon code is required"]})
        try:
            amount = to_decimal(subtotal if subtotal is not None else 0)
        except ArithmeticError as exc:
            raise ValidationError({"subtotal": ["Subtotal must be a number"]}) from exc
        if not amount.is_finite() or amount < Decimal("0"):
            raise ValidationError({"subtotal": ["Subtotal must be a non-negative number"]})

        coupon = self._coupons.find(normalized)
        if coupon is None:
            return CouponEvaluation.rejected(CouponRejection.NOT_FOUND, "Invalid coupon")
        return coupon.evaluate(amount, now)

    def usable_coupons(self, now: datetime | None = None) -> list[Coupon]:
        """Active coupons inside their activation window, newest first."""
        return [c for c in self._coupons.list_all() if c.is_usable(now)]
