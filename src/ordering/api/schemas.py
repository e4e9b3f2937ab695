"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from the
internal commands. Order and delivery fields are deliberately loose so that
missing values reach the domain and come back as field-keyed 400 errors.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from ordering.coupon.coupon import Coupon, CouponEvaluation, DiscountType


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class OrderLineSchema(BaseModel):
    product_id: str | None = None
    quantity: int | None = None


class DeliverySchema(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    address_line: str | None = None
    city: str | None = None
    postal_code: str | None = None


class PaymentSchema(BaseModel):
    method: str | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    lines: list[OrderLineSchema] = Field(default_factory=list)
    delivery: DeliverySchema | None = None
    payment: PaymentSchema | None = None
    coupon_code: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "lines": [{"product_id": "prod-001", "quantity": 2}],
                    "delivery": {
                        "full_name": "Asha Rao",
                        "phone": "9820000000",
                        "address_line": "Plot 4, Sector 17",
                        "city": "Navi Mumbai",
                        "postal_code": "400703",
                    },
                    "payment": {"method": "upi"},
                    "coupon_code": "SAVE10",
                }
            ]
        }
    }


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class ServiceRequestBody(BaseModel):
    reason: str | None = None
    description: str | None = None


class ServiceDecisionRequest(BaseModel):
    action: Literal["approve", "reject"]
    rejection_reason: str | None = None


class OverrideStatusesRequest(BaseModel):
    order_status: str | None = None
    payment_status: str | None = None
    delivery_status: str | None = None


# ---------------------------------------------------------------------------
# Coupon Schemas
# ---------------------------------------------------------------------------
class ValidateCouponRequest(BaseModel):
    code: str | None = None
    subtotal: float | None = 0.0


class CouponValidationResponse(BaseModel):
    valid: bool
    code: str | None = None
    label: str | None = None
    discount_amount: float = 0.0
    reason: str | None = None
    message: str | None = None

    @classmethod
    def from_evaluation(cls, evaluation: CouponEvaluation) -> "CouponValidationResponse":
        return cls(
            valid=evaluation.valid,
            code=evaluation.code,
            label=evaluation.label,
            discount_amount=evaluation.discount_amount,
            reason=evaluation.rejection.value if evaluation.rejection else None,
            message=evaluation.message,
        )


class CreateCouponRequest(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    label: str | None = None
    description: str | None = None
    discount_type: DiscountType
    value: float = Field(ge=0)
    active: bool = True
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    min_subtotal: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "SAVE10",
                    "label": "10% off",
                    "discount_type": "percentage",
                    "value": 10,
                    "max_discount": 500,
                }
            ]
        }
    }


class UpdateCouponRequest(BaseModel):
    label: str | None = None
    description: str | None = None
    discount_type: DiscountType | None = None
    value: float | None = Field(default=None, ge=0)
    active: bool | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    min_subtotal: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)


class CouponResponse(BaseModel):
    code: str
    label: str | None = None
    description: str | None = None
    discount_type: str
    value: float
    active: bool
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    min_subtotal: float | None = None
    max_discount: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_coupon(cls, coupon: Coupon) -> "CouponResponse":
        return cls(**coupon.to_dict())


class PublicCouponResponse(BaseModel):
    code: str
    label: str | None = None
    description: str | None = None
    discount_type: str
    value: float
    min_subtotal: float | None = None
    max_discount: float | None = None
    ends_at: datetime | None = None

    @classmethod
    def from_coupon(cls, coupon: Coupon) -> "PublicCouponResponse":
        return cls(**coupon.to_dict())
