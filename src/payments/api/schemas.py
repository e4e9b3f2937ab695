"""Pydantic request/response schemas for the Payments API.

These are external contracts (anti-corruption layer), separate from the
internal commands.
"""

from pydantic import BaseModel, Field


class CreatePaymentIntentRequest(BaseModel):
    order_id: str = Field(min_length=1)


class PaymentIntentResponse(BaseModel):
    order_id: str
    gateway: str
    gateway_order_id: str
    amount_minor_units: int
    currency: str


class VerifyPaymentRequest(BaseModel):
    order_id: str | None = None
    gateway_order_id: str = Field(min_length=1)
    gateway_payment_id: str = Field(min_length=1)
    signature: str = Field(min_length=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_id": "ord_3f9a1c2b4d5e6f70",
                    "gateway_order_id": "pi_3P0abc",
                    "gateway_payment_id": "pay_001",
                    "signature": "5d41402abc4b2a76b9719d911017c592...",
                }
            ]
        }
    }


class VerifyPaymentResponse(BaseModel):
    ok: bool
