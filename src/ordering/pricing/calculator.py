"""Pricing: turns requested lines and a coupon code into a priced quote.

    lines ──> catalog lookup ──> drop missing/inactive ──> subtotal
                                                             │
                                      coupon code ──> DiscountResolver
                                                             │
                                     total = subtotal - discount_amount

Lines whose product is unknown or inactive are dropped without error; the
quote fails only when none survive. All arithmetic is done in Decimal.
"""

from datetime import datetime
from decimal import Decimal

import structlog
from protean.exceptions import ValidationError
from pydantic import BaseModel, ConfigDict

from ordering.catalog.port import ProductCatalog
from ordering.coupon.resolution import DiscountResolver
from shared.money import quantize, to_decimal

logger = structlog.get_logger(__name__)


class QuotedLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int


class PriceQuote(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines: tuple[QuotedLine, ...]
    subtotal: float
    discount_amount: float
    total: float
    currency: str
    coupon_code: str | None = None

    def as_pricing(self) -> dict:
        return self.model_dump(exclude={"lines"})


class PricingCalculator:
    def __init__(self, catalog: ProductCatalog, discounts: DiscountResolver) -> None:
        self._catalog = catalog
        self._discounts = discounts

    def quote(self, lines, coupon_code=None, now: datetime | None = None) -> PriceQuote:
        lines = [line if isinstance(line, QuotedLine) else QuotedLine(**line) for line in lines]
        products = self._catalog.find_many(line.product_id for line in lines)

        surviving = []
        dropped = []
        for line in lines:
            product = products.get(line.product_id)
            if product is None or not product.active:
                dropped.append(line.product_id)
                continue
            surviving.append((line, product))

        if dropped:
            logger.info("pricing.lines_dropped", product_ids=dropped)
        if not surviving:
            raise ValidationError({"lines": ["No valid product lines"]})

        currencies = sorted({product.currency.upper() for _, product in surviving})
        if len(currencies) > 1:
            raise ValidationError(
                {"lines": [f"All products in an order must share one currency (found {', '.join(currencies)})"]}
            )

        subtotal = quantize(
            sum((to_decimal(product.price) * line.quantity for line, product in surviving), Decimal("0"))
        )
        discount = self._discounts.resolve_for_checkout(coupon_code, subtotal, now)
        discount_amount = quantize(discount.discount_amount)
        total = quantize(max(subtotal - discount_amount, Decimal("0")))

        return PriceQuote(
            lines=tuple(line for line, _ in surviving),
            subtotal=float(subtotal),
            discount_amount=float(discount_amount),
            total=float(total),
            currency=currencies[0],
            coupon_code=discount.coupon_code,
        )
