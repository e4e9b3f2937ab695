"""Repository for the Coupon aggregate."""

from ordering.coupon.coupon import Coupon
from ordering.domain import ordering


@ordering.repository(part_of=Coupon)
class CouponRepository:
    def find(self, code: str) -> Coupon | None:
        """The coupon with this (normalized) code, or None."""
        return self._dao.query.filter(code=code).all().first

    def list_all(self) -> list[Coupon]:
        """All coupons, newest first."""
        return self._dao.query.order_by("-created_at").limit(None).all().items

    def remove(self, coupon: Coupon) -> None:
        self._dao.delete(coupon)
