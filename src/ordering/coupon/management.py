"""Coupon administration — commands and handler."""

import structlog
from protean.exceptions import InvalidStateError, ObjectNotFoundError
from protean.fields import Boolean, DateTime, Dict, Float, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.coupon.coupon import Coupon, DiscountType, normalize_code
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=64)
    label = String(max_length=255, sanitize=False)
    description = String(max_length=1000, sanitize=False)
    discount_type = String(required=True, choices=DiscountType)
    value = Float(required=True, min_value=0.0)
    active = Boolean(default=True)
    starts_at = DateTime()
    ends_at = DateTime()
    min_subtotal = Float(min_value=0.0)
    max_discount = Float(min_value=0.0)


@ordering.command(part_of="Coupon")
class UpdateCoupon:
    code = String(required=True, max_length=64)
    changes = Dict()


@ordering.command(part_of="Coupon")
class DisableCoupon:
    code = String(required=True, max_length=64)


@ordering.command(part_of="Coupon")
class DeleteCoupon:
    code = String(required=True, max_length=64)


def _existing(code) -> Coupon:
    coupon = current_domain.repository_for(Coupon).find(normalize_code(code))
    if coupon is None:
        raise ObjectNotFoundError({"code": [f"Coupon {normalize_code(code)} not found"]})
    return coupon


@ordering.command_handler(part_of=Coupon)
class CouponManagementHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command: CreateCoupon) -> Coupon:
        repo = current_domain.repository_for(Coupon)
        code = normalize_code(command.code)
        if repo.find(code) is not None:
            raise InvalidStateError({"code": [f"Coupon {code} already exists"]})

        coupon = Coupon.create(**command.payload)
        repo.add(coupon)
        logger.info("coupon.created", coupon_code=coupon.code, discount_type=coupon.discount_type)
        return coupon

    @handle(UpdateCoupon)
    def update_coupon(self, command: UpdateCoupon) -> Coupon:
        coupon = _existing(command.code)
        fields = coupon.edit(**(command.changes or {}))
        current_domain.repository_for(Coupon).add(coupon)
        logger.info("coupon.updated", coupon_code=coupon.code, fields=fields)
        return coupon

    @handle(DisableCoupon)
    def disable_coupon(self, command: DisableCoupon) -> Coupon:
        coupon = _existing(command.code)
        coupon.disable()
        current_domain.repository_for(Coupon).add(coupon)
        logger.info("coupon.disabled", coupon_code=coupon.code)
        return coupon

    @handle(DeleteCoupon)
    def delete_coupon(self, command: DeleteCoupon) -> None:
        coupon = _existing(command.code)
        current_domain.repository_for(Coupon).remove(coupon)
        logger.info("coupon.deleted", coupon_code=coupon.code)
