"""Tests for coupon administration commands."""

import pytest
from ordering.coupon.coupon import Coupon
from ordering.coupon.management import CreateCoupon, DeleteCoupon, DisableCoupon, UpdateCoupon
from protean.utils.globals import current_domain
from protean.exceptions import InvalidStateError, ObjectNotFoundError, ValidationError


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _create(code="SAVE10", **fields):
    fields.setdefault("discount_type", "percentage")
    fields.setdefault("value", 10)
    return _process(CreateCoupon(code=code, **fields))


def _stored(code):
    return current_domain.repository_for(Coupon).find(code)


class TestCreateCoupon:
    def test_create_stores_uppercase_code(self):
        _create(code="welcome", label="Welcome offer")
        stored = _stored("WELCOME")
        assert stored.label == "Welcome offer"

    def test_duplicate_code_is_rejected_case_insensitively(self):
        _create(code="SAVE10")
        with pytest.raises(InvalidStateError) as exc:
            _create(code="save10")
        assert exc.value.args[0] == {"code": ["Coupon SAVE10 already exists"]}

    def test_domain_rules_apply(self):
        with pytest.raises(ValidationError):
            _create(value=120)
        assert _stored("SAVE10") is None

    def test_unknown_discount_type(self):
        with pytest.raises(ValidationError) as exc:
            _create(discount_type="bogo")
        assert "discount_type" in exc.value.messages


class TestUpdateCoupon:
    def test_update_changes_only_given_fields(self):
        _create(max_discount=300)
        _process(UpdateCoupon(code="save10", changes={"value": 15}))
        stored = _stored("SAVE10")
        assert stored.value == 15
        assert stored.max_discount == 300

    def test_invalid_update_is_not_stored(self):
        _create()
        with pytest.raises(ValidationError):
            _process(UpdateCoupon(code="SAVE10", changes={"value": 150}))
        assert _stored("SAVE10").value == 10

    def test_update_unknown_coupon(self):
        with pytest.raises(ObjectNotFoundError):
            _process(UpdateCoupon(code="NOPE", changes={"value": 15}))


class TestDisableAndDelete:
    def test_disable(self):
        _create()
        _process(DisableCoupon(code="SAVE10"))
        assert _stored("SAVE10").active is False

    def test_delete_is_hard(self):
        _create()
        _process(DeleteCoupon(code="save10"))
        assert _stored("SAVE10") is None

    def test_delete_unknown_coupon(self):
        with pytest.raises(ObjectNotFoundError):
            _process(DeleteCoupon(code="NOPE"))
