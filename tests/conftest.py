from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from protean.integrations.pytest import DomainFixture

from ordering.catalog import Product, reset_catalog, set_catalog
from ordering.catalog.memory_adapter import MemoryProductCatalog
from ordering.customers import Customer, reset_customer_store, set_customer_store
from ordering.customers.memory_adapter import MemoryCustomerStore
from payments.gateway import reset_gateway, set_gateway
from payments.gateway.fake_adapter import FakeGateway
from shared import clock
from shared.config import StorefrontSettings, reset_settings, set_settings

SIGNING_SECRET = "test_signing_secret"


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from ordering.domain import init_domain

    bed = DomainFixture(init_domain())
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture()
def settings():
    return StorefrontSettings(
        _env_file=None,
        environment="test",
        gateway="fake",
        gateway_key_id="key_test_123",
        gateway_key_secret=SIGNING_SECRET,
        store_name="Shimmers & Shine",
        log_level="WARNING",
    )


@pytest.fixture()
def signing_secret():
    return SIGNING_SECRET


@pytest.fixture()
def catalog():
    return MemoryProductCatalog(
        [
            Product(product_id="prod-A", name="Silver Anklet", price=1000.0, currency="INR"),
            Product(product_id="prod-B", name="Glass Bangles", price=249.5, currency="INR"),
            Product(product_id="prod-retired", name="Old Earrings", price=300.0, currency="INR", active=False),
            Product(product_id="prod-usd", name="Imported Ring", price=40.0, currency="USD"),
        ]
    )


@pytest.fixture()
def customers():
    return MemoryCustomerStore([Customer(customer_id="cust-001", name="Asha Rao", email="asha@example.com")])


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture(autouse=True)
def _services(settings, catalog, customers, gateway):
    """Install the test collaborators for every test and restore defaults afterwards."""
    set_settings(settings)
    set_catalog(catalog)
    set_customer_store(customers)
    set_gateway(gateway)
    yield
    reset_settings()
    reset_catalog()
    reset_customer_store()
    reset_gateway()
    clock.reset_clock()


@pytest.fixture()
def client(settings):
    from app import create_app

    return TestClient(create_app(settings=settings))


@pytest.fixture()
def delivery_payload():
    return {
        "full_name": "Asha Rao",
        "phone": "9820000000",
        "address_line": "Plot 4, Sector 17, Vashi",
        "city": "Navi Mumbai",
        "postal_code": "400703",
    }


@pytest.fixture()
def make_order(delivery_payload):
    """Build an unsaved order directly on the aggregate (no pricing involved)."""
    from ordering.order.order import DeliveryAddress, Order, PaymentDetails

    def _make(subtotal=2000.0, discount_amount=0.0, **overrides):
        return Order.create(
            lines=[{"product_id": "prod-A", "quantity": 2}],
            pricing={
                "subtotal": subtotal,
                "discount_amount": discount_amount,
                "total": subtotal - discount_amount,
                "currency": "INR",
                "coupon_code": overrides.pop("coupon_code", None),
            },
            delivery=DeliveryAddress(**delivery_payload),
            payment=overrides.pop("payment", PaymentDetails(method="cod")),
            **overrides,
        )

    return _make


@pytest.fixture()
def delivered_order(make_order):
    """An order that was delivered at a known moment, with its event buffer cleared."""

    def _make(delivered_at=datetime(2026, 3, 1, 12, 0, tzinfo=UTC), **kwargs):
        order = make_order(**kwargs)
        order.override_statuses(order_status="delivered", delivery_status="delivered")
        order.delivered_at = delivered_at
        order._events.clear()
        return order

    return _make
