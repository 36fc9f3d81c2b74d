"""Shared fixtures: in-memory database, fake event publisher and seed data."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EVENTS_ENABLED"] = "false"
os.environ["EMAIL_SERVICE"] = "console"

import pytest
from fastapi.testclient import TestClient

from marketplace import models  # noqa: F401
from marketplace.api.deps import get_event_publisher
from marketplace.database import Base, SessionLocal, engine
from marketplace.main import app
from marketplace.models import Product, Vendor
from marketplace.security import Principal, create_access_token


class RecordingPublisher:
    """Stands in for EventPublisher and keeps every event it is given"""

    def __init__(self):
        self.events = []

    def publish_order_created(self, order_data):
        self.events.append(("OrderCreated", order_data))
        return True

    def publish_order_status_changed(self, order_data):
        self.events.append(("OrderStatusChanged", order_data))
        return True

    def publish_order_cancelled(self, order_data):
        self.events.append(("OrderCancelled", order_data))
        return True

    def of_type(self, event_type):
        return [data for kind, data in self.events if kind == event_type]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def client(db, publisher):
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_vendor(db):
    def factory(user_id, business_name=None, status="approved", commission_rate=10):
        vendor = Vendor(
            user_id=user_id,
            business_name=business_name or f"Vendor {user_id}",
            status=status,
            commission_rate=commission_rate,
            is_active=True
        )
        db.add(vendor)
        db.commit()
        return vendor
    return factory


@pytest.fixture
def make_product(db):
    def factory(vendor, price, quantity, sku=None, **fields):
        product = Product(
            vendor_id=vendor.id,
            name=fields.pop("name", sku or f"Product {price}"),
            sku=sku or f"SKU-{vendor.id}-{price}-{quantity}",
            price_original=price,
            quantity=quantity,
            status=fields.pop("status", "active"),
            **fields
        )
        db.add(product)
        db.commit()
        return product
    return factory


@pytest.fixture
def catalog(make_vendor, make_product):
    """Two approved vendors: A (20.00, 5 in stock) from V1 and B (100.00, 1 in stock) from V2"""
    v1 = make_vendor(user_id=100, business_name="V1")
    v2 = make_vendor(user_id=200, business_name="V2")
    product_a = make_product(v1, 20, 5, sku="SKU-A", name="Product A", image_url="https://img/a.png")
    product_b = make_product(v2, 100, 1, sku="SKU-B", name="Product B")
    return {"v1": v1, "v2": v2, "a": product_a, "b": product_b}


@pytest.fixture
def customer():
    return Principal(id=1, role="customer")


@pytest.fixture
def admin():
    return Principal(id=999, role="admin")


def auth_headers(user_id, role):
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


def checkout_payload(*lines, **overrides):
    """Build a POST /orders body from (product_id, quantity) pairs"""
    payload = {
        "items": [{"product": product_id, "quantity": quantity} for product_id, quantity in lines],
        "shippingAddress": {
            "firstName": "Jane",
            "lastName": "Doe",
            "email": "jane.doe@shopmail.com",
            "street": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zipCode": "62701"
        },
        "payment": {"method": "cod"}
    }
    payload.update(overrides)
    return payload
