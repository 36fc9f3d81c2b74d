"""Tests for verified-purchase reviews and rating recompute."""

from decimal import Decimal

import pytest

from marketplace.exceptions import AuthorizationError, ConflictError, ReviewNotFoundError, ValidationError
from marketplace.models import Product, Vendor
from marketplace.schemas.order import OrderCreate, OrderStatusUpdate
from marketplace.schemas.review import ReviewCreate, ReviewUpdate
from marketplace.security import Principal
from marketplace.services.order_service import OrderService
from marketplace.services.rating_service import round_rating
from marketplace.services.review_service import ReviewService

from tests.conftest import auth_headers, checkout_payload


@pytest.fixture
def delivered(db, publisher, catalog, customer, admin):
    """A delivered V1 order containing product A"""
    service = OrderService(db, publisher)
    order = service.create_orders(
        customer, OrderCreate.model_validate(checkout_payload((catalog["a"].id, 1)))
    )[0]
    return service.update_status(order.id, admin, OrderStatusUpdate(status="delivered"))


def review(product_id, order_id, rating, comment="Solid"):
    return ReviewCreate(product=product_id, order=order_id, rating=rating, comment=comment)


class TestRoundRating:
    def test_no_reviews(self):
        assert round_rating(None) == Decimal("0.0")

    def test_rounds_half_up(self):
        assert round_rating(4.25) == Decimal("4.3")
        assert round_rating(11 / 3) == Decimal("3.7")


class TestCreateReview:
    def test_updates_product_and_vendor_rating(self, db, delivered, catalog, customer):
        created = ReviewService(db).create_review(customer, review(catalog["a"].id, delivered.id, 4))

        assert created.is_verified_purchase is True
        assert created.vendor == catalog["v1"].id
        db.expire_all()
        product = db.get(Product, catalog["a"].id)
        vendor = db.get(Vendor, catalog["v1"].id)
        assert product.rating_average == Decimal("4.0")
        assert product.rating_count == 1
        assert vendor.rating_average == Decimal("4.0")
        assert vendor.rating_count == 1

    def test_undelivered_order_is_not_eligible(self, db, publisher, catalog, customer):
        order = OrderService(db, publisher).create_orders(
            customer, OrderCreate.model_validate(checkout_payload((catalog["a"].id, 1)))
        )[0]
        with pytest.raises(ValidationError):
            ReviewService(db).create_review(customer, review(catalog["a"].id, order.id, 5))

    def test_someone_elses_order_is_not_eligible(self, db, delivered, catalog):
        with pytest.raises(ValidationError):
            ReviewService(db).create_review(Principal(id=2, role="customer"), review(catalog["a"].id, delivered.id, 5))

    def test_product_must_be_in_order(self, db, delivered, catalog, customer):
        with pytest.raises(ValidationError) as exc_info:
            ReviewService(db).create_review(customer, review(catalog["b"].id, delivered.id, 5))
        assert exc_info.value.message == "Product not found in this order"

    def test_one_review_per_order_and_product(self, db, delivered, catalog, customer):
        service = ReviewService(db)
        service.create_review(customer, review(catalog["a"].id, delivered.id, 5))
        with pytest.raises(ConflictError):
            service.create_review(customer, review(catalog["a"].id, delivered.id, 1))


class TestDeleteReview:
    def test_delete_resets_rating(self, db, delivered, catalog, customer):
        service = ReviewService(db)
        created = service.create_review(customer, review(catalog["a"].id, delivered.id, 2))
        service.delete_review(created.id, customer)

        db.expire_all()
        product = db.get(Product, catalog["a"].id)
        assert product.rating_average == Decimal("0.0")
        assert product.rating_count == 0

    def test_only_author_or_admin(self, db, delivered, catalog, customer, admin):
        service = ReviewService(db)
        created = service.create_review(customer, review(catalog["a"].id, delivered.id, 2))
        with pytest.raises(AuthorizationError):
            service.delete_review(created.id, Principal(id=2, role="customer"))
        service.delete_review(created.id, admin)


class TestUpdateReview:
    def test_rating_edit_recomputes_averages(self, db, publisher, delivered, catalog, customer, admin):
        # A second delivered order with A so the product carries two reviews
        service = OrderService(db, publisher)
        second = service.create_orders(
            customer, OrderCreate.model_validate(checkout_payload((catalog["a"].id, 1)))
        )[0]
        service.update_status(second.id, admin, OrderStatusUpdate(status="delivered"))

        reviews = ReviewService(db)
        first = reviews.create_review(customer, review(catalog["a"].id, delivered.id, 5))
        reviews.create_review(customer, review(catalog["a"].id, second.id, 4))

        updated = reviews.update_review(first.id, customer, ReviewUpdate(rating=2, title="Broke after a week"))

        assert updated.rating == 2
        assert updated.title == "Broke after a week"
        assert updated.comment == "Solid"
        db.expire_all()
        product = db.get(Product, catalog["a"].id)
        vendor = db.get(Vendor, catalog["v1"].id)
        assert product.rating_average == Decimal("3.0")
        assert product.rating_count == 2
        assert vendor.rating_average == Decimal("3.0")
        assert vendor.rating_count == 2

    def test_only_the_author_can_edit(self, db, delivered, catalog, customer, admin):
        reviews = ReviewService(db)
        created = reviews.create_review(customer, review(catalog["a"].id, delivered.id, 5))
        with pytest.raises(AuthorizationError):
            reviews.update_review(created.id, Principal(id=2, role="customer"), ReviewUpdate(rating=1))
        with pytest.raises(AuthorizationError):
            reviews.update_review(created.id, admin, ReviewUpdate(rating=1))

    def test_missing_review(self, db, customer):
        with pytest.raises(ReviewNotFoundError):
            ReviewService(db).update_review(1, customer, ReviewUpdate(rating=3))

    def test_edit_over_http(self, client, delivered, catalog):
        headers = auth_headers(1, "customer")
        created = client.post(
            "/reviews",
            json={"product": catalog["a"].id, "order": delivered.id, "rating": 5, "comment": "Great"},
            headers=headers
        ).json()["review"]

        response = client.put(f"/reviews/{created['id']}", json={"rating": 3}, headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Review updated successfully"
        assert response.json()["review"]["rating"] == 3

        product = client.get(f"/products/{catalog['a'].id}").json()["product"]
        assert product["rating"] == {"average": 3.0, "count": 1}

        bad = client.put(f"/reviews/{created['id']}", json={"rating": 0}, headers=headers)
        assert bad.status_code == 400


class TestReviewsApi:
    def test_list_with_stats(self, client, delivered, catalog):
        response = client.post(
            "/reviews",
            json={"product": catalog["a"].id, "order": delivered.id, "rating": 5, "comment": "Great"},
            headers=auth_headers(1, "customer")
        )
        assert response.status_code == 201

        listing = client.get(f"/reviews/product/{catalog['a'].id}").json()
        assert listing["total"] == 1
        assert listing["stats"]["averageRating"] == 5.0
        assert listing["stats"]["ratingDistribution"] == [{"rating": 5, "count": 1}]

        product = client.get(f"/products/{catalog['a'].id}").json()["product"]
        assert product["rating"] == {"average": 5.0, "count": 1}

    def test_rating_out_of_range(self, client, delivered, catalog):
        response = client.post(
            "/reviews",
            json={"product": catalog["a"].id, "order": delivered.id, "rating": 6, "comment": "Too good"},
            headers=auth_headers(1, "customer")
        )
        assert response.status_code == 400
