"""Tests for cart mutations on the embedded user cart."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from storefront.core.errors import PersistenceError
from storefront.repositories import users as users_repo
from storefront.schemas.cart import CartLine
from storefront.schemas.product import Product
from storefront.services import cart as cart_svc
from storefront.services.catalog import get_product


def _stored_items(db, user):
    return users_repo.get(db, user["id"])["cart"]["items"]


class TestAddToCart:
    def test_first_add_creates_line_with_quantity_one(self, db, products, user):
        cart_svc.add_to_cart(db, user, get_product(db, "p1"))

        assert _stored_items(db, user) == [{"product_id": "p1", "quantity": 1}]

    def test_adding_same_product_twice_bumps_quantity(self, db, products, user):
        p1 = get_product(db, "p1")
        cart_svc.add_to_cart(db, user, p1)
        cart_svc.add_to_cart(db, user, p1)

        assert _stored_items(db, user) == [{"product_id": "p1", "quantity": 2}]

    def test_distinct_products_keep_insertion_order(self, db, products, user):
        cart_svc.add_to_cart(db, user, get_product(db, "p2"))
        cart_svc.add_to_cart(db, user, get_product(db, "p1"))

        assert [it["product_id"] for it in _stored_items(db, user)] == ["p2", "p1"]

    def test_user_dict_reflects_new_cart(self, db, products, user):
        cart_svc.add_to_cart(db, user, get_product(db, "p1"))

        assert user["cart"] == {"items": [{"product_id": "p1", "quantity": 1}]}

    def test_failed_write_leaves_user_cart_alone(self, db, products, user, monkeypatch):
        p1 = get_product(db, "p1")
        cart_svc.add_to_cart(db, user, p1)
        monkeypatch.setattr(users_repo, "save_cart", MagicMock(side_effect=PersistenceError("down")))

        with pytest.raises(PersistenceError):
            cart_svc.add_to_cart(db, user, p1)

        assert user["cart"] == {"items": [{"product_id": "p1", "quantity": 1}]}


class TestRemoveFromCart:
    def test_removes_the_whole_line(self, db, products, user):
        p1 = get_product(db, "p1")
        cart_svc.add_to_cart(db, user, p1)
        cart_svc.add_to_cart(db, user, p1)
        cart_svc.add_to_cart(db, user, get_product(db, "p2"))

        cart_svc.remove_from_cart(db, user, "p1")

        assert _stored_items(db, user) == [{"product_id": "p2", "quantity": 1}]

    def test_absent_product_is_a_no_op(self, db, products, user):
        cart_svc.add_to_cart(db, user, get_product(db, "p1"))

        cart_svc.remove_from_cart(db, user, "does-not-exist")

        assert _stored_items(db, user) == [{"product_id": "p1", "quantity": 1}]

    def test_clear_cart_empties_items(self, db, products, user):
        cart_svc.add_to_cart(db, user, get_product(db, "p1"))

        cart_svc.clear_cart(db, user)

        assert _stored_items(db, user) == []


class TestResolveCart:
    def test_lines_carry_full_product_details(self, db, products, user):
        cart_svc.add_to_cart(db, user, get_product(db, "p1"))

        lines = cart_svc.resolve_cart(db, user)

        assert len(lines) == 1
        assert lines[0].product.title == "Product 1"
        assert lines[0].product.price == 10.0
        assert lines[0].quantity == 1

    def test_missing_product_is_skipped(self, db, products, user):
        cart_svc.add_to_cart(db, user, get_product(db, "p1"))
        cart_svc.add_to_cart(db, user, get_product(db, "p2"))
        del products["p1"]

        lines = cart_svc.resolve_cart(db, user)

        assert [line.product.id for line in lines] == ["p2"]

    def test_empty_cart_resolves_to_no_lines(self, db, user):
        assert cart_svc.resolve_cart(db, user) == []


class TestCartTotal:
    def test_sums_price_times_quantity(self):
        lines = [
            CartLine(product=Product(id="a", title="A", price=10.0), quantity=2),
            CartLine(product=Product(id="b", title="B", price=5.0), quantity=1),
        ]
        assert cart_svc.cart_total(lines) == 25.0

    def test_cents_do_not_drift(self):
        lines = [CartLine(product=Product(id="a", title="A", price=0.1), quantity=3)]
        assert Decimal(str(cart_svc.cart_total(lines))) == Decimal("0.3")

    def test_empty_total_is_zero(self):
        assert cart_svc.cart_total([]) == 0.0

    def test_line_subtotal(self):
        line = CartLine(product=Product(id="a", title="A", price=2.5), quantity=4)
        assert line.subtotal == 10.0
