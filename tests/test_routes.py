"""End-to-end page tests through the FastAPI app with in-memory collaborators."""

from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import ServiceUnavailable

from storefront.core.errors import PaymentProviderError
from storefront.repositories import users as users_repo

from tests.conftest import PASSWORD, make_user


def _cart(db, user):
    return users_repo.get(db, user["id"])["cart"]["items"]


class TestCatalogPages:
    def test_index_lists_first_page(self, client, products):
        resp = client.get("/")

        assert resp.status_code == 200
        assert "Product 1" in resp.text
        assert "Product 3" in resp.text
        assert "Product 4" not in resp.text

    def test_second_page(self, client, products):
        resp = client.get("/products?page=2")

        assert resp.status_code == 200
        assert "Product 4" in resp.text
        assert "Product 1<" not in resp.text

    def test_bad_page_falls_back_to_first(self, client, products):
        resp = client.get("/products?page=abc")
        assert "Product 1" in resp.text

    def test_product_detail(self, client, products):
        resp = client.get("/products/p3")

        assert resp.status_code == 200
        assert "Product 3" in resp.text
        assert "$7.50" in resp.text

    def test_unknown_product_is_404_page(self, client, products):
        resp = client.get("/products/missing")

        assert resp.status_code == 404
        assert "Page Not Found!" in resp.text

    def test_add_to_cart_button_only_for_logged_in(self, client, products, user):
        assert 'action="/cart"' not in client.get("/products/p1").text
        client.post("/login", data={"email": user["email"], "password": PASSWORD})
        assert 'action="/cart"' in client.get("/products/p1").text


class TestAuthPages:
    @pytest.mark.parametrize("path", ["/cart", "/orders", "/checkout", "/orders/x/invoice"])
    def test_protected_pages_redirect_to_login(self, client, path):
        resp = client.get(path, follow_redirects=False)

        assert resp.status_code == 303
        assert resp.headers["location"] == "/login"

    def test_login_with_bad_password_rerenders_form(self, client, user):
        resp = client.post("/login", data={"email": user["email"], "password": "wrong123"})

        assert resp.status_code == 422
        assert "Password is incorrect." in resp.text
        assert 'value="ada@example.com"' in resp.text

    def test_signup_then_login(self, client, db, mailer):
        resp = client.post("/signup", data={
            "name": "Grace", "email": "grace@example.com",
            "password": "hopper1", "confirm_password": "hopper1",
        }, follow_redirects=False)

        assert resp.status_code == 303
        assert resp.headers["location"] == "/login"
        assert users_repo.find_by_email(db, "grace@example.com") is not None
        assert mailer.sent[0]["to"] == "grace@example.com"

        resp = client.post("/login", data={"email": "grace@example.com", "password": "hopper1"},
                           follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/"

    def test_signup_mismatched_passwords(self, client):
        resp = client.post("/signup", data={
            "name": "Grace", "email": "grace@example.com",
            "password": "hopper1", "confirm_password": "hopper2",
        })

        assert resp.status_code == 422
        assert "Passwords have to match!" in resp.text

    def test_signup_survives_mail_failure(self, client, db, mailer):
        mailer.fail = True

        resp = client.post("/signup", data={
            "name": "Grace", "email": "grace@example.com",
            "password": "hopper1", "confirm_password": "hopper1",
        }, follow_redirects=False)

        assert resp.status_code == 303

    def test_logout_clears_session(self, auth_client):
        auth_client.post("/logout")

        resp = auth_client.get("/cart", follow_redirects=False)
        assert resp.status_code == 303

    def test_reset_unknown_email_flashes(self, client):
        resp = client.post("/reset", data={"email": "nobody@example.com"})

        assert "No account with that email found." in resp.text

    def test_reset_flow(self, client, db, user, mailer):
        resp = client.post("/reset", data={"email": user["email"]}, follow_redirects=False)
        assert resp.status_code == 303
        token = users_repo.get(db, user["id"])["reset_token"]
        assert f"/reset/{token}" in mailer.sent[0]["html"]

        page = client.get(f"/reset/{token}")
        assert page.status_code == 200
        assert f'value="{token}"' in page.text

        resp = client.post("/new-password", data={
            "user_id": user["id"], "password_token": token, "password": "brandnew1",
        }, follow_redirects=False)
        assert resp.headers["location"] == "/login"

        resp = client.post("/login", data={"email": user["email"], "password": "brandnew1"},
                           follow_redirects=False)
        assert resp.status_code == 303

    def test_invalid_reset_link(self, client, user):
        resp = client.get("/reset/bogus")
        assert "invalid or has expired" in resp.text


class TestCartPages:
    def test_add_and_show(self, auth_client, db, products, user):
        resp = auth_client.post("/cart", data={"product_id": "p1"}, follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/cart"
        auth_client.post("/cart", data={"product_id": "p1"})

        assert _cart(db, user) == [{"product_id": "p1", "quantity": 2}]
        page = auth_client.get("/cart")
        assert "Quantity: 2" in page.text
        assert "Total: $20.00" in page.text

    def test_add_unknown_product(self, auth_client, products):
        resp = auth_client.post("/cart", data={"product_id": "missing"})
        assert resp.status_code == 404

    def test_delete_item(self, auth_client, db, products, user):
        auth_client.post("/cart", data={"product_id": "p1"})
        auth_client.post("/cart", data={"product_id": "p2"})

        auth_client.post("/cart/delete-item", data={"product_id": "p1"})

        assert _cart(db, user) == [{"product_id": "p2", "quantity": 1}]

    def test_empty_cart_page(self, auth_client):
        assert "No Products in Cart!" in auth_client.get("/cart").text


class TestOrderPages:
    def _fill(self, client):
        client.post("/cart", data={"product_id": "p1"})
        client.post("/cart", data={"product_id": "p1"})
        client.post("/cart", data={"product_id": "p2"})

    def test_create_order_and_list(self, auth_client, db, products, user):
        self._fill(auth_client)

        resp = auth_client.post("/create-order", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/orders"

        assert _cart(db, user) == []
        page = auth_client.get("/orders")
        assert "Product 1 (2)" in page.text
        assert "Product 2 (1)" in page.text

    def test_empty_cart_order_goes_back_to_cart(self, auth_client, db, products):
        resp = auth_client.post("/create-order")

        assert "Your cart is empty." in resp.text
        assert db.data.get("orders", {}) == {}

    def test_invoice_download(self, auth_client, db, products, archive):
        self._fill(auth_client)
        auth_client.post("/create-order")
        order_id = next(iter(db.data["orders"]))

        resp = auth_client.get(f"/orders/{order_id}/invoice")

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.headers["content-disposition"] == f'inline; filename="{order_id}.pdf"'
        assert b"Total Price: $25.00" in resp.content
        assert archive.path_for(order_id).exists()

    def test_someone_elses_invoice_looks_missing(self, client, db, products):
        owner = make_user(db, email="owner@example.com", name="Owner")
        db.data.setdefault("orders", {})["o1"] = {"user_id": owner["id"], "products": []}
        intruder = make_user(db, email="eve@example.com", name="Eve")
        client.post("/login", data={"email": intruder["email"], "password": PASSWORD})

        resp = client.get("/orders/o1/invoice")

        assert resp.status_code == 404
        assert "Page Not Found!" in resp.text


class TestCheckoutPages:
    def test_checkout_page_links_to_provider(self, auth_client, products, gateway):
        auth_client.post("/cart", data={"product_id": "p1"})

        resp = auth_client.get("/checkout")

        assert resp.status_code == 200
        assert "https://pay.example.com/1" in resp.text
        assert "Total: $10.00" in resp.text
        sent = gateway.sessions[0]
        assert sent["success_url"] == "http://testserver/checkout/success"
        assert sent["cancel_url"] == "http://testserver/checkout/cancel"
        assert sent["line_items"][0].unit_amount == 1000

    def test_empty_cart_checkout_goes_back_to_cart(self, auth_client, gateway):
        resp = auth_client.get("/checkout")

        assert "Your cart is empty." in resp.text
        assert gateway.sessions == []

    def test_provider_failure_is_500_page(self, auth_client, products, gateway):
        auth_client.post("/cart", data={"product_id": "p1"})
        gateway.fail = PaymentProviderError("down")

        resp = auth_client.get("/checkout")

        assert resp.status_code == 500
        assert "Some error occurred!" in resp.text

    def test_paid_success_places_order(self, auth_client, db, products, user):
        auth_client.post("/cart", data={"product_id": "p1"})
        auth_client.get("/checkout")

        resp = auth_client.get("/checkout/success?token=tok_1", follow_redirects=False)

        assert resp.headers["location"] == "/orders"
        assert len(db.data["orders"]) == 1
        assert next(iter(db.data["orders"].values()))["payment_token"] == "tok_1"
        assert _cart(db, user) == []

    def test_provider_callback_post(self, auth_client, db, products):
        auth_client.post("/cart", data={"product_id": "p1"})
        auth_client.get("/checkout")

        resp = auth_client.post("/checkout/success", data={"token": "tok_1"}, follow_redirects=False)

        assert resp.headers["location"] == "/orders"
        assert len(db.data["orders"]) == 1

    def test_callback_without_session_cookie_finds_buyer(self, auth_client, db, products, user):
        auth_client.post("/cart", data={"product_id": "p1"})
        auth_client.get("/checkout")
        auth_client.cookies.clear()

        resp = auth_client.post("/checkout/success", data={"token": "tok_1"}, follow_redirects=False)

        assert resp.headers["location"] == "/orders"
        order = next(iter(db.data["orders"].values()))
        assert order["user_id"] == user["id"]
        assert _cart(db, user) == []

    def test_paid_token_cannot_be_replayed(self, auth_client, db, products, user):
        auth_client.post("/cart", data={"product_id": "p4"})
        auth_client.get("/checkout")
        auth_client.get("/checkout/success?token=tok_1")
        auth_client.post("/cart", data={"product_id": "p1"})

        resp = auth_client.get("/checkout/success?token=tok_1")

        assert "Checkout was cancelled." in resp.text
        assert [o["payment_token"] for o in db.data["orders"].values()] == ["tok_1"]
        assert _cart(db, user) == [{"product_id": "p1", "quantity": 1}]

    def test_cart_grown_after_payment_is_refused(self, auth_client, db, products, user):
        auth_client.post("/cart", data={"product_id": "p4"})
        auth_client.get("/checkout")
        auth_client.post("/cart", data={"product_id": "p1"})

        resp = auth_client.get("/checkout/success?token=tok_1")

        assert "Checkout was cancelled." in resp.text
        assert db.data.get("orders", {}) == {}

    def test_unpaid_success_goes_to_cancel(self, auth_client, db, products, gateway, user):
        auth_client.post("/cart", data={"product_id": "p1"})
        auth_client.get("/checkout")
        gateway.paid = False

        resp = auth_client.get("/checkout/success?token=tok_1")

        assert "Checkout was cancelled." in resp.text
        assert db.data.get("orders", {}) == {}
        assert _cart(db, user) == [{"product_id": "p1", "quantity": 1}]

    def test_success_without_token_is_refused(self, auth_client, db, products):
        auth_client.post("/cart", data={"product_id": "p1"})

        auth_client.get("/checkout/success")

        assert db.data.get("orders", {}) == {}


class TestErrorPages:
    def test_page_far_past_the_end_is_empty(self, client, products):
        resp = client.get("/products?page=10000000000")

        assert resp.status_code == 200
        assert "No Products Found!" in resp.text

    def test_datastore_outage_renders_500_page(self, client, db, monkeypatch):
        monkeypatch.setattr(db, "collection", MagicMock(side_effect=ServiceUnavailable("firestore down")))

        resp = client.get("/products")

        assert resp.status_code == 500
        assert "Some error occurred!" in resp.text
