"""Shared fixtures: in-memory Firestore, seeded catalog, and app clients with swapped collaborators."""

import pytest
from fastapi.testclient import TestClient

from storefront.config import settings
from storefront.core.deps import get_db, get_invoice_archive, get_mailer, get_payment_gateway
from storefront.core.security import hash_password
from storefront.main import app
from storefront.repositories import users as users_repo
from storefront.services.invoices import InvoiceArchive

from tests.fakes import FakeFirestore, FakeGateway, FakeMailer

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def products(db):
    """Seven products p1..p7 in insertion order; p1 costs 10, p2 costs 5."""
    col = db.data.setdefault("products", {})
    prices = [10.0, 5.0, 7.5, 1.0, 2.0, 3.0, 4.0]
    for i, price in enumerate(prices, start=1):
        col[f"p{i}"] = {
            "title": f"Product {i}",
            "price": price,
            "description": f"Description {i}",
            "image_url": f"https://img.example.com/{i}.png",
            "created_at": i,
        }
    return col


def make_user(db, email="ada@example.com", name="Ada", password=PASSWORD):
    uid = users_repo.create(db, name, email, hash_password(password))
    return users_repo.get(db, uid)


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def archive(tmp_path):
    return InvoiceArchive(str(tmp_path / "invoices"))


@pytest.fixture
def client(db, gateway, mailer, archive):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_invoice_archive] = lambda: archive
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client, user):
    resp = client.post("/login", data={"email": user["email"], "password": PASSWORD}, follow_redirects=False)
    assert resp.status_code == 303
    return client
