import os

# Must be set before the app (and its settings) are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import itertools

import pytest
from fastapi.testclient import TestClient

from database.base import Base
from database.connection import engine, SessionLocal, init_db
from main import app
from models.category import Category
from models.product import Product

_counter = itertools.count(1)


@pytest.fixture
def db_session():
    """A fresh schema with seeded categories for every test."""
    Base.metadata.drop_all(bind=engine)
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    with TestClient(app) as test_client:
        yield test_client
        # Release the shared connection before shutdown disposes the engine
        db_session.close()


@pytest.fixture
def category_id(db_session):
    return db_session.query(Category).filter(Category.name == "Electronics").one().id


@pytest.fixture
def other_category_id(db_session):
    return db_session.query(Category).filter(Category.name == "Books").one().id


@pytest.fixture
def make_user(client):
    """Register a user through the API; returns id, token and auth headers."""

    def _make_user(username=None, password="Secret123"):
        n = next(_counter)
        username = username or f"user{n}"
        response = client.post("/api/auth/register", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
            "full_name": f"User {n}",
        })
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {
            "id": data["user"]["id"],
            "username": username,
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return _make_user


@pytest.fixture
def make_product(client, category_id):
    """List a product through the API as ``seller``; returns the product dict."""

    def _make_product(seller, **overrides):
        payload = {
            "title": f"Item {next(_counter)}",
            "description": "Gently used",
            "price": 25.0,
            "category_id": category_id,
            "condition": "Good",
        }
        payload.update(overrides)
        response = client.post("/api/products", json=payload, headers=seller["headers"])
        assert response.status_code == 201, response.text
        return response.json()["data"]["product"]

    return _make_product


@pytest.fixture
def set_status(db_session):
    def _set_status(product_id, status):
        db_session.query(Product).filter(Product.id == product_id).update({Product.status: status})
        db_session.commit()

    return _set_status
