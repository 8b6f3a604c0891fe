import pytest

from services.review import ReviewService


@pytest.fixture
def purchase(client, make_user, make_product):
    seller = make_user()
    buyer = make_user()
    product = make_product(seller)
    response = client.post("/api/users/orders", json={
        "items": [{"product_id": product["id"], "quantity": 1}],
        "shipping_address": "1 Green Street",
    }, headers=buyer["headers"])
    assert response.status_code == 201
    return seller, buyer, product


def _review(client, user, product_id, rating=5, comment="Great"):
    return client.post(
        "/api/users/reviews",
        json={"product_id": product_id, "rating": rating, "comment": comment},
        headers=user["headers"],
    )


def test_buyer_reviews_purchased_product(client, purchase):
    seller, buyer, product = purchase

    response = _review(client, buyer, product["id"], rating=4)

    assert response.status_code == 201
    review = response.json()["data"]["review"]
    assert review["rating"] == 4
    assert review["seller_id"] == seller["id"]
    assert review["reviewer_username"] == buyer["username"]


def test_review_requires_purchase(client, make_user, purchase):
    _, _, product = purchase
    stranger = make_user()

    assert _review(client, stranger, product["id"]).status_code == 403


def test_seller_cannot_review_own_product(client, purchase):
    seller, _, product = purchase
    assert _review(client, seller, product["id"]).status_code == 400


def test_duplicate_review_is_conflict(client, purchase):
    _, buyer, product = purchase
    _review(client, buyer, product["id"])
    assert _review(client, buyer, product["id"]).status_code == 409


def test_rating_out_of_range(client, purchase):
    _, buyer, product = purchase
    assert _review(client, buyer, product["id"], rating=6).status_code == 400
    assert _review(client, buyer, product["id"], rating=0).status_code == 400


def test_review_of_missing_product(client, make_user):
    assert _review(client, make_user(), 9999).status_code == 404


def test_seller_reviews_with_average(client, make_user, make_product, purchase):
    seller, buyer, product = purchase
    _review(client, buyer, product["id"], rating=5)

    second = make_product(seller)
    other_buyer = make_user()
    client.post("/api/users/orders", json={
        "items": [{"product_id": second["id"], "quantity": 1}],
        "shipping_address": "2 Green Street",
    }, headers=other_buyer["headers"])
    _review(client, other_buyer, second["id"], rating=2)

    response = client.get(f"/api/users/{seller['id']}/reviews")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["summary"] == {"averageRating": 3.5, "totalReviews": 2}
    assert [r["rating"] for r in data["reviews"]] == [2, 5]


def test_reviews_for_seller_without_any(client, make_user):
    seller = make_user()
    data = client.get(f"/api/users/{seller['id']}/reviews").json()["data"]
    assert data == {"reviews": [], "summary": {"averageRating": 0.0, "totalReviews": 0}}


def test_reviews_for_unknown_user(client):
    assert client.get("/api/users/9999/reviews").status_code == 404


def _failing(*args, **kwargs):
    raise RuntimeError("database went away")


def test_unexpected_failure_reading_reviews(client, make_user, monkeypatch):
    seller = make_user()
    monkeypatch.setattr(ReviewService, "get_seller_reviews", staticmethod(_failing))

    response = client.get(f"/api/users/{seller['id']}/reviews")

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to fetch reviews"


def test_unexpected_failure_submitting_review(client, purchase, monkeypatch):
    _, buyer, product = purchase
    monkeypatch.setattr(ReviewService, "create_review", staticmethod(_failing))

    response = _review(client, buyer, product["id"])

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to submit review"
