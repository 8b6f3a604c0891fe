from models.user import User


def _me(client, user):
    return client.get("/api/auth/me", headers=user["headers"]).json()["data"]["user"]


def test_create_product_scores_listing_and_credits_seller(client, make_user, category_id):
    seller = make_user()

    response = client.post("/api/products", json={
        "title": "Road Bike",
        "description": "x" * 150,
        "price": 400,
        "original_price": 1000,
        "category_id": category_id,
        "condition": "Good",
    }, headers=seller["headers"])

    assert response.status_code == 201
    product = response.json()["data"]["product"]
    assert product["sustainability_score"] == 85
    assert product["status"] == "available"
    assert product["view_count"] == 0
    assert product["seller_id"] == seller["id"]
    assert product["category_name"] == "Electronics"
    assert _me(client, seller)["eco_points"] == 110


def test_create_product_requires_authentication(client, category_id):
    response = client.post("/api/products", json={
        "title": "Lamp", "price": 10, "category_id": category_id, "condition": "Good"
    })
    assert response.status_code == 401


def test_create_product_reports_all_invalid_fields(client, make_user, category_id):
    seller = make_user()

    response = client.post("/api/products", json={
        "title": "ab",
        "price": 0,
        "category_id": category_id,
        "condition": "Broken",
    }, headers=seller["headers"])

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert {"body.title", "body.price", "body.condition"} <= fields
    assert _me(client, seller)["eco_points"] == 100


def test_create_product_with_unknown_category(client, make_user):
    seller = make_user()
    response = client.post("/api/products", json={
        "title": "Lamp", "price": 10, "category_id": 9999, "condition": "Good"
    }, headers=seller["headers"])

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid category"
    assert _me(client, seller)["eco_points"] == 100


def test_detail_counts_views_except_the_sellers_own(client, make_user, make_product):
    seller = make_user()
    visitor = make_user()
    product = make_product(seller)
    url = f"/api/products/{product['id']}"

    assert client.get(url, headers=seller["headers"]).json()["data"]["product"]["view_count"] == 0
    assert client.get(url).json()["data"]["product"]["view_count"] == 1
    assert client.get(url, headers=visitor["headers"]).json()["data"]["product"]["view_count"] == 2
    assert client.get(url, headers=seller["headers"]).json()["data"]["product"]["view_count"] == 2


def test_detail_flags_for_the_viewer(client, make_user, make_product):
    seller = make_user()
    buyer = make_user()
    product = make_product(seller)

    client.post("/api/users/wishlist", json={"product_id": product["id"]}, headers=buyer["headers"])
    client.post("/api/users/cart", json={"product_id": product["id"]}, headers=buyer["headers"])

    detail = client.get(f"/api/products/{product['id']}", headers=buyer["headers"]).json()["data"]["product"]
    assert detail["is_wishlisted"] is True
    assert detail["is_in_cart"] is True
    assert detail["seller_username"] == seller["username"]

    anonymous = client.get(f"/api/products/{product['id']}").json()["data"]["product"]
    assert anonymous["is_wishlisted"] is False
    assert anonymous["is_in_cart"] is False


def test_detail_related_products(client, make_user, make_product, other_category_id, set_status):
    seller = make_user()
    products = [make_product(seller) for _ in range(6)]
    make_product(seller, category_id=other_category_id)
    set_status(products[1]["id"], "sold")

    response = client.get(f"/api/products/{products[0]['id']}")

    related_ids = [p["id"] for p in response.json()["data"]["relatedProducts"]]
    assert len(related_ids) == 4
    assert products[0]["id"] not in related_ids
    assert products[1]["id"] not in related_ids
    assert related_ids == [p["id"] for p in reversed(products[2:])]


def test_detail_of_missing_sold_or_deleted_product_is_not_found(client, make_user, make_product, set_status):
    seller = make_user()
    sold = make_product(seller)
    deleted = make_product(seller)
    set_status(sold["id"], "sold")
    set_status(deleted["id"], "deleted")

    for product_id in (sold["id"], deleted["id"], 424242):
        response = client.get(f"/api/products/{product_id}")
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"


def test_update_product_only_by_seller(client, make_user, make_product):
    seller = make_user()
    other = make_user()
    product = make_product(seller)
    url = f"/api/products/{product['id']}"

    forbidden = client.put(url, json={"title": "Stolen"}, headers=other["headers"])
    assert forbidden.status_code == 403

    response = client.put(url, json={"title": "Renamed", "location": "Berlin"}, headers=seller["headers"])
    assert response.status_code == 200
    updated = response.json()["data"]["product"]
    assert updated["title"] == "Renamed"
    assert updated["location"] == "Berlin"
    assert updated["price"] == 25.0
    assert updated["updated_at"] is not None


def test_update_missing_product_or_empty_payload(client, make_user, make_product):
    seller = make_user()
    product = make_product(seller)

    assert client.put("/api/products/9999", json={"title": "Nope"}, headers=seller["headers"]).status_code == 404
    empty = client.put(f"/api/products/{product['id']}", json={}, headers=seller["headers"])
    assert empty.status_code == 400
    assert empty.json()["message"] == "No fields to update"


def test_score_is_recomputed_on_price_change_only(client, make_user, make_product):
    seller = make_user()
    product = make_product(seller, price=400, original_price=1000, condition="Good")
    assert product["sustainability_score"] == 80
    url = f"/api/products/{product['id']}"

    response = client.put(url, json={"condition": "Poor"}, headers=seller["headers"])
    assert response.json()["data"]["product"]["sustainability_score"] == 80

    response = client.put(url, json={"price": 600}, headers=seller["headers"])
    assert response.json()["data"]["product"]["sustainability_score"] == 50


def test_delete_is_soft_and_hides_product(client, db_session, make_user, make_product):
    seller = make_user()
    product = make_product(seller)
    kept = make_product(seller)
    url = f"/api/products/{product['id']}"

    other = make_user()
    assert client.delete(url, headers=other["headers"]).status_code == 403

    response = client.delete(url, headers=seller["headers"])
    assert response.status_code == 200

    assert client.get(url).status_code == 404
    listed = [p["id"] for p in client.get("/api/products").json()["data"]["products"]]
    assert listed == [kept["id"]]
    mine = [p["id"] for p in client.get("/api/products/user/my-listings", headers=seller["headers"]).json()["data"]["products"]]
    assert mine == [kept["id"]]

    again = client.delete(url, headers=seller["headers"])
    assert again.status_code == 409


def test_my_listings_include_sold_items_and_wishlist_counts(client, make_user, make_product, set_status):
    seller = make_user()
    fans = [make_user(), make_user()]
    popular = make_product(seller)
    sold = make_product(seller)
    set_status(sold["id"], "sold")
    for fan in fans:
        client.post("/api/users/wishlist", json={"product_id": popular["id"]}, headers=fan["headers"])

    response = client.get("/api/products/user/my-listings", headers=seller["headers"])

    listings = {p["id"]: p for p in response.json()["data"]["products"]}
    assert listings[popular["id"]]["wishlist_count"] == 2
    assert listings[sold["id"]]["status"] == "sold"
    assert listings[sold["id"]]["wishlist_count"] == 0


def test_categories_are_seeded(client):
    response = client.get("/api/products/meta/categories")

    assert response.status_code == 200
    categories = response.json()["data"]["categories"]
    names = [c["name"] for c in categories]
    assert len(names) == 8
    assert names == sorted(names)
    assert "Electronics" in names


def test_listing_points_accumulate(client, db_session, make_user, make_product):
    seller = make_user()
    for _ in range(3):
        make_product(seller)

    db_session.expire_all()
    user = db_session.query(User).filter(User.id == seller["id"]).one()
    assert user.eco_points == 130
