def _add(client, user, product_id):
    return client.post("/api/users/wishlist", json={"product_id": product_id}, headers=user["headers"])


def _wishlist(client, user):
    return client.get("/api/users/wishlist", headers=user["headers"]).json()["data"]["items"]


def test_add_and_list(client, make_user, make_product):
    seller = make_user()
    user = make_user()
    product = make_product(seller)

    response = _add(client, user, product["id"])

    assert response.status_code == 201
    items = _wishlist(client, user)
    assert [item["id"] for item in items] == [product["id"]]
    assert items[0]["is_in_cart"] is False
    assert items[0]["seller_username"] == seller["username"]


def test_duplicate_add_is_conflict(client, make_user, make_product):
    user = make_user()
    product = make_product(make_user())
    _add(client, user, product["id"])

    response = _add(client, user, product["id"])

    assert response.status_code == 409
    assert len(_wishlist(client, user)) == 1


def test_cannot_wishlist_own_or_unavailable_product(client, make_user, make_product, set_status):
    seller = make_user()
    user = make_user()
    own = make_product(seller)
    deleted = make_product(seller)
    set_status(deleted["id"], "deleted")

    assert _add(client, seller, own["id"]).status_code == 400
    assert _add(client, user, deleted["id"]).status_code == 404
    assert _add(client, user, 9999).status_code == 404


def test_is_in_cart_flag(client, make_user, make_product):
    user = make_user()
    product = make_product(make_user())
    _add(client, user, product["id"])
    client.post("/api/users/cart", json={"product_id": product["id"]}, headers=user["headers"])

    assert _wishlist(client, user)[0]["is_in_cart"] is True


def test_remove(client, make_user, make_product):
    user = make_user()
    product = make_product(make_user())
    _add(client, user, product["id"])

    assert client.delete(f"/api/users/wishlist/{product['id']}", headers=user["headers"]).status_code == 200
    assert _wishlist(client, user) == []

    missing = client.delete(f"/api/users/wishlist/{product['id']}", headers=user["headers"])
    assert missing.status_code == 404


def test_sold_products_drop_out_of_wishlist(client, make_user, make_product, set_status):
    user = make_user()
    product = make_product(make_user())
    _add(client, user, product["id"])
    set_status(product["id"], "sold")

    assert _wishlist(client, user) == []
