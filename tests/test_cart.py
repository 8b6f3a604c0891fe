from models.cart import CartItem


def _add(client, user, product_id, quantity=1):
    return client.post("/api/users/cart", json={"product_id": product_id, "quantity": quantity}, headers=user["headers"])


def _cart(client, user):
    response = client.get("/api/users/cart", headers=user["headers"])
    assert response.status_code == 200
    return response.json()["data"]


def test_adding_same_product_merges_and_caps_quantity(client, make_user, make_product):
    seller = make_user()
    buyer = make_user()
    product = make_product(seller)

    first = _add(client, buyer, product["id"], 6)
    assert first.status_code == 200
    second = _add(client, buyer, product["id"], 7)
    assert second.status_code == 200
    assert second.json()["data"]["quantity"] == 10
    assert second.json()["data"]["cart_id"] == first.json()["data"]["cart_id"]

    cart = _cart(client, buyer)
    assert len(cart["items"]) == 1
    assert cart["summary"] == {"totalItems": 10, "totalAmount": 250.0}


def test_cart_totals_across_lines(client, make_user, make_product):
    seller = make_user()
    buyer = make_user()
    lamp = make_product(seller, price=12.5)
    chair = make_product(seller, price=40)
    _add(client, buyer, lamp["id"], 2)
    _add(client, buyer, chair["id"])

    cart = _cart(client, buyer)

    assert cart["summary"] == {"totalItems": 3, "totalAmount": 65.0}
    assert {item["id"] for item in cart["items"]} == {lamp["id"], chair["id"]}
    assert cart["items"][0]["seller_username"] == seller["username"]


def test_cannot_add_own_missing_or_unavailable_product(client, make_user, make_product, set_status):
    seller = make_user()
    buyer = make_user()
    own = make_product(seller)
    sold = make_product(seller)
    set_status(sold["id"], "sold")

    own_response = _add(client, seller, own["id"])
    assert own_response.status_code == 400
    assert own_response.json()["message"] == "You cannot add your own product to cart"

    assert _add(client, buyer, sold["id"]).status_code == 400
    assert _add(client, buyer, 9999).status_code == 404


def test_quantity_bounds(client, make_user, make_product):
    product = make_product(make_user())
    buyer = make_user()

    assert _add(client, buyer, product["id"], 0).status_code == 400
    assert _add(client, buyer, product["id"], 11).status_code == 400


def test_update_and_remove_only_own_lines(client, make_user, make_product):
    seller = make_user()
    buyer = make_user()
    stranger = make_user()
    product = make_product(seller)
    cart_id = _add(client, buyer, product["id"], 2).json()["data"]["cart_id"]

    assert client.put(f"/api/users/cart/{cart_id}", json={"quantity": 5}, headers=stranger["headers"]).status_code == 404
    assert client.delete(f"/api/users/cart/{cart_id}", headers=stranger["headers"]).status_code == 404

    response = client.put(f"/api/users/cart/{cart_id}", json={"quantity": 5}, headers=buyer["headers"])
    assert response.status_code == 200
    assert response.json()["data"]["quantity"] == 5
    assert client.put(f"/api/users/cart/{cart_id}", json={"quantity": 11}, headers=buyer["headers"]).status_code == 400

    assert client.delete(f"/api/users/cart/{cart_id}", headers=buyer["headers"]).status_code == 200
    assert _cart(client, buyer)["items"] == []
    assert client.delete(f"/api/users/cart/{cart_id}", headers=buyer["headers"]).status_code == 404


def test_lines_for_sold_products_are_hidden_but_kept(client, db_session, make_user, make_product, set_status):
    seller = make_user()
    buyer = make_user()
    product = make_product(seller)
    _add(client, buyer, product["id"], 3)
    set_status(product["id"], "sold")

    cart = _cart(client, buyer)

    assert cart["items"] == []
    assert cart["summary"] == {"totalItems": 0, "totalAmount": 0.0}
    assert db_session.query(CartItem).filter(CartItem.user_id == buyer["id"]).count() == 1


def test_cart_requires_authentication(client):
    assert client.get("/api/users/cart").status_code == 401
