import pytest

@pytest.fixture
def shopper(make_user, make_product):
    make_user(7)
    make_product(3, price="100", sale_price="80")
    make_product(4, price="10", sell=False)
    return 7

def test_add_then_add_again_increments(client, auth_headers, shopper):
    headers = auth_headers(shopper)

    first = client.post("/cart", json={"productId": 3, "qty": 2}, headers=headers)
    second = client.post("/cart", json={"productId": 3, "qty": 1}, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 201
    lines = client.get("/cart", headers=headers).json()
    assert len(lines) == 1
    assert lines[0]["productId"] == 3
    assert lines[0]["qty"] == 3
    assert lines[0]["title"] == "Product 3"
    assert lines[0]["price"] == 100
    assert lines[0]["salePrice"] == 80

def test_add_product_not_on_sale(client, auth_headers, shopper):
    resp = client.post("/cart", json={"productId": 4, "qty": 1}, headers=auth_headers(shopper))

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"

def test_add_unknown_product(client, auth_headers, shopper):
    resp = client.post("/cart", json={"productId": 999, "qty": 1}, headers=auth_headers(shopper))

    assert resp.status_code == 404

@pytest.mark.parametrize("qty", [0, -1])
def test_add_requires_positive_qty(client, auth_headers, shopper, qty):
    resp = client.post("/cart", json={"productId": 3, "qty": qty}, headers=auth_headers(shopper))

    assert resp.status_code == 400
    assert client.get("/cart", headers=auth_headers(shopper)).json() == []

def test_patch_sets_quantity(client, auth_headers, shopper, put_in_cart):
    put_in_cart(shopper, 3, 1)

    resp = client.patch("/cart", json={"productId": 3, "qty": 5}, headers=auth_headers(shopper))

    assert resp.status_code == 200
    assert client.get("/cart", headers=auth_headers(shopper)).json()[0]["qty"] == 5

def test_patch_to_zero_removes_line(client, auth_headers, shopper, put_in_cart):
    put_in_cart(shopper, 3, 1)

    resp = client.patch("/cart", json={"productId": 3, "qty": 0}, headers=auth_headers(shopper))

    assert resp.status_code == 200
    assert resp.json()["message"] == "Product removed from cart"
    assert client.get("/cart", headers=auth_headers(shopper)).json() == []

def test_patch_line_not_in_cart(client, auth_headers, shopper):
    resp = client.patch("/cart", json={"productId": 3, "qty": 2}, headers=auth_headers(shopper))

    assert resp.status_code == 404

def test_patch_negative_qty(client, auth_headers, shopper, put_in_cart):
    put_in_cart(shopper, 3, 1)

    resp = client.patch("/cart", json={"productId": 3, "qty": -2}, headers=auth_headers(shopper))

    assert resp.status_code == 400
    assert client.get("/cart", headers=auth_headers(shopper)).json()[0]["qty"] == 1

def test_delete_single_line(client, auth_headers, shopper, make_product, put_in_cart):
    make_product(6, price="5")
    put_in_cart(shopper, 3, 1)
    put_in_cart(shopper, 6, 2)

    resp = client.delete("/cart/3", headers=auth_headers(shopper))

    assert resp.status_code == 200
    lines = client.get("/cart", headers=auth_headers(shopper)).json()
    assert [line["productId"] for line in lines] == [6]
    assert client.delete("/cart/3", headers=auth_headers(shopper)).status_code == 404

def test_clear_cart(client, auth_headers, shopper, make_product, put_in_cart):
    make_product(6, price="5")
    put_in_cart(shopper, 3, 1)
    put_in_cart(shopper, 6, 2)

    resp = client.delete("/cart", headers=auth_headers(shopper))

    assert resp.status_code == 200
    assert client.get("/cart", headers=auth_headers(shopper)).json() == []

def test_admin_manages_another_users_cart(client, auth_headers, make_user, shopper):
    admin_id = make_user(admin=True)
    headers = auth_headers(admin_id)

    resp = client.post("/cart", json={"productId": 3, "qty": 2, "targetUserId": shopper}, headers=headers)

    assert resp.status_code == 201
    lines = client.get("/cart", params={"targetUserId": shopper}, headers=headers).json()
    assert [(line["productId"], line["qty"]) for line in lines] == [(3, 2)]
    # the admin's own cart stays empty
    assert client.get("/cart", headers=headers).json() == []

def test_user_cannot_touch_another_users_cart(client, auth_headers, make_user, shopper, put_in_cart):
    other = make_user(8)
    put_in_cart(other, 3, 1)
    headers = auth_headers(shopper)

    assert client.get("/cart", params={"targetUserId": other}, headers=headers).status_code == 403
    assert client.post(
        "/cart", json={"productId": 3, "qty": 1, "targetUserId": other}, headers=headers
    ).status_code == 403
    assert client.delete("/cart", params={"targetUserId": other}, headers=headers).status_code == 403
    assert len(client.get("/cart", headers=auth_headers(other)).json()) == 1

def test_cart_requires_login(client):
    assert client.get("/cart").status_code == 401
