import pytest

NEW_PRODUCT = {"itemGroup": "swim", "title": "Goggles", "content": "Anti-fog", "price": 350, "imgUrls": "/g.png"}

@pytest.fixture
def admin_headers(make_user, auth_headers):
    return auth_headers(make_user(admin=True))

def test_admin_creates_product(client, admin_headers):
    resp = client.post("/admin/products", json=NEW_PRODUCT, headers=admin_headers)

    assert resp.status_code == 201
    product = resp.json()
    assert product["title"] == "Goggles"
    assert product["price"] == 350
    assert product["salePrice"] is None
    assert product["sell"] is True

    listed = client.get("/products").json()
    assert [p["id"] for p in listed] == [product["id"]]
    assert client.get(f"/products/{product['id']}").json()["itemGroup"] == "swim"

def test_partial_update_touches_only_given_fields(client, admin_headers, make_product):
    make_product(3, price="100", title="Towel")

    resp = client.patch("/admin/products/3", json={"salePrice": 75.5}, headers=admin_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["salePrice"] == 75.5
    assert body["price"] == 100
    assert body["title"] == "Towel"

def test_empty_update_is_rejected(client, admin_headers, make_product):
    make_product(3)

    assert client.patch("/admin/products/3", json={}, headers=admin_headers).status_code == 400

def test_title_cannot_be_cleared(client, admin_headers, make_product):
    make_product(3)

    assert client.patch("/admin/products/3", json={"title": None}, headers=admin_headers).status_code == 400

def test_delete_product(client, admin_headers, make_product):
    make_product(3)

    resp = client.delete("/admin/products/3", headers=admin_headers)

    assert resp.status_code == 200
    assert client.get("/products/3").status_code == 404

def test_unknown_product(client, admin_headers):
    assert client.get("/products/42").status_code == 404
    assert client.patch("/admin/products/42", json={"title": "X"}, headers=admin_headers).status_code == 404
    assert client.delete("/admin/products/42", headers=admin_headers).status_code == 404

def test_non_admin_cannot_manage_products(client, make_user, make_product, auth_headers):
    make_user(7)
    make_product(3)
    headers = auth_headers(7)

    assert client.post("/admin/products", json=NEW_PRODUCT, headers=headers).status_code == 403
    assert client.patch("/admin/products/3", json={"title": "X"}, headers=headers).status_code == 403
    assert client.delete("/admin/products/3", headers=headers).status_code == 403

def test_catalog_is_public(client, make_product):
    make_product(3)

    assert client.get("/products").status_code == 200
