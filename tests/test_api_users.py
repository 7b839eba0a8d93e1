PASSWORD = "ValidPassword123!"

NEW_USER = {"userName": "Mei", "email": "mei@example.com", "tel": "0911222333", "password": "s3cret-pass"}

def test_register_and_login(client):
    resp = client.post("/users/register", json=NEW_USER)
    assert resp.status_code == 201

    login = client.post("/users/login", json={"email": NEW_USER["email"], "password": NEW_USER["password"]})

    assert login.status_code == 200
    body = login.json()
    assert body["userName"] == "Mei"
    assert body["admin"] is False
    assert body["tokenType"] == "bearer"

    me = client.get("/users", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["email"] == NEW_USER["email"]
    assert "password" not in me.json()

def test_duplicate_email_is_rejected(client):
    client.post("/users/register", json=NEW_USER)

    resp = client.post("/users/register", json={**NEW_USER, "userName": "Other"})

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "CONFLICT"

def test_register_requires_fields(client):
    resp = client.post("/users/register", json={"email": "x@example.com"})

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

def test_wrong_password(client, make_user):
    make_user(7, email="seven@example.com")

    resp = client.post("/users/login", json={"email": "seven@example.com", "password": "nope"})

    assert resp.status_code == 401

def test_login_with_fixture_password(client, make_user):
    make_user(7, email="seven@example.com")

    resp = client.post("/users/login", json={"email": "seven@example.com", "password": PASSWORD})

    assert resp.status_code == 200
    assert resp.json()["userId"] == 7

def test_check_email(client, make_user):
    make_user(7, email="seven@example.com")

    assert client.get("/users/check-email", params={"email": "seven@example.com"}).json() == {"exists": True}
    assert client.get("/users/check-email", params={"email": "nobody@example.com"}).json() == {"exists": False}
    assert client.get("/users/check-email", params={"email": "not-an-email"}).status_code == 400

def test_admin_lists_users(client, make_user, auth_headers):
    make_user(7)
    admin_id = make_user(admin=True)

    resp = client.get("/users", headers=auth_headers(admin_id))

    assert resp.status_code == 200
    assert {u["id"] for u in resp.json()} == {7, admin_id}

def test_update_own_profile(client, make_user, auth_headers):
    make_user(7)

    resp = client.patch("/users/profile", json={"userName": "Renamed", "tel": "0999"}, headers=auth_headers(7))

    assert resp.status_code == 200
    assert resp.json()["userName"] == "Renamed"
    assert resp.json()["tel"] == "0999"

def test_password_change_is_hashed(client, make_user, auth_headers):
    make_user(7, email="seven@example.com")

    client.patch("/users/profile", json={"password": "brand-new-pass"}, headers=auth_headers(7))

    assert client.post(
        "/users/login", json={"email": "seven@example.com", "password": "brand-new-pass"}
    ).status_code == 200
    assert client.post(
        "/users/login", json={"email": "seven@example.com", "password": PASSWORD}
    ).status_code == 401

def test_user_cannot_update_another_profile(client, make_user, auth_headers):
    make_user(7)
    make_user(8)

    resp = client.patch("/users/profile", json={"userName": "X", "targetUserId": 8}, headers=auth_headers(7))

    assert resp.status_code == 403

def test_admin_updates_another_profile(client, make_user, auth_headers):
    make_user(8)
    admin_id = make_user(admin=True)

    resp = client.patch("/users/profile", json={"userName": "X", "targetUserId": 8}, headers=auth_headers(admin_id))

    assert resp.status_code == 200
    assert resp.json()["id"] == 8

def test_empty_profile_patch(client, make_user, auth_headers):
    make_user(7)

    resp = client.patch("/users/profile", json={}, headers=auth_headers(7))

    assert resp.status_code == 400

def test_profile_email_must_stay_unique(client, make_user, auth_headers):
    make_user(7)
    make_user(8, email="taken@example.com")

    resp = client.patch("/users/profile", json={"email": "taken@example.com"}, headers=auth_headers(7))

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "CONFLICT"
