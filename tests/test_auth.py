from bookstore.models.users import Role, User, UserSession


def _signup(client, email="reader@bookstore.com"):
    return client.post("/auth/signup", json={
        "email": email, "password": "secret123", "first_name": "Ada", "last_name": "Reader",
    })


def test_signup_creates_client_and_usable_token(client, db):
    resp = _signup(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "User successfully registered"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "reader@bookstore.com"
    assert me.json()["role"] == "CLIENT"
    assert db.query(User).one().role == Role.CLIENT


def test_duplicate_email_conflicts(client):
    assert _signup(client).status_code == 201
    resp = _signup(client, email="READER@bookstore.com")
    assert resp.status_code == 409
    assert resp.json()["detail"] == "User with this email already exists"


def test_signup_validation_lists_fields(client):
    resp = client.post("/auth/signup", json={"email": "not-an-email", "password": "x"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["detail"] == "Validation failed"
    fields = {e["field"] for e in body["errors"]}
    assert {"email", "password", "first_name", "last_name"} <= fields


def test_login_with_bad_password(client, customer):
    resp = client.post("/auth/login", json={"email": customer.email, "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


def test_login_returns_access_and_refresh_tokens(client, customer, db):
    resp = client.post("/auth/login", json={"email": customer.email, "password": "secret123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["access_token"] and body["refresh_token"]
    assert body["token_type"] == "bearer"
    assert db.query(UserSession).filter_by(user_id=customer.id).count() == 1


def test_signout_ends_the_session(client, customer, login):
    headers = login(customer.email)
    assert client.post("/auth/signout", headers=headers).json() == {"message": "Successfully signed out"}

    resp = client.get("/auth/me", headers=headers)
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_refresh_issues_a_new_access_token(client, customer):
    tokens = client.post("/auth/login", json={"email": customer.email, "password": "secret123"}).json()
    resp = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert resp.status_code == 200
    new_token = resp.json()["access_token"]
    assert new_token != tokens["access_token"]
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {new_token}"}).status_code == 200

    assert client.post("/auth/refresh", json={"refresh_token": "nope"}).status_code == 401


def test_missing_or_garbage_token(client):
    assert client.get("/cart").status_code == 401
    resp = client.get("/cart", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_signout_revokes_refresh_tokens(client, customer):
    tokens = client.post("/auth/login", json={"email": customer.email, "password": "secret123"}).json()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}
    assert client.post("/auth/signout", headers=headers).status_code == 200

    resp = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert resp.status_code == 401
