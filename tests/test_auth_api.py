from barbershop.auth import create_access_token
from barbershop.main import ensure_admin
from barbershop.models import User


def register(client, email="new@shop.test", password="long-enough-1", name="Nuno", phone="912345678"):
    return client.post("/users", json={"email": email, "password": password, "name": name, "phone": phone})


def test_register_and_login(client, login):
    response = register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "client"
    assert body["name"] == "Nuno"

    headers = login("new@shop.test", "long-enough-1")
    me = client.get("/me", headers=headers).json()
    assert me["email"] == "new@shop.test"
    assert me["phone"] == "912345678"


def test_register_duplicate_email(client):
    assert register(client).status_code == 201
    assert register(client).status_code == 409


def test_register_rejects_short_password(client):
    assert register(client, password="short").status_code == 422


def test_register_cannot_choose_role(client):
    response = client.post(
        "/users",
        json={"email": "sneaky@shop.test", "password": "long-enough-1", "name": "S", "role": "admin"},
    )
    assert response.json()["role"] == "client"


def test_login_with_wrong_password(client, make_user):
    make_user("someone@shop.test")

    response = client.post("/auth/login", data={"username": "someone@shop.test", "password": "nope-nope"})

    assert response.status_code == 401


def test_invalid_and_orphan_tokens(client):
    assert client.get("/me", headers={"Authorization": "Bearer not-a-token"}).status_code == 401

    token = create_access_token({"sub": "ghost@shop.test"})
    assert client.get("/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_update_profile(client, client_headers):
    response = client.patch("/me", json={"name": "Carla Silva", "phone": "934000000"}, headers=client_headers)

    assert response.status_code == 200
    assert response.json()["name"] == "Carla Silva"
    assert client.get("/me", headers=client_headers).json()["phone"] == "934000000"


def test_change_password(client, client_headers, login):
    bad_current = client.post(
        "/me/password",
        json={"current_password": "wrong-one-1", "new_password": "brand-new-pass", "confirm_password": "brand-new-pass"},
        headers=client_headers,
    )
    assert bad_current.status_code == 401

    mismatch = client.post(
        "/me/password",
        json={"current_password": "secret-pass-123", "new_password": "brand-new-pass", "confirm_password": "other-pass-1"},
        headers=client_headers,
    )
    assert mismatch.status_code == 422

    ok = client.post(
        "/me/password",
        json={"current_password": "secret-pass-123", "new_password": "brand-new-pass", "confirm_password": "brand-new-pass"},
        headers=client_headers,
    )
    assert ok.status_code == 204
    login("client@shop.test", "brand-new-pass")


def test_ensure_admin_creates_and_promotes(session, make_user):
    created = ensure_admin(session, "boss@shop.test", "boss-pass-123")
    assert created.role == "admin"

    make_user("staff@shop.test", role="client")
    promoted = ensure_admin(session, "staff@shop.test", "ignored-pass")
    assert promoted.role == "admin"

    assert ensure_admin(session, "boss@shop.test", "boss-pass-123").id == created.id
    assert session.get(User, created.id).role == "admin"
