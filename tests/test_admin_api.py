from datetime import date, datetime, time

from barbershop.models import Appointment


def test_admin_routes_need_admin(client, client_headers):
    assert client.get("/admin/dashboard", headers=client_headers).status_code == 403
    assert client.get("/admin/users", headers=client_headers).status_code == 403
    assert client.get("/admin/dashboard").status_code == 401


def test_create_barber_account(client, admin_headers, login):
    response = client.post(
        "/admin/barbers",
        json={"email": "rui@shop.test", "password": "barber-pass-1", "name": "Rui", "bio": "Fades"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    barber = response.json()
    assert barber["available"] is True
    assert [b["name"] for b in client.get("/barbers").json()] == ["Rui"]

    # the new account can log in and sees an empty calendar
    headers = login("rui@shop.test", "barber-pass-1")
    assert client.get("/me", headers=headers).json()["role"] == "barber"
    assert client.get("/barbers/me/appointments", headers=headers).json() == []

    duplicate = client.post(
        "/admin/barbers",
        json={"email": "rui@shop.test", "password": "barber-pass-1", "name": "Rui 2"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409


def test_barber_without_profile_gets_404(client, make_user, login):
    make_user("loose@shop.test", role="barber")
    headers = login("loose@shop.test")
    assert client.get("/barbers/me/appointments", headers=headers).status_code == 404


def test_deactivated_barber_leaves_public_roster(client, admin_headers, make_barber):
    rui = make_barber("Rui")
    ana = make_barber("Ana")

    response = client.patch(f"/admin/barbers/{rui.id}", json={"available": False}, headers=admin_headers)

    assert response.json()["available"] is False
    assert [b["id"] for b in client.get("/barbers").json()] == [ana.id]
    assert len(client.get("/admin/barbers", headers=admin_headers).json()) == 2
    assert client.patch("/admin/barbers/9999", json={"bio": "x"}, headers=admin_headers).status_code == 404


def test_manage_users(client, admin_headers, make_user):
    carla = make_user("carla@shop.test", name="Carla")
    make_user("bruno@shop.test", name="Bruno")

    clients = client.get("/admin/users", params={"role": "client"}, headers=admin_headers).json()
    assert {u["email"] for u in clients} == {"carla@shop.test", "bruno@shop.test"}

    found = client.get("/admin/users", params={"q": "CARL"}, headers=admin_headers).json()
    assert [u["id"] for u in found] == [carla.id]

    promoted = client.patch(f"/admin/users/{carla.id}", json={"role": "barber", "phone": "911"}, headers=admin_headers)
    assert promoted.json()["role"] == "barber"
    assert promoted.json()["phone"] == "911"
    assert client.patch(f"/admin/users/{carla.id}", json={"role": "king"}, headers=admin_headers).status_code == 422

    assert client.delete(f"/admin/users/{carla.id}", headers=admin_headers).status_code == 204
    assert client.delete(f"/admin/users/{carla.id}", headers=admin_headers).status_code == 404


def test_admin_cannot_delete_self(client, admin_headers):
    me = client.get("/me", headers=admin_headers).json()
    assert client.delete(f"/admin/users/{me['id']}", headers=admin_headers).status_code == 409


def test_dashboard(client, admin_headers, session, make_user, make_barber, make_service, make_product, make_appointment):
    carla = make_user("carla@shop.test", name="Carla")
    barber = make_barber("Rui")
    service = make_service(price=25.0)
    make_product()
    today = date.today()
    make_appointment(barber, service, today, 9, status="completed", client_id=carla.id)
    make_appointment(barber, service, today, 10, status="completed", client_id=carla.id)
    make_appointment(barber, service, today, 11, status="pending", client_id=carla.id)

    stats = client.get("/admin/dashboard", headers=admin_headers).json()

    assert stats["total_clients"] == 1
    assert stats["today_appointments"] == 3
    assert stats["total_products"] == 1
    assert stats["total_reviews"] == 0
    assert stats["total_revenue"] == 50.0
    assert len(stats["recent_appointments"]) == 3
    assert stats["recent_appointments"][0]["client_name"] == "Carla"


def test_services_crud(client, admin_headers, session, make_barber, make_appointment):
    created = client.post(
        "/services",
        json={"name": "Fade", "price": 18.0, "duration_minutes": 30},
        headers=admin_headers,
    )
    assert created.status_code == 201
    service_id = created.json()["id"]

    assert client.post("/services", json={"name": "Zero", "price": 1, "duration_minutes": 0}, headers=admin_headers).status_code == 422

    updated = client.patch(f"/services/{service_id}", json={"duration_minutes": 45}, headers=admin_headers)
    assert updated.json()["duration_minutes"] == 45
    assert [s["name"] for s in client.get("/services").json()] == ["Fade"]

    barber = make_barber("Rui")
    appt = Appointment(
        client_id=1,
        barber_id=barber.id,
        service_id=service_id,
        starts_at=datetime.combine(date(2030, 1, 2), time(10)),
    )
    session.add(appt)
    session.commit()

    assert client.delete(f"/services/{service_id}", headers=admin_headers).status_code == 204
    assert client.get("/services").json() == []
    session.expire_all()
    assert session.get(Appointment, appt.id).service_id is None
    assert client.delete(f"/services/{service_id}", headers=admin_headers).status_code == 404


def test_patch_rejects_null_for_required_fields(client, admin_headers, make_barber, make_service, make_product):
    service = make_service(duration_minutes=30)
    product = make_product(price=12.5)
    barber = make_barber("Rui")
    image = client.post("/gallery", json={"url": "https://img.test/a.jpg"}, headers=admin_headers).json()

    assert client.patch(f"/services/{service.id}", json={"duration_minutes": None}, headers=admin_headers).status_code == 422
    assert client.patch(f"/products/{product.id}", json={"price": None}, headers=admin_headers).status_code == 422
    assert client.patch(f"/admin/barbers/{barber.id}", json={"name": None}, headers=admin_headers).status_code == 422
    assert client.patch(f"/gallery/{image['id']}", json={"visible": None}, headers=admin_headers).status_code == 422

    # nullable columns can still be cleared
    cleared = client.patch(f"/admin/barbers/{barber.id}", json={"photo_url": None}, headers=admin_headers)
    assert cleared.status_code == 200
    assert cleared.json()["photo_url"] is None

    assert client.get(f"/products/{product.id}").json()["price"] == 12.5
    assert client.get("/services").json()[0]["duration_minutes"] == 30


def test_gallery_visibility(client, admin_headers):
    shown = client.post("/gallery", json={"url": "https://img.test/a.jpg", "description": "Fade"}, headers=admin_headers).json()
    hidden = client.post("/gallery", json={"url": "https://img.test/b.jpg", "visible": False}, headers=admin_headers).json()

    assert [g["id"] for g in client.get("/gallery").json()] == [shown["id"]]
    assert {g["id"] for g in client.get("/gallery/all", headers=admin_headers).json()} == {shown["id"], hidden["id"]}

    client.patch(f"/gallery/{hidden['id']}", json={"visible": True}, headers=admin_headers)
    assert len(client.get("/gallery").json()) == 2

    assert client.delete(f"/gallery/{shown['id']}", headers=admin_headers).status_code == 204
    assert [g["id"] for g in client.get("/gallery").json()] == [hidden["id"]]


def test_reviews(client, client_headers, make_barber):
    barber = make_barber("Rui")

    general = client.post("/reviews", json={"rating": 5, "comment": "Great"}, headers=client_headers)
    assert general.status_code == 201
    assert general.json()["reviewer_name"] == "Carla"

    for_barber = client.post("/reviews", json={"rating": 4, "barber_id": barber.id}, headers=client_headers)
    assert for_barber.json()["barber_id"] == barber.id

    assert client.post("/reviews", json={"rating": 6}, headers=client_headers).status_code == 422
    assert client.post("/reviews", json={"rating": 3, "barber_id": 9999}, headers=client_headers).status_code == 404
    assert client.post("/reviews", json={"rating": 3}).status_code == 401

    listed = client.get("/reviews").json()
    assert [r["rating"] for r in listed] == [4, 5]
