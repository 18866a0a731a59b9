from datetime import date, datetime, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from barbershop import models  # noqa: F401  (registers tables)
from barbershop.auth import hash_password
from barbershop.db import get_session
from barbershop.main import app
from barbershop.models import Appointment, Barber, Product, Service, User

PASSWORD = "secret-pass-123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def get_test_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_test_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def tomorrow() -> date:
    return date.today() + timedelta(days=1)


@pytest.fixture
def make_user(session):
    def _make_user(email, role="client", name="Test User", password=PASSWORD):
        user = User(email=email, password_hash=hash_password(password), name=name, role=role)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_barber(session, make_user):
    def _make_barber(name, email=None, available=True):
        user = make_user(email or f"{name.lower()}@shop.test", role="barber", name=name)
        barber = Barber(user_id=user.id, name=name, available=available)
        session.add(barber)
        session.commit()
        session.refresh(barber)
        return barber

    return _make_barber


@pytest.fixture
def make_service(session):
    def _make_service(name="Haircut", duration_minutes=30, price=15.0):
        service = Service(name=name, duration_minutes=duration_minutes, price=price)
        session.add(service)
        session.commit()
        session.refresh(service)
        return service

    return _make_service


@pytest.fixture
def make_appointment(session):
    def _make_appointment(barber, service, day, hh, mm=0, status="confirmed", client_id=None):
        appt = Appointment(
            client_id=client_id or 1,
            barber_id=barber.id,
            service_id=service.id if service else None,
            starts_at=datetime.combine(day, time(hh, mm)),
            status=status,
        )
        session.add(appt)
        session.commit()
        session.refresh(appt)
        return appt

    return _make_appointment


@pytest.fixture
def make_product(session):
    def _make_product(name="Pomade", price=12.5, stock=3, category="Hair"):
        product = Product(name=name, price=price, stock=stock, category=category)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make_product


@pytest.fixture
def login(client):
    def _login(email, password=PASSWORD):
        response = client.post("/auth/login", data={"username": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login


@pytest.fixture
def admin_headers(make_user, login):
    make_user("admin@shop.test", role="admin", name="Admin")
    return login("admin@shop.test")


@pytest.fixture
def client_headers(make_user, login):
    make_user("client@shop.test", role="client", name="Carla")
    return login("client@shop.test")
