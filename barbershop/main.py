# barbershop/main.py

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session, select

from barbershop.config import get_settings
from barbershop.db import create_db_and_tables, engine
from barbershop.models import User
from barbershop.auth import hash_password
from barbershop.slots import SlotLookupError
from barbershop.routers import (
    admin_routes,
    appointments_routes,
    auth_routes,
    barbers_routes,
    gallery_routes,
    orders_routes,
    products_routes,
    reviews_routes,
    services_routes,
    users_routes,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def ensure_admin(session: Session, email: str, password: str):
    """Create the configured admin account, or promote it if it already exists."""
    user = session.exec(select(User).where(User.email == email)).first()
    if user is None:
        user = User(email=email, password_hash=hash_password(password), name="Admin", role="admin")
        logger.info("Creating admin account %s", email)
    elif user.role != "admin":
        user.role = "admin"
        logger.info("Promoting %s to admin", email)
    else:
        return user
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


app = FastAPI(title="Barbershop API")

app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(barbers_routes.router)
app.include_router(services_routes.router)
app.include_router(appointments_routes.router)
app.include_router(products_routes.router)
app.include_router(orders_routes.router)
app.include_router(reviews_routes.router)
app.include_router(gallery_routes.router)
app.include_router(admin_routes.router)


@app.exception_handler(SlotLookupError)
def slot_lookup_error_handler(request: Request, exc: SlotLookupError):
    logger.error("Availability lookup failed on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Could not check availability, try again"})


@app.on_event("startup")
def on_startup():
    settings = get_settings()
    configure_logging(settings.log_level)
    create_db_and_tables()
    if settings.admin_email and settings.admin_password:
        with Session(engine) as session:
            ensure_admin(session, settings.admin_email, settings.admin_password)


@app.get("/health")
def health_check():
    return {"status": "ok"}
