# barbershop/routers/admin_routes.py

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func, or_
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Appointment, Barber, Product, Review, User
from barbershop.schemas import (
    AdminUserUpdate,
    BarberCreate,
    BarberPublic,
    BarberUpdate,
    DashboardStats,
    UserPublic,
    UserRole,
)
from barbershop.auth import get_current_user, hash_password, user_to_dict
from barbershop.deps import require_role
from barbershop.store import appointment_details, day_bounds, revenue

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
)


def get_admin(current_user: dict = Depends(get_current_user)) -> dict:
    require_role(current_user, "admin")
    return current_user


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_admin),
):
    day_start_dt, day_end_dt = day_bounds(datetime.now().date())

    total_clients = session.exec(
        select(func.count()).select_from(User).where(User.role == "client")
    ).one()
    today_appointments = session.exec(
        select(func.count()).select_from(Appointment)
        .where(Appointment.starts_at >= day_start_dt)
        .where(Appointment.starts_at < day_end_dt)
    ).one()
    total_products = session.exec(select(func.count()).select_from(Product)).one()
    total_reviews = session.exec(select(func.count()).select_from(Review)).one()

    recent = session.exec(
        select(Appointment).order_by(Appointment.created_at.desc(), Appointment.id.desc()).limit(5)
    ).all()

    return {
        "total_clients": total_clients,
        "today_appointments": today_appointments,
        "total_products": total_products,
        "total_reviews": total_reviews,
        "total_revenue": revenue(session, ["completed"]),
        "recent_appointments": appointment_details(session, recent),
    }


# --- users ---

@router.get("/users", response_model=List[UserPublic])
def list_users(
    role: Optional[UserRole] = None,
    q: Optional[str] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_admin),
):
    stmt = select(User)
    if role is not None:
        stmt = stmt.where(User.role == role.value)
    if q:
        pattern = f"%{q.lower()}%"
        stmt = stmt.where(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))

    return [user_to_dict(u) for u in session.exec(stmt.order_by(User.created_at.desc())).all()]


@router.patch("/users/{user_id}", response_model=UserPublic)
def update_user(
    user_id: int,
    update: AdminUserUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_admin),
):
    user = session.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    if update.name is not None:
        user.name = update.name
    if update.phone is not None:
        user.phone = update.phone
    if update.role is not None and update.role.value != user.role:
        logger.info("User %s role %s -> %s", user.id, user.role, update.role.value)
        user.role = update.role.value

    session.add(user)
    session.commit()
    session.refresh(user)
    return user_to_dict(user)


@router.delete("/users/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_admin),
):
    if user_id == current_user["id"]:
        raise HTTPException(status_code=409, detail="You cannot delete your own account")

    user = session.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    session.delete(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="User still has appointments or orders")
    logger.info("Deleted user %s", user_id)


# --- barbers ---

@router.post("/barbers", response_model=BarberPublic, status_code=201)
def create_barber(
    barber: BarberCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_admin),
):
    # 1) Check if email already exists
    existing = session.exec(
        select(User).where(User.email == barber.email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 2) Login account and barber profile in one transaction
    db_user = User(
        email=barber.email,
        password_hash=hash_password(barber.password),
        name=barber.name,
        role="barber",
    )
    session.add(db_user)
    session.flush()  # fills db_user.id

    db_barber = Barber(
        user_id=db_user.id,
        name=barber.name,
        bio=barber.bio,
        photo_url=barber.photo_url,
        available=True,
    )
    session.add(db_barber)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Email already registered")

    session.refresh(db_barber)
    logger.info("Created barber %s (user %s)", db_barber.id, db_user.id)
    return db_barber


@router.patch("/barbers/{barber_id}", response_model=BarberPublic)
def update_barber(
    barber_id: int,
    update: BarberUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_admin),
):
    db_barber = session.get(Barber, barber_id)
    if db_barber is None:
        raise HTTPException(status_code=404, detail="Barber Not Found")

    for key, value in update.model_dump(exclude_unset=True).items():
        setattr(db_barber, key, value)

    session.add(db_barber)
    session.commit()
    session.refresh(db_barber)
    return db_barber


@router.get("/barbers", response_model=List[BarberPublic])
def list_all_barbers(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_admin),
):
    return session.exec(select(Barber).order_by(Barber.name)).all()
