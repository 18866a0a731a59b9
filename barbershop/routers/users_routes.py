# barbershop/routers/users_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import User
from barbershop.schemas import UserCreate, UserPublic, ProfileUpdate, PasswordChange
from barbershop.auth import get_current_user, hash_password, verify_password, user_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=UserPublic)
def update_me(
    update: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    user = session.get(User, current_user["id"])
    if update.name is not None:
        user.name = update.name
    if update.phone is not None:
        user.phone = update.phone

    session.add(user)
    session.commit()
    session.refresh(user)
    return user_to_dict(user)


@router.post("/me/password", status_code=204)
def change_password(
    change: PasswordChange,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    user = session.get(User, current_user["id"])
    if not verify_password(change.current_password, user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")
    if change.new_password != change.confirm_password:
        raise HTTPException(status_code=422, detail="Passwords do not match")

    user.password_hash = hash_password(change.new_password)
    session.add(user)
    session.commit()
    logger.info("Password changed for user %s", user.id)


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    # 1) Check if email already exists
    existing = session.exec(
        select(User).where(User.email == user.email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 2) Create user in DB (self-registration is always a client)
    db_user = User(
        email=user.email,
        password_hash=hash_password(user.password),
        name=user.name,
        phone=user.phone,
        role="client",
    )

    session.add(db_user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Email already registered")
    session.refresh(db_user)  # fills db_user.id

    logger.info("Registered client %s", db_user.id)
    # 3) Return public user
    return user_to_dict(db_user)
