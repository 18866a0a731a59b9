# barbershop/routers/services_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Appointment, Service
from barbershop.schemas import ServiceBase, ServicePublic, ServiceUpdate
from barbershop.auth import get_current_user
from barbershop.deps import require_role

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/services",
    tags=["services"],
)


@router.get("", response_model=List[ServicePublic])
def list_services(session: Session = Depends(get_session)):
    return session.exec(select(Service).order_by(Service.price)).all()


@router.post("", response_model=ServicePublic, status_code=201)
def create_service(
    service: ServiceBase,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_service = Service(**service.model_dump())
    session.add(db_service)
    session.commit()
    session.refresh(db_service)

    logger.info("Created service %s (%s min)", db_service.name, db_service.duration_minutes)
    return db_service


@router.patch("/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: int,
    update: ServiceUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_service = session.get(Service, service_id)
    if db_service is None:
        raise HTTPException(status_code=404, detail="Service Not Found")

    for key, value in update.model_dump(exclude_unset=True).items():
        setattr(db_service, key, value)

    session.add(db_service)
    session.commit()
    session.refresh(db_service)
    return db_service


@router.delete("/{service_id}", status_code=204)
def delete_service(
    service_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_service = session.get(Service, service_id)
    if db_service is None:
        raise HTTPException(status_code=404, detail="Service Not Found")

    # past appointments keep their row but lose the link
    linked = session.exec(
        select(Appointment).where(Appointment.service_id == service_id)
    ).all()
    for appt in linked:
        appt.service_id = None
        session.add(appt)

    session.delete(db_service)
    session.commit()
    logger.info("Deleted service %s (%d appointments unlinked)", service_id, len(linked))
