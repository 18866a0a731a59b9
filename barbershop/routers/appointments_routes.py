# barbershop/routers/appointments_routes.py

import logging
from datetime import datetime, date
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Appointment, Barber, Service
from barbershop.schemas import (
    AppointmentCreate,
    AppointmentDetail,
    AppointmentPublic,
    StatusUpdate,
)
from barbershop.auth import get_current_user
from barbershop.deps import require_role
from barbershop.slots import InvalidSlotRequest, SlotLookupError, SpecificBarber, find_slot, parse_selector
from barbershop.store import appointment_details, day_bounds, day_slots

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["appointments"],
)

# allowed status changes; completed and cancelled are final
TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


@router.post("/appointments", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")

    # 1) Validate barber choice and service
    try:
        selector = parse_selector(appt.barber)
    except InvalidSlotRequest as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    service = session.get(Service, appt.service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service Not Found")

    if isinstance(selector, SpecificBarber):
        barber = session.get(Barber, selector.barber_id)
        if barber is None or not barber.available:
            raise HTTPException(status_code=404, detail="Barber Not Found")

    # 2) Prevent booking in the past (naive local time)
    appt_start = appt.starts_at.replace(tzinfo=None)
    if appt_start < datetime.now():
        raise HTTPException(status_code=422, detail="Cannot book an appointment in the past")

    # slots start on whole minutes
    if appt_start.second or appt_start.microsecond:
        raise HTTPException(status_code=422, detail="Start time is not a bookable slot")

    # 3) Re-run the slot grid for that day and pick the requested start
    try:
        slots = day_slots(session, appt_start.date(), service.duration_minutes, selector)
    except SlotLookupError as exc:
        logger.error("Availability lookup failed while booking: %s", exc)
        raise HTTPException(status_code=503, detail="Could not check availability, try again")

    slot = find_slot(slots, appt_start.strftime("%H:%M"))
    if slot is None:
        raise HTTPException(status_code=422, detail="Start time is not a bookable slot")
    if not slot.available:
        logger.warning("Rejected booking at %s: slot taken", appt_start)
        raise HTTPException(status_code=409, detail="Appointment overlaps an existing appointment")

    # 4) Create and save appointment (with the free barber when "any" was chosen)
    db_appt = Appointment(
        client_id=current_user["id"],
        barber_id=slot.candidate_barber_id,
        service_id=service.id,
        starts_at=appt_start,
        status="pending",
    )

    session.add(db_appt)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Appointment already exists for that start time")

    session.refresh(db_appt)  # fills db_appt.id
    logger.info(
        "Booked appointment %s: barber %s at %s for client %s",
        db_appt.id, db_appt.barber_id, db_appt.starts_at, db_appt.client_id,
    )
    return db_appt


@router.get("/clients/me/appointments", response_model=List[AppointmentDetail])
def list_my_appointments(
    status: Optional[str] = "all",
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if status not in ("pending", "confirmed", "completed", "cancelled", "all"):
        raise HTTPException(status_code=422, detail="status must be a valid appointment status or 'all'")

    stmt = select(Appointment).where(Appointment.client_id == current_user["id"])

    if status != "all":
        stmt = stmt.where(Appointment.status == status)

    # newest first
    stmt = stmt.order_by(Appointment.starts_at.desc())

    return appointment_details(session, session.exec(stmt).all())


@router.patch("/appointments/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # 1) Find the appointment in DB
    target = session.get(Appointment, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    # 2) Authorization: the client who booked
    if current_user["id"] != target.client_id:
        raise HTTPException(status_code=403, detail="Forbidden")

    # 3) Only open appointments can be cancelled
    if target.status not in ("pending", "confirmed"):
        raise HTTPException(status_code=409, detail=f"Appointment already {target.status}")

    # 4) Cancel and persist
    target.status = "cancelled"
    session.add(target)
    session.commit()
    session.refresh(target)

    logger.info("Client %s cancelled appointment %s", current_user["id"], target.id)
    return target


@router.patch("/appointments/{appt_id}/status", response_model=AppointmentPublic)
def update_appointment_status(
    appt_id: int,
    update: StatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin", "barber")

    target = session.get(Appointment, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    # barbers only manage their own calendar
    if current_user["role"] == "barber":
        barber = session.exec(
            select(Barber).where(Barber.user_id == current_user["id"])
        ).first()
        if barber is None or barber.id != target.barber_id:
            raise HTTPException(status_code=403, detail="Forbidden")

    new_status = update.status.value
    if new_status not in TRANSITIONS.get(target.status, set()):
        raise HTTPException(
            status_code=409,
            detail=f"Cannot change status from {target.status} to {new_status}",
        )

    old_status = target.status
    target.status = new_status
    session.add(target)
    session.commit()
    session.refresh(target)

    logger.info("Appointment %s: %s -> %s by user %s", target.id, old_status, new_status, current_user["id"])
    return target


@router.get("/admin/appointments", response_model=List[AppointmentDetail])
def admin_list_appointments(
    status: Optional[str] = "all",
    on_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    if status not in ("pending", "confirmed", "completed", "cancelled", "history", "all"):
        raise HTTPException(status_code=422, detail="status must be a valid appointment status, 'history' or 'all'")

    stmt = select(Appointment)

    if on_date is not None:
        day_start_dt, day_end_dt = day_bounds(on_date)
        stmt = stmt.where(Appointment.starts_at >= day_start_dt).where(Appointment.starts_at < day_end_dt)

    if status == "history":
        stmt = stmt.where(Appointment.status.in_(["completed", "cancelled"]))
    elif status != "all":
        stmt = stmt.where(Appointment.status == status)

    stmt = stmt.order_by(Appointment.starts_at)

    return appointment_details(session, session.exec(stmt).all())
