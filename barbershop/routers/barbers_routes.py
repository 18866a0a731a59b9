# barbershop/routers/barbers_routes.py

import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Appointment, Barber, Service
from barbershop.schemas import AvailabilityResponse, AppointmentDetail, BarberPublic, BarberStats
from barbershop.auth import get_current_user
from barbershop.deps import require_role
from barbershop.slots import InvalidSlotRequest, SlotLookupError, SpecificBarber, parse_selector
from barbershop.store import appointment_details, day_bounds, day_slots, revenue

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/barbers",
    tags=["barbers"],
)

APPOINTMENT_FILTERS = ("upcoming", "pending", "confirmed", "completed", "cancelled", "all")


def barber_for_user(session: Session, current_user: dict) -> Barber:
    require_role(current_user, "barber")
    barber = session.exec(
        select(Barber).where(Barber.user_id == current_user["id"])
    ).first()
    if barber is None:
        raise HTTPException(status_code=404, detail="No barber profile linked to this account")
    return barber


@router.get("", response_model=List[BarberPublic])
def list_barbers(session: Session = Depends(get_session)):
    return session.exec(
        select(Barber).where(Barber.available == True).order_by(Barber.name)  # noqa: E712
    ).all()


@router.get("/{barber}/availability", response_model=AvailabilityResponse)
def barber_availability(
    barber: str,
    date: date,
    service_id: int,
    session: Session = Depends(get_session),
):
    # 1) Validate inputs
    try:
        selector = parse_selector(barber)
    except InvalidSlotRequest as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    if date < datetime.now().date():
        raise HTTPException(status_code=422, detail="Cannot check availability for a past date")

    service = session.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service Not Found")

    if isinstance(selector, SpecificBarber):
        db_barber = session.get(Barber, selector.barber_id)
        if db_barber is None or not db_barber.available:
            raise HTTPException(status_code=404, detail="Barber Not Found")

    # 2) Compute the grid
    try:
        slots = day_slots(session, date, service.duration_minutes, selector)
    except InvalidSlotRequest as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except SlotLookupError as exc:
        logger.error("Availability lookup failed for %s on %s: %s", barber, date, exc)
        raise HTTPException(status_code=503, detail="Could not check availability, try again")

    return {
        "date": date,
        "barber": barber.strip().lower(),
        "service_id": service.id,
        "slots": [
            {
                "time": s.time,
                "available": s.available,
                "candidate_barber_id": s.candidate_barber_id,
            }
            for s in slots
        ],
    }


@router.get("/me/appointments", response_model=List[AppointmentDetail])
def list_barber_appointments(
    status: str = "upcoming",
    on_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    barber = barber_for_user(session, current_user)

    if status not in APPOINTMENT_FILTERS:
        raise HTTPException(status_code=422, detail=f"status must be one of {', '.join(APPOINTMENT_FILTERS)}")

    stmt = select(Appointment).where(Appointment.barber_id == barber.id)

    if on_date is not None:
        day_start_dt, day_end_dt = day_bounds(on_date)
        stmt = stmt.where(Appointment.starts_at >= day_start_dt).where(Appointment.starts_at < day_end_dt)

    if status == "upcoming":
        stmt = stmt.where(Appointment.status.in_(["pending", "confirmed"]))
    elif status != "all":
        stmt = stmt.where(Appointment.status == status)

    # closest first
    stmt = stmt.order_by(Appointment.starts_at)

    return appointment_details(session, session.exec(stmt).all())


@router.get("/me/stats", response_model=BarberStats)
def barber_stats(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    barber = barber_for_user(session, current_user)
    day_start_dt, day_end_dt = day_bounds(datetime.now().date())

    def count(*conditions) -> int:
        stmt = select(func.count()).select_from(Appointment).where(Appointment.barber_id == barber.id)
        for condition in conditions:
            stmt = stmt.where(condition)
        return session.exec(stmt).one()

    return {
        "today_count": count(Appointment.starts_at >= day_start_dt, Appointment.starts_at < day_end_dt),
        "pending_count": count(Appointment.status == "pending"),
        "confirmed_or_completed_count": count(Appointment.status.in_(["confirmed", "completed"])),
        "total_revenue": revenue(session, ["confirmed", "completed"], barber_id=barber.id),
    }
