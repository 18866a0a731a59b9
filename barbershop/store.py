# barbershop/store.py
"""
Read side of the data store.

Rows come back from SQL joined (appointment + service + barber + client) and
any side of the join may be missing once an admin deletes a service or a
user. Everything here flattens those rows into one fixed shape before route
or slot code sees them.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from barbershop.config import get_settings
from barbershop.models import Appointment, Barber, Service, User
from barbershop.slots import (
    BarberSelector,
    BookedInterval,
    SlotLookupError,
    TimeSlot,
    compute_slots,
)

logger = logging.getLogger(__name__)

REMOVED_SERVICE = "Removed service"
REMOVED_BARBER = "Removed barber"
REMOVED_CLIENT = "Client"


def day_bounds(day: date):
    day_start_dt = datetime.combine(day, datetime.min.time())
    return day_start_dt, day_start_dt + timedelta(days=1)


class SessionSlotReader:
    """Feeds ``compute_slots`` from a database session."""

    def __init__(self, session: Session, default_service_minutes: int = 30):
        self.session = session
        self.default_service_minutes = default_service_minutes

    def booked_intervals(self, day: date, barber_id: Optional[int] = None) -> List[BookedInterval]:
        day_start_dt, day_end_dt = day_bounds(day)

        stmt = (
            select(Appointment, Service)
            .join(Service, Appointment.service_id == Service.id, isouter=True)
            .where(Appointment.starts_at >= day_start_dt)
            .where(Appointment.starts_at < day_end_dt)
            .where(Appointment.status != "cancelled")
        )
        if barber_id is not None:
            stmt = stmt.where(Appointment.barber_id == barber_id)

        try:
            rows = self.session.exec(stmt).all()
        except SQLAlchemyError as exc:
            logger.error("Failed to load appointments for %s: %s", day, exc)
            raise SlotLookupError(f"could not load appointments for {day}") from exc

        booked = []
        for appt, service in rows:
            minutes = service.duration_minutes if service is not None else self.default_service_minutes
            booked.append(
                BookedInterval(
                    barber_id=appt.barber_id,
                    start=appt.starts_at,
                    end=appt.starts_at + timedelta(minutes=minutes),
                )
            )
        return booked

    def available_barber_ids(self) -> List[int]:
        try:
            return list(
                self.session.exec(
                    select(Barber.id).where(Barber.available == True).order_by(Barber.id)  # noqa: E712
                ).all()
            )
        except SQLAlchemyError as exc:
            logger.error("Failed to load barber roster: %s", exc)
            raise SlotLookupError("could not load barber roster") from exc


def day_slots(session: Session, day: date, duration_minutes: int, selector: BarberSelector) -> List[TimeSlot]:
    settings = get_settings()
    reader = SessionSlotReader(session, default_service_minutes=settings.default_service_minutes)
    return compute_slots(day, duration_minutes, selector, reader, hours=settings.business_hours())


def appointment_details(session: Session, appointments: Iterable[Appointment]) -> List[dict]:
    """Appointments with service/barber/client names filled in (or placeholders)."""
    appointments = list(appointments)
    service_ids = {a.service_id for a in appointments if a.service_id is not None}
    barber_ids = {a.barber_id for a in appointments}
    client_ids = {a.client_id for a in appointments}

    services = {}
    barbers = {}
    clients = {}
    if service_ids:
        services = {s.id: s for s in session.exec(select(Service).where(Service.id.in_(service_ids))).all()}
    if barber_ids:
        barbers = {b.id: b for b in session.exec(select(Barber).where(Barber.id.in_(barber_ids))).all()}
    if client_ids:
        clients = {u.id: u for u in session.exec(select(User).where(User.id.in_(client_ids))).all()}

    details = []
    for a in appointments:
        service = services.get(a.service_id)
        barber = barbers.get(a.barber_id)
        client = clients.get(a.client_id)
        details.append({
            "id": a.id,
            "starts_at": a.starts_at,
            "client_id": a.client_id,
            "barber_id": a.barber_id,
            "service_id": a.service_id,
            "status": a.status,
            "service_name": service.name if service else REMOVED_SERVICE,
            "service_price": service.price if service else 0,
            "service_duration": service.duration_minutes if service else 0,
            "barber_name": barber.name if barber else REMOVED_BARBER,
            "client_name": (client.name or client.email) if client else REMOVED_CLIENT,
        })
    return details


def revenue(session: Session, statuses: Iterable[str], barber_id: Optional[int] = None) -> float:
    stmt = (
        select(Service.price)
        .join(Appointment, Appointment.service_id == Service.id)
        .where(Appointment.status.in_(list(statuses)))
    )
    if barber_id is not None:
        stmt = stmt.where(Appointment.barber_id == barber_id)
    return float(sum(session.exec(stmt).all()))
