# barbershop/slots.py
"""
Appointment slot availability.

Given a day, the duration of the requested service and a barber selection,
``compute_slots`` walks the business day on a fixed grid and labels every
start time that still fits before closing as available or not.

The calculator never touches the database itself. Data comes from a
``SlotReader`` passed in by the caller (see ``barbershop.store``), so the
same code runs against SQL in the API and against plain lists in tests.

Availability is best-effort at read time. It is not a reservation: the
booking endpoint still relies on the store to reject a conflicting insert.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Protocol, Union

from barbershop.core import overlaps


class InvalidSlotRequest(ValueError):
    """Bad input to the calculator (non-positive duration, not a date, ...)."""


class SlotLookupError(Exception):
    """Appointments or the barber roster could not be read."""


@dataclass(frozen=True)
class SpecificBarber:
    barber_id: int


@dataclass(frozen=True)
class AnyBarber:
    pass


BarberSelector = Union[SpecificBarber, AnyBarber]

ANY_BARBER = "any"


def parse_selector(value: Union[str, int]) -> BarberSelector:
    """Turn ``"any"`` or a barber id (int or digit string) into a selector."""
    if isinstance(value, int) and not isinstance(value, bool):
        return SpecificBarber(value)
    if isinstance(value, str):
        if value.strip().lower() == ANY_BARBER:
            return AnyBarber()
        if value.strip().isdecimal():
            return SpecificBarber(int(value))
    raise InvalidSlotRequest(f"barber must be '{ANY_BARBER}' or a barber id, got {value!r}")


@dataclass(frozen=True)
class BusinessHours:
    opening: time = time(9, 0)
    closing: time = time(19, 0)
    step_minutes: int = 30

    def __post_init__(self):
        if self.opening >= self.closing:
            raise ValueError("opening must be before closing")
        if self.step_minutes <= 0:
            raise ValueError(f"step_minutes must be positive, got {self.step_minutes}")


@dataclass(frozen=True)
class BookedInterval:
    """Time a barber is busy with an existing (non-cancelled) appointment."""
    barber_id: int
    start: datetime
    end: datetime


@dataclass(frozen=True)
class TimeSlot:
    time: str  # "HH:MM"
    available: bool
    candidate_barber_id: Optional[int] = None


class SlotReader(Protocol):
    def booked_intervals(self, day: date, barber_id: Optional[int] = None) -> List[BookedInterval]:
        ...

    def available_barber_ids(self) -> List[int]:
        ...


def _validate(day, service_duration_minutes) -> date:
    if isinstance(service_duration_minutes, bool) or not isinstance(service_duration_minutes, int):
        raise InvalidSlotRequest("service duration must be a whole number of minutes")
    if service_duration_minutes <= 0:
        raise InvalidSlotRequest(f"service duration must be positive, got {service_duration_minutes}")
    if isinstance(day, datetime):
        return day.date()
    if not isinstance(day, date):
        raise InvalidSlotRequest(f"expected a date, got {day!r}")
    return day


def _load(reader: SlotReader, day: date, selector: BarberSelector):
    if not isinstance(selector, (SpecificBarber, AnyBarber)):
        raise InvalidSlotRequest(f"unknown barber selector {selector!r}")
    try:
        if isinstance(selector, SpecificBarber):
            roster = [selector.barber_id]
            booked = reader.booked_intervals(day, barber_id=selector.barber_id)
        else:
            roster = list(reader.available_barber_ids())
            booked = reader.booked_intervals(day)
    except SlotLookupError:
        raise
    except Exception as exc:
        raise SlotLookupError(f"could not read appointments for {day}: {exc}") from exc
    return roster, booked


def is_barber_free(
    booked: List[BookedInterval],
    barber_id: int,
    start: datetime,
    end: datetime,
) -> bool:
    for interval in booked:
        if interval.barber_id != barber_id:
            continue
        if overlaps(start, end, interval.start, interval.end):
            return False
    return True


def compute_slots(
    day: date,
    service_duration_minutes: int,
    selector: BarberSelector,
    reader: SlotReader,
    hours: Optional[BusinessHours] = None,
) -> List[TimeSlot]:
    """
    List the bookable start times of ``day`` for a service of the given length.

    Returns one ``TimeSlot`` per grid step whose service would end by closing
    time, in ascending order. Steps that would run past closing are left out
    entirely. ``candidate_barber_id`` is the first free barber of the roster.

    Raises:
        InvalidSlotRequest: bad duration or day.
        SlotLookupError: the reader failed.
    """
    day = _validate(day, service_duration_minutes)
    hours = hours or BusinessHours()

    # 1) Appointments of the day and the barbers to try
    roster, booked = _load(reader, day, selector)

    # 2) Business window
    open_dt = datetime.combine(day, hours.opening)
    close_dt = datetime.combine(day, hours.closing)
    step = timedelta(minutes=hours.step_minutes)
    duration = timedelta(minutes=service_duration_minutes)

    # 3) Walk the grid
    slots: List[TimeSlot] = []
    current = open_dt
    while current < close_dt:
        slot_end = current + duration
        if slot_end > close_dt:
            current += step
            continue

        candidate = None
        for barber_id in roster:
            if is_barber_free(booked, barber_id, current, slot_end):
                candidate = barber_id
                break

        slots.append(
            TimeSlot(
                time=current.strftime("%H:%M"),
                available=candidate is not None,
                candidate_barber_id=candidate,
            )
        )
        current += step

    return slots


def find_slot(slots: List[TimeSlot], label: str) -> Optional[TimeSlot]:
    for slot in slots:
        if slot.time == label:
            return slot
    return None
