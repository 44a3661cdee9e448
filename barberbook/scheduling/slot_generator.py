"""
Availability slot generation.

Candidate start times are enumerated every ``granularity`` minutes from
opening time. A candidate is emitted while it ends at or before closing
time, so closing time bounds slot ends rather than slot starts. Slots
that overlap a non-cancelled appointment of the same business are kept
but flagged unavailable, so clients see them without being able to pick
them.

The generator is a pure function: identical inputs give identical
output and nothing is cached between calls.
"""

import logging
from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from barberbook.config import settings
from barberbook.schemas.appointment_schema import Appointment, TimeSlot
from barberbook.schemas.service_schema import Service
from barberbook.scheduling.schedule import WeeklySchedule
from barberbook.utils import to_local

logger = logging.getLogger(__name__)


def _blocking_appointments(
    appointments: Iterable[Appointment], owner_id: str
) -> list[Appointment]:
    return [a for a in appointments if a.owner_id == owner_id and a.is_active]


def _first_conflict(
    start: datetime, end: datetime, appointments: list[Appointment]
) -> Optional[Appointment]:
    for appointment in appointments:
        if appointment.overlaps(start, end):
            return appointment
    return None


def generate_slots(
    day: date,
    service: Service,
    schedule: WeeklySchedule,
    appointments: Iterable[Appointment] = (),
    granularity_minutes: Optional[int] = None,
    zone: Optional[tzinfo] = None,
) -> list[TimeSlot]:
    """
    Produce the ordered candidate slots for a service on a business-local date.

    Args:
        day: Calendar date on the business wall clock.
        service: Service being booked; its duration sets the slot length.
        schedule: The business's weekly working hours.
        appointments: Existing appointments to check for conflicts.
        granularity_minutes: Stride between candidate starts.
        zone: Business time zone used to anchor the wall-clock window.

    Returns:
        Slots in ascending start order. Empty when the day is closed, the
        window is degenerate, or the service does not fit the window.
    """
    zone = zone or settings.zone
    stride = timedelta(minutes=granularity_minutes or settings.schedule.slot_granularity_minutes)
    duration = timedelta(minutes=service.duration_minutes)

    hours = schedule.hours_on(day)
    if not hours.is_open or hours.is_degenerate:
        return []

    window_start = datetime.combine(day, hours.open_time, tzinfo=zone)
    window_end = datetime.combine(day, hours.close_time, tzinfo=zone)
    blocking = _blocking_appointments(appointments, service.owner_id)

    slots: list[TimeSlot] = []
    cursor = window_start
    while cursor + duration <= window_end:
        slot_end = cursor + duration
        conflict = _first_conflict(cursor, slot_end, blocking)
        slots.append(TimeSlot(
            start_time=cursor,
            end_time=slot_end,
            is_available=conflict is None,
            appointment_id=conflict.id if conflict else None,
        ))
        cursor += stride

    logger.debug(
        "Generated %d slots for service %s on %s (%d unavailable)",
        len(slots), service.id, day.isoformat(),
        sum(1 for s in slots if not s.is_available),
    )
    return slots


def find_slot(
    slots: Iterable[TimeSlot], start_time: datetime, zone: Optional[tzinfo] = None
) -> Optional[TimeSlot]:
    """Locate the slot starting at ``start_time`` (naive values are business-local)."""
    target = to_local(start_time, zone or settings.zone)
    for slot in slots:
        if slot.start_time == target:
            return slot
    return None


def available_slots(slots: Iterable[TimeSlot]) -> list[TimeSlot]:
    return [s for s in slots if s.is_available]
