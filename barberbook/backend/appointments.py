"""
Appointment store.

Owner-facing queries and status changes, plus the creation path used by
the public booking page. Creation re-runs slot generation inside the
write transaction, so a slot taken or closed since the client loaded
the page is rejected instead of double-booked.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Optional, Union

from pydantic import ValidationError

from barberbook.backend.database import InMemoryDatabase
from barberbook.backend.working_hours import WorkingHoursRepository
from barberbook.config import settings
from barberbook.errors import NotFound, ValidationFailed
from barberbook.schemas.appointment_schema import Appointment, AppointmentStatus
from barberbook.schemas.service_schema import Service
from barberbook.scheduling.slot_generator import find_slot, generate_slots
from barberbook.utils import to_local

logger = logging.getLogger(__name__)

DateBound = Union[date, datetime]

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED}
    ),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}


def _after_start(appointment: Appointment, bound: DateBound) -> bool:
    if isinstance(bound, datetime):
        return appointment.start_time >= to_local(bound, settings.zone)
    return to_local(appointment.start_time, settings.zone).date() >= bound


def _before_end(appointment: Appointment, bound: DateBound) -> bool:
    if isinstance(bound, datetime):
        return appointment.start_time <= to_local(bound, settings.zone)
    return to_local(appointment.start_time, settings.zone).date() <= bound


class AppointmentStore:
    """Appointments of every business, always queried by owner id."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db
        self._hours = WorkingHoursRepository(db)

    async def list(
        self,
        owner_id: str,
        start: Optional[DateBound] = None,
        end: Optional[DateBound] = None,
    ) -> list[Appointment]:
        """
        Appointments of one business ordered by start time.

        Both bounds are inclusive and filter on start time. Plain dates
        are compared on the business wall-clock day.
        """
        await self._db.roundtrip()
        found = [
            a for a in self._db.appointments.values()
            if a.owner_id == owner_id
            and (start is None or _after_start(a, start))
            and (end is None or _before_end(a, end))
        ]
        return sorted(found, key=lambda a: a.start_time)

    async def list_for_day(self, owner_id: str, day: date) -> list[Appointment]:
        return await self.list(owner_id, day, day)

    async def get(self, owner_id: str, appointment_id: str) -> Appointment:
        await self._db.roundtrip()
        return self._lookup(owner_id, appointment_id)

    async def create(
        self,
        owner_id: str,
        service: Service,
        client_name: str,
        client_phone: str,
        start_time: datetime,
    ) -> Appointment:
        """
        Book a slot for a client.

        Raises:
            NotFound: The business or the service no longer exists.
            ValidationFailed: The slot is not offered or is already taken.
            PersistenceFailed: The backend is unavailable.
        """
        local_start = to_local(start_time, settings.zone)
        day = local_start.date()

        async with self._db.transaction() as db:
            if owner_id not in db.businesses:
                raise NotFound("Business not found.")
            current = db.services.get(service.id)
            if current is None or current.owner_id != owner_id:
                raise NotFound("Service no longer offered.")

            week = self._hours.read_week(owner_id)
            existing = [
                a for a in db.appointments.values()
                if a.owner_id == owner_id and to_local(a.start_time, settings.zone).date() == day
            ]
            slot = find_slot(generate_slots(day, current, week, existing), local_start)
            if slot is None or not slot.is_available:
                logger.warning(
                    "Rejected booking for %s at %s: slot not available",
                    owner_id, local_start.isoformat(),
                )
                raise ValidationFailed("Slot no longer available.", field="start_time")

            try:
                appointment = Appointment(
                    id=str(uuid.uuid4()),
                    owner_id=owner_id,
                    service_id=current.id,
                    service_name=current.name,
                    client_name=client_name,
                    client_phone=client_phone,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                )
            except ValidationError as exc:
                raise ValidationFailed(f"Invalid appointment: {exc.errors()[0]['msg']}") from exc
            db.write("appointments", appointment.id, appointment)

        logger.info(
            "Appointment created: %s for %s on %s",
            appointment.id, client_name, appointment.start_time.isoformat(),
        )
        return appointment

    async def update_status(
        self, owner_id: str, appointment_id: str, status: AppointmentStatus | str
    ) -> Appointment:
        """
        Move an appointment to a new status.

        scheduled may become cancelled or completed; both of those are
        final. Re-applying the current status is a no-op.

        Raises:
            NotFound: No such appointment for this owner.
            ValidationFailed: Unknown status or a disallowed transition.
        """
        try:
            new_status = AppointmentStatus(status)
        except ValueError:
            raise ValidationFailed(f"Unknown status: {status!r}", field="status") from None

        async with self._db.transaction() as db:
            current = self._lookup(owner_id, appointment_id)
            if current.status == new_status:
                return current
            if new_status not in ALLOWED_TRANSITIONS[current.status]:
                raise ValidationFailed(
                    f"Cannot change status from {current.status.value} to {new_status.value}.",
                    field="status",
                )
            updated = current.model_copy(update={"status": new_status})
            db.write("appointments", updated.id, updated)

        logger.info(
            "Appointment %s: %s -> %s", appointment_id, current.status.value, new_status.value,
        )
        return updated

    def _lookup(self, owner_id: str, appointment_id: str) -> Appointment:
        appointment = self._db.appointments.get(appointment_id)
        if appointment is None or appointment.owner_id != owner_id:
            raise NotFound(f"Appointment {appointment_id} not found.")
        return appointment
