"""
Owner-side application state.

``AppState`` is the plain data the dashboard renders. ``AppController``
owns one instance and is the only thing that mutates it, through the
named operations below. Every owner-scoped operation resolves the
signed-in business first and passes its id to the repositories, so no
query can reach another business's rows.

Failure policy:
    - reads (fetch_*) record the error and leave an empty collection;
    - writes record the error and re-raise, so the form can react.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional, Union

from barberbook.backend.appointments import AppointmentStore
from barberbook.backend.auth import AuthProvider
from barberbook.backend.catalog import ServiceCatalog
from barberbook.backend.database import InMemoryDatabase
from barberbook.backend.working_hours import WorkingHoursRepository
from barberbook.errors import BarberbookError, NotAuthenticated, user_friendly_error
from barberbook.schemas.appointment_schema import Appointment, AppointmentStatus
from barberbook.schemas.business_schema import Business
from barberbook.schemas.schedule_schema import WorkingDay
from barberbook.schemas.service_schema import Service

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """Everything the owner dashboard shows."""
    user: Optional[Business] = None
    services: list[Service] = field(default_factory=list)
    working_hours: list[WorkingDay] = field(default_factory=list)
    appointments: list[Appointment] = field(default_factory=list)
    is_initialized: bool = False
    is_loading: bool = False
    error: Optional[str] = None


class AppController:
    """Named operations over one AppState."""

    def __init__(self, db: InMemoryDatabase, auth: Optional[AuthProvider] = None) -> None:
        self.state = AppState()
        self.auth = auth or AuthProvider(db)
        self._catalog = ServiceCatalog(db)
        self._hours = WorkingHoursRepository(db)
        self._appointments = AppointmentStore(db)
        self._initializing = False

    # ------------------------------------------------------------------ #
    # Session
    # ------------------------------------------------------------------ #

    async def initialize(self) -> None:
        """Pick up the current session and load the owner's data."""
        self.state.error = None
        self.state.user = self.auth.current_owner()
        self.state.is_initialized = True
        if self.state.user is None:
            return
        errors = []
        self._initializing = True
        self.state.is_loading = True
        try:
            for fetch in (self.fetch_services, self.fetch_working_hours, self.fetch_appointments):
                await fetch()
                if self.state.error:
                    errors.append(self.state.error)
        finally:
            self._initializing = False
            self.state.is_loading = False
        self.state.error = errors[0] if errors else None

    async def sign_in(self, email: str, password: str) -> None:
        await self._write(self.auth.sign_in(email, password))
        await self.initialize()

    async def sign_up(
        self, email: str, password: str, shop_name: str, shop_slug: Optional[str] = None
    ) -> None:
        await self._write(self.auth.sign_up(email, password, shop_name, shop_slug))
        await self.initialize()

    async def sign_out(self) -> None:
        try:
            await self.auth.sign_out()
        except BarberbookError as exc:
            self.state.error = user_friendly_error(exc)
            return
        self.state = AppState(is_initialized=True)
        logger.info("Owner signed out")

    # ------------------------------------------------------------------ #
    # Services
    # ------------------------------------------------------------------ #

    async def fetch_services(self) -> None:
        owner = self._owner_or_none()
        if owner is None:
            self.state.services = []
            return
        self.state.services = await self._read(self._catalog.list(owner.id), default=[])

    async def create_service(
        self, name: str, duration_minutes: int, price: float, description: Optional[str] = None
    ) -> Service:
        owner = self._require_owner()
        service = await self._write(
            self._catalog.create(owner.id, name, duration_minutes, price, description)
        )
        self.state.services = [*self.state.services, service]
        return service

    async def update_service(self, service_id: str, **changes: Any) -> Service:
        owner = self._require_owner()
        updated = await self._write(self._catalog.update(owner.id, service_id, **changes))
        self.state.services = [updated if s.id == updated.id else s for s in self.state.services]
        return updated

    async def delete_service(self, service_id: str) -> None:
        owner = self._require_owner()
        await self._write(self._catalog.delete(owner.id, service_id))
        self.state.services = [s for s in self.state.services if s.id != service_id]

    # ------------------------------------------------------------------ #
    # Working hours
    # ------------------------------------------------------------------ #

    async def fetch_working_hours(self) -> None:
        owner = self._owner_or_none()
        if owner is None:
            self.state.working_hours = []
            return
        week = await self._read(self._hours.get_week(owner.id), default=None)
        self.state.working_hours = week.stored_days if week is not None else []

    async def update_working_hours(self, days: list[Union[WorkingDay, dict]]) -> None:
        owner = self._require_owner()
        week = await self._write(self._hours.replace_week(owner.id, days))
        self.state.working_hours = week.stored_days

    # ------------------------------------------------------------------ #
    # Appointments
    # ------------------------------------------------------------------ #

    async def fetch_appointments(
        self,
        start: Optional[Union[date, datetime]] = None,
        end: Optional[Union[date, datetime]] = None,
    ) -> None:
        owner = self._owner_or_none()
        if owner is None:
            self.state.appointments = []
            return
        self.state.appointments = await self._read(
            self._appointments.list(owner.id, start, end), default=[]
        )

    async def update_appointment_status(
        self, appointment_id: str, status: Union[AppointmentStatus, str]
    ) -> Appointment:
        owner = self._require_owner()
        updated = await self._write(
            self._appointments.update_status(owner.id, appointment_id, status)
        )
        self.state.appointments = [
            updated if a.id == updated.id else a for a in self.state.appointments
        ]
        return updated

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _require_owner(self) -> Business:
        try:
            return self.auth.require_owner()
        except BarberbookError as exc:
            self.state.error = user_friendly_error(exc)
            raise

    def _owner_or_none(self) -> Optional[Business]:
        owner = self.auth.current_owner()
        if owner is None:
            self.state.error = user_friendly_error(NotAuthenticated("User not authenticated."))
        return owner

    async def _read(self, call, default):
        self.state.is_loading = True
        self.state.error = None
        try:
            return await call
        except BarberbookError as exc:
            self.state.error = user_friendly_error(exc)
            logger.warning("Read failed: %s", exc)
            return default
        finally:
            self.state.is_loading = self._initializing

    async def _write(self, call):
        self.state.is_loading = True
        self.state.error = None
        try:
            return await call
        except BarberbookError as exc:
            self.state.error = user_friendly_error(exc)
            logger.warning("Write failed: %s", exc)
            raise
        finally:
            self.state.is_loading = False
