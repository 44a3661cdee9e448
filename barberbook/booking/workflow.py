"""
Public booking workflow.

Drives one client through service pick -> date/time pick -> contact
details -> confirmation for the business behind a public slug. The
page calls these coroutines from its event handlers; the workflow keeps
the step, the selections and the loading/error flags the page renders.

Two ordering rules apply because backend calls may resolve late:
    - slot lists are only applied for the most recently requested date
      (last date wins, not last response wins);
    - a booking response that arrives after the client navigated back
      or restarted is ignored rather than applied to the newer state.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from barberbook.backend.appointments import AppointmentStore
from barberbook.backend.businesses import BusinessDirectory
from barberbook.backend.catalog import ServiceCatalog
from barberbook.backend.database import InMemoryDatabase
from barberbook.backend.working_hours import WorkingHoursRepository
from barberbook.booking.contact_details import ContactDetails, validate_contact_details
from barberbook.booking.state_machine import (
    BookingStateMachine,
    BookingStep,
    BookingTrigger,
    InvalidTransitionError,
)
from barberbook.config import settings
from barberbook.errors import BarberbookError, NotFound, ValidationFailed, user_friendly_error
from barberbook.logging_context import get_session_logger, new_session_id, set_session_id
from barberbook.schemas.appointment_schema import Appointment, TimeSlot
from barberbook.schemas.business_schema import Business
from barberbook.schemas.service_schema import Service
from barberbook.scheduling.schedule import WeeklySchedule
from barberbook.scheduling.slot_generator import find_slot, generate_slots
from barberbook.utils import local_today

logger = get_session_logger(__name__)

BUSINESS_NOT_FOUND = "Business not found."


class BookingWorkflow:
    """State of one client's booking on a business's public page."""

    def __init__(
        self, slug: str, db: InMemoryDatabase, today: Optional[date] = None
    ) -> None:
        self.slug = slug
        self._directory = BusinessDirectory(db)
        self._catalog = ServiceCatalog(db)
        self._hours = WorkingHoursRepository(db)
        self._appointments = AppointmentStore(db)
        self._today = today
        self._sm = BookingStateMachine(
            guards={BookingTrigger.CONTINUE: lambda: self.selected_slot is not None}
        )
        self.session_id = new_session_id()

        self.business: Optional[Business] = None
        self.not_found = False
        self.services: list[Service] = []
        self.schedule = WeeklySchedule()

        self.selected_service: Optional[Service] = None
        self.selected_date: date = self.today
        self.slots: list[TimeSlot] = []
        self.selected_slot: Optional[TimeSlot] = None
        self.contact: Optional[ContactDetails] = None
        self.appointment: Optional[Appointment] = None

        self.is_loading = False
        self.is_submitting = False
        self.error: Optional[str] = None

        # Bumped on every slot request and on every navigation away.
        self._slot_request = 0
        self._epoch = 0

    # ------------------------------------------------------------------ #
    # Read-only views
    # ------------------------------------------------------------------ #

    @property
    def step(self) -> BookingStep:
        return self._sm.current_step

    @property
    def today(self) -> date:
        return self._today or local_today(settings.zone)

    @property
    def state_machine(self) -> BookingStateMachine:
        return self._sm

    def date_options(self) -> list[date]:
        """Selectable dates: today and the following days of the booking window."""
        return [
            self.today + timedelta(days=offset)
            for offset in range(settings.booking.booking_window_days)
        ]

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    async def load(self) -> bool:
        """
        Resolve the slug and fetch the catalog and working hours.

        Returns:
            True when the business page can be shown. An unknown slug sets
            ``not_found`` and returns False; it is not an error.
        """
        set_session_id(self.session_id)
        self.is_loading = True
        self.error = None
        try:
            business = await self._directory.get_by_slug(self.slug)
            if business is None:
                self.not_found = True
                self.error = BUSINESS_NOT_FOUND
                logger.info("Booking page requested for unknown slug '%s'", self.slug)
                return False
            self.business = business
            self.services = await self._catalog.list(business.id)
            self.schedule = await self._hours.get_week(business.id)
        except BarberbookError as exc:
            self.error = user_friendly_error(exc)
            logger.warning("Could not load booking page for '%s': %s", self.slug, exc)
            return False
        finally:
            self.is_loading = False

        logger.info(
            "Booking page loaded for %s (%d services)", business.shop_slug, len(self.services),
        )
        return True

    # ------------------------------------------------------------------ #
    # Step 1: service
    # ------------------------------------------------------------------ #

    async def select_service(self, service_id: str) -> None:
        business = self._require_business()
        service = next((s for s in self.services if s.id == service_id), None)
        if service is None:
            raise NotFound(f"Service {service_id} is not offered by {business.shop_slug}.")
        self._sm.transition(BookingTrigger.SERVICE_PICKED)
        self.selected_service = service
        self.selected_slot = None
        logger.debug("Service selected: %s", service.name)
        await self._refresh_slots()

    # ------------------------------------------------------------------ #
    # Step 2: date and time
    # ------------------------------------------------------------------ #

    async def select_date(self, day: date) -> None:
        """Pick a date; clears any chosen slot and regenerates the slot list."""
        if day not in self.date_options():
            raise ValidationFailed(f"{day.isoformat()} is outside the booking window.", field="date")
        self._sm.transition(BookingTrigger.DATE_PICKED)
        self.selected_date = day
        self.selected_slot = None
        await self._refresh_slots()

    def select_slot(self, start_time: datetime) -> TimeSlot:
        """Pick one of the currently listed slots.

        Raises:
            ValidationFailed: The slot is not listed or is already taken.
        """
        if not self._sm.can(BookingTrigger.SLOT_PICKED):
            raise InvalidTransitionError(
                f"Cannot pick a slot from step '{self.step.value}'."
            )
        slot = find_slot(self.slots, start_time)
        if slot is None:
            raise ValidationFailed("That time is not offered on this date.", field="slot")
        if not slot.is_available:
            raise ValidationFailed("That time is already booked.", field="slot")
        self._sm.transition(BookingTrigger.SLOT_PICKED)
        self.selected_slot = slot
        logger.debug("Slot selected: %s", slot.start_time.isoformat())
        return slot

    def continue_to_details(self) -> None:
        """Advance to the contact step. Requires a selected slot."""
        self._sm.transition(BookingTrigger.CONTINUE)

    # ------------------------------------------------------------------ #
    # Step 3: details and confirmation
    # ------------------------------------------------------------------ #

    async def submit_details(self, client_name: str, client_phone: str) -> Optional[Appointment]:
        """
        Validate the contact form and persist the appointment.

        Returns:
            The created appointment, or None when the call was ignored
            (a submission already in flight, or a response for a step the
            client has since left).

        Raises:
            ValidationFailed: Bad contact details (nothing is sent) or the
                slot was taken in the meantime.
            NotFound: The business or service disappeared.
            PersistenceFailed: The backend is unavailable; retry is possible.
        """
        if not self._sm.can(BookingTrigger.DETAILS_SUBMITTED):
            raise InvalidTransitionError(
                f"Cannot submit details from step '{self.step.value}'."
            )
        if self.is_submitting:
            logger.warning("Duplicate booking submission ignored")
            return None

        self.error = None
        try:
            contact = validate_contact_details(client_name, client_phone)
        except ValidationFailed as exc:
            self.error = user_friendly_error(exc)
            raise
        self.contact = contact

        business = self._require_business()
        epoch = self._epoch
        self.is_submitting = True
        self.is_loading = True
        try:
            appointment = await self._appointments.create(
                owner_id=business.id,
                service=self.selected_service,
                client_name=contact.client_name,
                client_phone=contact.client_phone,
                start_time=self.selected_slot.start_time,
            )
        except BarberbookError as exc:
            if epoch == self._epoch:
                self.error = user_friendly_error(exc)
                self.is_submitting = False
                self.is_loading = False
            logger.warning("Booking failed: %s", exc)
            raise

        if epoch != self._epoch:
            logger.warning("Ignoring booking response for a step the client already left")
            return None

        self.is_submitting = False
        self.is_loading = False
        self.appointment = appointment
        self._sm.transition(BookingTrigger.DETAILS_SUBMITTED)
        logger.info("Booking confirmed: %s", appointment.id)
        return appointment

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #

    async def back(self) -> BookingStep:
        """Return to the previous step, discarding what was captured after it."""
        step = self._sm.transition(BookingTrigger.BACK)
        self._abandon_in_flight()
        self.contact = None
        if step == BookingStep.SELECT_SERVICE:
            self.selected_service = None
            self.selected_date = self.today
            self.selected_slot = None
            self.slots = []
        elif step == BookingStep.SELECT_DATE_TIME:
            await self._refresh_slots()
            if self.selected_slot is not None:
                still_free = find_slot(self.slots, self.selected_slot.start_time)
                if still_free is None or not still_free.is_available:
                    self.selected_slot = None
        return step

    def restart(self) -> None:
        """Clear all workflow state back to the service step."""
        self._sm.reset()
        self._abandon_in_flight()
        self.selected_service = None
        self.selected_date = self.today
        self.slots = []
        self.selected_slot = None
        self.contact = None
        self.appointment = None
        self.session_id = new_session_id()
        set_session_id(self.session_id)
        logger.info("Booking restarted")

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _abandon_in_flight(self) -> None:
        self._epoch += 1
        self._slot_request += 1
        self.is_submitting = False
        self.is_loading = False
        self.error = None

    def _require_business(self) -> Business:
        if self.business is None:
            raise NotFound(BUSINESS_NOT_FOUND)
        return self.business

    async def _refresh_slots(self) -> None:
        """Regenerate slots for the selected date; stale results are dropped."""
        business = self._require_business()
        self._slot_request += 1
        request = self._slot_request
        day, service = self.selected_date, self.selected_service
        self.slots = []
        self.is_loading = True
        try:
            existing = await self._appointments.list_for_day(business.id, day)
        except BarberbookError as exc:
            if request == self._slot_request:
                self.error = user_friendly_error(exc)
                self.is_loading = False
            logger.warning("Could not load appointments for %s: %s", day.isoformat(), exc)
            return

        if request != self._slot_request:
            logger.debug("Discarding slots for superseded date %s", day.isoformat())
            return

        self.slots = generate_slots(day, service, self.schedule, existing)
        self.is_loading = False
