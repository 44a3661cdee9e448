from barberbook.booking.contact_details import ContactDetails, validate_contact_details
from barberbook.booking.state_machine import (
    BookingStateMachine,
    BookingStep,
    BookingTrigger,
    InvalidTransitionError,
)
from barberbook.booking.workflow import BookingWorkflow

__all__ = [
    "BookingWorkflow",
    "BookingStateMachine",
    "BookingStep",
    "BookingTrigger",
    "InvalidTransitionError",
    "ContactDetails",
    "validate_contact_details",
]
