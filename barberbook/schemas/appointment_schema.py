"""Appointment and time-slot data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from barberbook.config import settings


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Appointment(BaseModel):
    """A booked appointment.

    ``service_name`` is a snapshot taken at booking time so the record
    stays readable after the service is renamed or deleted.
    """
    id: str
    owner_id: str
    service_id: str
    service_name: Optional[str] = None
    client_name: str
    client_phone: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("start_time", "end_time")
    @classmethod
    def _assume_business_zone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=settings.zone)
        return value

    @model_validator(mode="after")
    def _ends_after_start(self) -> "Appointment":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    @property
    def is_active(self) -> bool:
        """Non-cancelled appointments occupy their interval."""
        return self.status != AppointmentStatus.CANCELLED

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """True when [start, end) shares a non-zero duration with this appointment."""
        return start < self.end_time and self.start_time < end


class TimeSlot(BaseModel):
    """A candidate appointment window. Derived on every query, never stored."""
    model_config = ConfigDict(frozen=True)

    start_time: datetime
    end_time: datetime
    is_available: bool = True
    appointment_id: Optional[str] = None
