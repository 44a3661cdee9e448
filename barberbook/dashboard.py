"""Summaries shown on the owner dashboard and the weekly appointments page."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from barberbook.app_state import AppState
from barberbook.config import settings
from barberbook.schemas.appointment_schema import Appointment
from barberbook.schemas.service_schema import Service
from barberbook.utils import local_today, to_local

SERVICE_REMOVED_LABEL = "Service removed"


@dataclass
class DashboardStats:
    today: date
    today_appointments: list[Appointment] = field(default_factory=list)
    total_appointments: int = 0
    total_services: int = 0


@dataclass(frozen=True)
class DayCount:
    day: date
    count: int


def _local_day(appointment: Appointment) -> date:
    return to_local(appointment.start_time, settings.zone).date()


def build_dashboard(state: AppState, today: Optional[date] = None) -> DashboardStats:
    """Headline numbers for the signed-in business."""
    today = today or local_today(settings.zone)
    todays = sorted(
        (a for a in state.appointments if _local_day(a) == today),
        key=lambda a: a.start_time,
    )
    return DashboardStats(
        today=today,
        today_appointments=todays,
        total_appointments=len(state.appointments),
        total_services=len(state.services),
    )


def week_overview(appointments: Iterable[Appointment], start_day: date) -> list[DayCount]:
    """Seven consecutive days from ``start_day`` with their active appointment counts."""
    counts: dict[date, int] = {}
    for appointment in appointments:
        if appointment.is_active:
            day = _local_day(appointment)
            counts[day] = counts.get(day, 0) + 1
    days = [start_day + timedelta(days=offset) for offset in range(7)]
    return [DayCount(day=d, count=counts.get(d, 0)) for d in days]


def service_label(appointment: Appointment, services: Iterable[Service]) -> str:
    """Name to show for an appointment's service, tolerating deleted services."""
    for service in services:
        if service.id == appointment.service_id:
            return service.name
    return appointment.service_name or SERVICE_REMOVED_LABEL
