"""Shared test fixtures and helpers."""

import os
from datetime import date, datetime, timedelta
from typing import Optional

# Cheap hashing for the many accounts the suite creates; read when settings load.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from barberbook.backend.database import InMemoryDatabase  # noqa: E402
from barberbook.backend.demo import seed_demo_business  # noqa: E402
from barberbook.booking.state_machine import BookingStateMachine  # noqa: E402
from barberbook.config import settings  # noqa: E402
from barberbook.schemas.appointment_schema import Appointment, AppointmentStatus  # noqa: E402
from barberbook.schemas.business_schema import Business  # noqa: E402
from barberbook.schemas.schedule_schema import WorkingDay  # noqa: E402
from barberbook.schemas.service_schema import Service  # noqa: E402
from barberbook.scheduling.schedule import WeeklySchedule  # noqa: E402
from barberbook.utils import parse_wall_clock  # noqa: E402

# 2025-03-17 is a Monday; 2025-03-23 is the Sunday after it.
MONDAY = date(2025, 3, 17)
SUNDAY = date(2025, 3, 23)
OWNER_ID = "owner-1"


@pytest.fixture
def db():
    return InMemoryDatabase()


@pytest_asyncio.fixture
async def shop(db) -> Business:
    """The demo barbershop: three services, open Monday to Saturday 09:00-18:00."""
    return await seed_demo_business(db)


@pytest.fixture
def state_machine():
    return BookingStateMachine()


def at(day: date, hhmm: str) -> datetime:
    """Business-local aware datetime for a wall-clock time on ``day``."""
    return datetime.combine(day, parse_wall_clock(hhmm), tzinfo=settings.zone)


def make_service(
    duration: int = 30,
    owner_id: str = OWNER_ID,
    service_id: str = "svc-1",
    name: str = "Haircut",
    price: float = 40.0,
) -> Service:
    """Helper to create a Service."""
    return Service(
        id=service_id,
        owner_id=owner_id,
        name=name,
        duration_minutes=duration,
        price=price,
    )


def make_appointment(
    start: datetime,
    duration: int = 30,
    owner_id: str = OWNER_ID,
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
    appointment_id: str = "appt-1",
    service_id: str = "svc-1",
    service_name: Optional[str] = "Haircut",
) -> Appointment:
    """Helper to create an Appointment with sensible defaults."""
    return Appointment(
        id=appointment_id,
        owner_id=owner_id,
        service_id=service_id,
        service_name=service_name,
        client_name="João Silva",
        client_phone="11999999999",
        start_time=start,
        end_time=start + timedelta(minutes=duration),
        status=status,
    )


def make_week(
    open_time: str = "09:00",
    close_time: str = "18:00",
    open_days: tuple[int, ...] = (0, 1, 2, 3, 4, 5, 6),
    owner_id: str = OWNER_ID,
) -> WeeklySchedule:
    """Helper to create a full week with the same hours on every open day."""
    return WeeklySchedule(
        [
            WorkingDay(
                day_of_week=index,
                is_open=index in open_days,
                open_time=parse_wall_clock(open_time),
                close_time=parse_wall_clock(close_time),
            )
            for index in range(7)
        ],
        owner_id=owner_id,
    )


def make_unchecked_week(open_time: str, close_time: str) -> WeeklySchedule:
    """Week of open days built without record validation."""
    return WeeklySchedule([
        WorkingDay.model_construct(
            day_of_week=index,
            is_open=True,
            open_time=parse_wall_clock(open_time),
            close_time=parse_wall_clock(close_time),
        )
        for index in range(7)
    ])
