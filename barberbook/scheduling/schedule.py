"""
Weekly schedule model.

A business keeps up to seven WorkingDay records, one per weekday index.
Any index without a record is treated as closed. Week updates are
validated as a whole before anything is written.

Usage:
    week = WeeklySchedule.from_days(records)
    hours = week.effective_hours_for(date(2025, 3, 17).weekday())
"""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Optional

from pydantic import ValidationError

from barberbook.config import settings
from barberbook.errors import ValidationFailed
from barberbook.schemas.schedule_schema import WorkingDay
from barberbook.utils import parse_wall_clock

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
SUNDAY = 6


def closed_day(day_of_week: int) -> WorkingDay:
    """The default-fill record for a day without stored hours."""
    return WorkingDay(
        day_of_week=day_of_week,
        is_open=False,
        open_time=parse_wall_clock(settings.schedule.default_open_time),
        close_time=parse_wall_clock(settings.schedule.default_close_time),
    )


class WeeklySchedule:
    """Ordered set of seven WorkingDay records for one business."""

    def __init__(self, days: Iterable[WorkingDay] = (), owner_id: Optional[str] = None) -> None:
        self.owner_id = owner_id
        self._days: dict[int, WorkingDay] = {}
        for day in days:
            if day.day_of_week in self._days:
                raise ValidationFailed(
                    f"Duplicate working hours for day {day.day_of_week}.",
                    field="day_of_week",
                )
            self._days[day.day_of_week] = day

    @classmethod
    def from_days(
        cls, days: Iterable[WorkingDay | dict], owner_id: Optional[str] = None
    ) -> "WeeklySchedule":
        """Build a schedule from records or raw dicts, translating schema errors."""
        parsed = []
        for raw in days:
            if isinstance(raw, WorkingDay):
                parsed.append(raw)
                continue
            try:
                parsed.append(WorkingDay.model_validate(raw))
            except ValidationError as exc:
                error = exc.errors()[0]
                field = str(error["loc"][0]) if error["loc"] else None
                raise ValidationFailed(f"Invalid working hours: {error['msg']}", field=field) from exc
        return cls(parsed, owner_id=owner_id)

    @classmethod
    def default(cls, owner_id: Optional[str] = None) -> "WeeklySchedule":
        """Starter week offered to new businesses: open every day but Sunday."""
        open_time = parse_wall_clock(settings.schedule.default_open_time)
        close_time = parse_wall_clock(settings.schedule.default_close_time)
        return cls(
            (
                WorkingDay(
                    day_of_week=index,
                    is_open=index != SUNDAY,
                    open_time=open_time,
                    close_time=close_time,
                )
                for index in range(DAYS_PER_WEEK)
            ),
            owner_id=owner_id,
        )

    def effective_hours_for(self, day_index: int) -> WorkingDay:
        """Return the stored hours for a weekday, or a closed day when none exist."""
        if not 0 <= day_index < DAYS_PER_WEEK:
            raise ValidationFailed(f"Day index must be 0-6, got {day_index}.", field="day_of_week")
        return self._days.get(day_index) or closed_day(day_index)

    def hours_on(self, day: date) -> WorkingDay:
        return self.effective_hours_for(day.weekday())

    @property
    def days(self) -> list[WorkingDay]:
        """All seven days, default-filled, ordered by day index."""
        return [self.effective_hours_for(index) for index in range(DAYS_PER_WEEK)]

    @property
    def stored_days(self) -> list[WorkingDay]:
        return [self._days[index] for index in sorted(self._days)]

    def validate(self) -> None:
        """Check the rules a week must satisfy before it can be saved.

        Raises:
            ValidationFailed: An open day does not close after it opens.
        """
        for day in self.days:
            if day.is_open and day.is_degenerate:
                raise ValidationFailed(
                    f"{day.day_name}: opening time must be before closing time.",
                    field="close_time",
                )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeeklySchedule):
            return NotImplemented
        return self.days == other.days

    def __repr__(self) -> str:
        open_days = [d.day_name for d in self.days if d.is_open]
        return f"WeeklySchedule(owner_id={self.owner_id!r}, open={open_days})"
