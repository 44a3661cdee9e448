"""Working-hours persistence with whole-week replacement."""

import logging
from collections.abc import Iterable

from barberbook.backend.database import InMemoryDatabase
from barberbook.schemas.schedule_schema import WorkingDay
from barberbook.scheduling.schedule import WeeklySchedule

logger = logging.getLogger(__name__)


class WorkingHoursRepository:
    """Stores one WeeklySchedule per business, seven rows at a time."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    async def get_week(self, owner_id: str) -> WeeklySchedule:
        await self._db.roundtrip()
        return self.read_week(owner_id)

    async def replace_week(
        self, owner_id: str, days: Iterable[WorkingDay | dict]
    ) -> WeeklySchedule:
        """
        Replace the whole week for a business.

        Missing day indices are saved as closed. Either all seven rows are
        replaced or, on any failure, the previous week is left as it was.

        Raises:
            ValidationFailed: Duplicate day, bad field, or an open day that
                does not close after it opens.
            PersistenceFailed: The backend failed part-way through.
        """
        week = WeeklySchedule.from_days(days, owner_id=owner_id)
        week.validate()

        async with self._db.transaction() as db:
            for key in [k for k in db.working_hours if k[0] == owner_id]:
                db.delete("working_hours", key)
            for day in week.days:
                db.write("working_hours", (owner_id, day.day_of_week), day)

        logger.info(
            "Working hours replaced for %s: open %s",
            owner_id, [d.day_name for d in week.days if d.is_open],
        )
        return self.read_week(owner_id)

    def read_week(self, owner_id: str) -> WeeklySchedule:
        """Current week without a round trip, for use inside a transaction."""
        rows = [day for (owner, _), day in self._db.working_hours.items() if owner == owner_id]
        return WeeklySchedule(rows, owner_id=owner_id)
