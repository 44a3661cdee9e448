"""Working-hours data models."""

from datetime import time

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

DAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)


class WorkingDay(BaseModel):
    """Opening hours for one day of the week (0 = Monday, as ``date.weekday()``).

    An open day must close after it opens. Closed days keep whatever times
    the owner last entered.
    """
    model_config = ConfigDict(frozen=True)

    day_of_week: int = Field(ge=0, le=6)
    is_open: bool = False
    open_time: time = time(9, 0)
    close_time: time = Field(default=time(18, 0), validate_default=True)

    @field_validator("close_time")
    @classmethod
    def _closes_after_opening(cls, value: time, info: ValidationInfo) -> time:
        open_time = info.data.get("open_time")
        if info.data.get("is_open") and open_time is not None and value <= open_time:
            raise ValueError("opening time must be before closing time")
        return value

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]

    @property
    def is_degenerate(self) -> bool:
        """True when the window has no length at all."""
        return self.open_time >= self.close_time
