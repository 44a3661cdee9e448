"""Service catalog data models."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from barberbook.config import settings


class Service(BaseModel):
    """A named offering with a fixed duration and price, owned by one business."""
    id: str
    owner_id: str
    name: str
    duration_minutes: int = Field(gt=0)
    price: float = Field(ge=0)
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value


class ServiceDraft(BaseModel):
    """Owner-submitted service fields, checked against the catalog bounds."""
    name: str
    duration_minutes: int
    price: float = Field(ge=0)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("duration_minutes")
    @classmethod
    def _duration_in_bounds(cls, value: int) -> int:
        low = settings.catalog.min_service_duration
        high = settings.catalog.max_service_duration
        if not low <= value <= high:
            raise ValueError(f"duration must be between {low} and {high} minutes")
        return value

    @field_validator("description")
    @classmethod
    def _blank_description_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value
