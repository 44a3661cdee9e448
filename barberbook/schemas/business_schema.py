"""Business (owner account) data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

SLUG_PATTERN = r"^[a-z0-9-]+$"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TRIAL = "trial"


class SignUpForm(BaseModel):
    """Account fields an owner submits when registering."""
    email: EmailStr
    shop_name: str = Field(min_length=1)
    shop_slug: str = Field(pattern=SLUG_PATTERN)


class Business(BaseModel):
    """The authenticated account that owns services, schedule and appointments."""
    id: str
    email: EmailStr
    shop_name: str = Field(min_length=1)
    shop_slug: str = Field(pattern=SLUG_PATTERN)
    subscription_status: SubscriptionStatus = SubscriptionStatus.TRIAL
    subscription_end_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
