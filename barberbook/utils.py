"""Shared utilities used across the booking application."""

import re
import unicodedata
from datetime import date, datetime, time, tzinfo
from typing import Optional, Union


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(11) 99999-9999")
        '11999999999'
        >>> normalize_phone("+55 (11) 99999-9999")
        '+5511999999999'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def slugify(name: str) -> str:
    """Suggest a public booking slug from a shop name.

    Examples:
        >>> slugify("Barbearia do João!")
        'barbearia-do-joao'
        >>> slugify("  Top   Cuts  ")
        'top-cuts'
    """
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    cleaned = re.sub(r"[^a-z0-9\s_-]", "", ascii_name.strip().lower())
    return re.sub(r"[\s_]+", "-", cleaned).strip("-")


def parse_wall_clock(value: str) -> time:
    """Parse an HH:MM wall-clock string."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def format_wall_clock(value: Union[time, datetime]) -> str:
    return value.strftime("%H:%M")


def to_local(value: datetime, zone: tzinfo) -> datetime:
    """Express a datetime in the business zone; naive values are taken as local."""
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def local_today(zone: tzinfo, now: Optional[datetime] = None) -> date:
    """Today's date on the business wall clock."""
    return (now or datetime.now(zone)).astimezone(zone).date()
