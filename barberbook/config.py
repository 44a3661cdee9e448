"""
Centralized configuration with environment variable overrides.

Slot granularity, default opening hours, catalog bounds and the public
booking window are configurable here. Nothing is hardcoded in the
scheduling or booking logic.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class ScheduleConfig:
    """Weekly schedule and slot enumeration settings."""

    slot_granularity_minutes: int = _safe_int("SLOT_GRANULARITY_MINUTES", "30")
    default_open_time: str = os.getenv("DEFAULT_OPEN_TIME", "09:00")
    default_close_time: str = os.getenv("DEFAULT_CLOSE_TIME", "18:00")
    timezone: str = os.getenv("BUSINESS_TIMEZONE", "America/Sao_Paulo")


@dataclass(frozen=True)
class CatalogConfig:
    """Bounds applied to services in the catalog."""

    min_service_duration: int = _safe_int("MIN_SERVICE_DURATION", "5")
    max_service_duration: int = _safe_int("MAX_SERVICE_DURATION", "240")


@dataclass(frozen=True)
class BookingConfig:
    """Public booking page settings."""

    booking_window_days: int = _safe_int("BOOKING_WINDOW_DAYS", "14")


@dataclass(frozen=True)
class AuthConfig:
    """Owner account settings."""

    min_password_length: int = _safe_int("MIN_PASSWORD_LENGTH", "6")
    bcrypt_rounds: int = _safe_int("BCRYPT_ROUNDS", "12")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "barberbook")

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.schedule.timezone)


def _parse_hhmm(env_var: str, value: str) -> int:
    try:
        parsed = datetime.strptime(value.strip(), "%H:%M")
    except ValueError:
        raise ValueError(f"{env_var} must be HH:MM, got {value!r}") from None
    return parsed.hour * 60 + parsed.minute


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    granularity = config.schedule.slot_granularity_minutes
    if granularity < 1 or MINUTES_PER_DAY % granularity != 0:
        raise ValueError(
            f"SLOT_GRANULARITY_MINUTES must be a positive divisor of {MINUTES_PER_DAY}, "
            f"got {granularity}"
        )

    open_minutes = _parse_hhmm("DEFAULT_OPEN_TIME", config.schedule.default_open_time)
    close_minutes = _parse_hhmm("DEFAULT_CLOSE_TIME", config.schedule.default_close_time)
    if open_minutes >= close_minutes:
        raise ValueError(
            "DEFAULT_OPEN_TIME must be before DEFAULT_CLOSE_TIME, got "
            f"{config.schedule.default_open_time}-{config.schedule.default_close_time}"
        )

    try:
        ZoneInfo(config.schedule.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"BUSINESS_TIMEZONE is not a known time zone: {config.schedule.timezone!r}"
        ) from None

    if config.catalog.min_service_duration < 1:
        raise ValueError(
            f"MIN_SERVICE_DURATION must be >= 1, got {config.catalog.min_service_duration}"
        )
    if config.catalog.max_service_duration < config.catalog.min_service_duration:
        raise ValueError(
            "MAX_SERVICE_DURATION must be >= MIN_SERVICE_DURATION, "
            f"got {config.catalog.max_service_duration}"
        )

    if config.booking.booking_window_days < 1:
        raise ValueError(
            f"BOOKING_WINDOW_DAYS must be >= 1, got {config.booking.booking_window_days}"
        )
    if config.auth.min_password_length < 1:
        raise ValueError(
            f"MIN_PASSWORD_LENGTH must be >= 1, got {config.auth.min_password_length}"
        )
    if not 4 <= config.auth.bcrypt_rounds <= 31:
        raise ValueError(
            f"BCRYPT_ROUNDS must be between 4 and 31, got {config.auth.bcrypt_rounds}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
