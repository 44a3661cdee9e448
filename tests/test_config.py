"""Tests for configuration loading and validation."""

from zoneinfo import ZoneInfo

import pytest

from barberbook.config import (
    AppConfig,
    AuthConfig,
    BookingConfig,
    CatalogConfig,
    ScheduleConfig,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_default_slot_granularity_is_thirty_minutes(self):
        assert AppConfig().schedule.slot_granularity_minutes == 30

    def test_zone_resolves(self):
        config = AppConfig(schedule=ScheduleConfig(timezone="Europe/Lisbon"))
        assert config.zone == ZoneInfo("Europe/Lisbon")

    @pytest.mark.parametrize("granularity", [0, -15, 7, 50])
    def test_granularity_must_divide_the_day(self, granularity):
        config = AppConfig(schedule=ScheduleConfig(slot_granularity_minutes=granularity))
        with pytest.raises(ValueError, match="SLOT_GRANULARITY_MINUTES"):
            _validate_config(config)

    def test_open_after_close_rejected(self):
        config = AppConfig(schedule=ScheduleConfig(
            default_open_time="18:00", default_close_time="09:00",
        ))
        with pytest.raises(ValueError, match="DEFAULT_OPEN_TIME"):
            _validate_config(config)

    def test_malformed_close_time_rejected(self):
        config = AppConfig(schedule=ScheduleConfig(default_close_time="6pm"))
        with pytest.raises(ValueError, match="DEFAULT_CLOSE_TIME"):
            _validate_config(config)

    def test_unknown_timezone_rejected(self):
        config = AppConfig(schedule=ScheduleConfig(timezone="Mars/Olympus_Mons"))
        with pytest.raises(ValueError, match="BUSINESS_TIMEZONE"):
            _validate_config(config)

    def test_min_duration_must_be_positive(self):
        config = AppConfig(catalog=CatalogConfig(min_service_duration=0))
        with pytest.raises(ValueError, match="MIN_SERVICE_DURATION"):
            _validate_config(config)

    def test_max_duration_below_min_rejected(self):
        config = AppConfig(catalog=CatalogConfig(min_service_duration=30, max_service_duration=15))
        with pytest.raises(ValueError, match="MAX_SERVICE_DURATION"):
            _validate_config(config)

    def test_booking_window_must_be_positive(self):
        config = AppConfig(booking=BookingConfig(booking_window_days=0))
        with pytest.raises(ValueError, match="BOOKING_WINDOW_DAYS"):
            _validate_config(config)

    def test_bcrypt_rounds_bounded(self):
        config = AppConfig(auth=AuthConfig(bcrypt_rounds=3))
        with pytest.raises(ValueError, match="BCRYPT_ROUNDS"):
            _validate_config(config)

    def test_password_length_must_be_positive(self):
        config = AppConfig(auth=AuthConfig(min_password_length=0))
        with pytest.raises(ValueError, match="MIN_PASSWORD_LENGTH"):
            _validate_config(config)

    def test_safe_int_parsing(self):
        from barberbook.config import _safe_int

        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_names_bad_variable(self, monkeypatch):
        from barberbook.config import _safe_int

        monkeypatch.setenv("BARBERBOOK_TEST_INT", "thirty")
        with pytest.raises(ValueError, match="BARBERBOOK_TEST_INT"):
            _safe_int("BARBERBOOK_TEST_INT", "30")
