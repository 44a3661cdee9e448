"""Tests for availability slot generation."""

from datetime import timedelta, timezone

from barberbook.schemas.appointment_schema import AppointmentStatus
from barberbook.scheduling.slot_generator import available_slots, find_slot, generate_slots
from tests.conftest import (
    MONDAY, SUNDAY, at, make_appointment, make_service, make_unchecked_week, make_week,
)


class TestFullDay:
    def test_thirty_minute_service_fills_nine_to_six(self):
        slots = generate_slots(MONDAY, make_service(30), make_week())
        assert len(slots) == 18
        assert slots[0].start_time == at(MONDAY, "09:00")
        assert slots[0].end_time == at(MONDAY, "09:30")
        assert slots[-1].start_time == at(MONDAY, "17:30")
        assert slots[-1].end_time == at(MONDAY, "18:00")

    def test_all_available_without_appointments(self):
        slots = generate_slots(MONDAY, make_service(30), make_week())
        assert all(s.is_available for s in slots)
        assert all(s.appointment_id is None for s in slots)

    def test_slots_are_ordered_and_spaced_by_granularity(self):
        slots = generate_slots(MONDAY, make_service(45), make_week())
        starts = [s.start_time for s in slots]
        assert starts == sorted(starts)
        for earlier, later in zip(starts, starts[1:]):
            assert later - earlier == timedelta(minutes=30)

    def test_each_slot_lasts_service_duration(self):
        slots = generate_slots(MONDAY, make_service(45), make_week())
        assert all(s.end_time - s.start_time == timedelta(minutes=45) for s in slots)

    def test_no_slot_ends_after_closing(self):
        for duration in (15, 30, 45, 60, 90, 120):
            slots = generate_slots(MONDAY, make_service(duration), make_week())
            assert all(s.end_time <= at(MONDAY, "18:00") for s in slots)

    def test_long_service_still_starts_every_thirty_minutes(self):
        slots = generate_slots(MONDAY, make_service(60), make_week())
        assert len(slots) == 17
        assert slots[1].start_time == at(MONDAY, "09:30")
        assert slots[-1].start_time == at(MONDAY, "17:00")

    def test_slot_ending_exactly_at_close_is_included(self):
        slots = generate_slots(MONDAY, make_service(90), make_week("09:00", "10:30"))
        assert [s.start_time for s in slots] == [at(MONDAY, "09:00")]

    def test_custom_granularity(self):
        slots = generate_slots(MONDAY, make_service(30), make_week("09:00", "10:00"),
                               granularity_minutes=15)
        assert [s.start_time for s in slots] == [
            at(MONDAY, "09:00"), at(MONDAY, "09:15"), at(MONDAY, "09:30"),
        ]

    def test_slots_are_in_business_zone(self):
        slots = generate_slots(MONDAY, make_service(30), make_week())
        assert all(s.start_time.date() == MONDAY for s in slots)
        assert slots[0].start_time.tzinfo is not None


class TestEmptyDays:
    def test_closed_day_has_no_slots(self):
        week = make_week(open_days=(0, 1, 2, 3, 4, 5))
        assert generate_slots(SUNDAY, make_service(30), week) == []

    def test_missing_day_record_is_closed(self):
        week = make_week(open_days=(0,))
        assert generate_slots(MONDAY + timedelta(days=1), make_service(30), week) == []

    def test_duration_longer_than_window(self):
        slots = generate_slots(MONDAY, make_service(120), make_week("09:00", "10:30"))
        assert slots == []

    def test_degenerate_window_open_equals_close(self):
        slots = generate_slots(MONDAY, make_service(30), make_unchecked_week("09:00", "09:00"))
        assert slots == []

    def test_inverted_window(self):
        slots = generate_slots(MONDAY, make_service(30), make_unchecked_week("18:00", "09:00"))
        assert slots == []


class TestConflicts:
    def test_existing_appointment_blocks_only_overlapping_slot(self):
        booked = make_appointment(at(MONDAY, "10:00"), 30)
        slots = generate_slots(MONDAY, make_service(30), make_week(), [booked])

        ten = find_slot(slots, at(MONDAY, "10:00"))
        assert ten is not None and not ten.is_available
        assert ten.appointment_id == booked.id
        assert find_slot(slots, at(MONDAY, "09:30")).is_available
        assert find_slot(slots, at(MONDAY, "10:30")).is_available
        assert len(available_slots(slots)) == 17

    def test_unavailable_slots_are_kept_in_place(self):
        booked = make_appointment(at(MONDAY, "10:00"), 30)
        slots = generate_slots(MONDAY, make_service(30), make_week(), [booked])
        assert len(slots) == 18

    def test_longer_service_blocked_by_partial_overlap(self):
        booked = make_appointment(at(MONDAY, "10:00"), 30)
        slots = generate_slots(MONDAY, make_service(60), make_week(), [booked])
        blocked = [s.start_time for s in slots if not s.is_available]
        assert blocked == [at(MONDAY, "09:30"), at(MONDAY, "10:00")]

    def test_touching_appointment_does_not_block(self):
        booked = make_appointment(at(MONDAY, "09:30"), 30)
        slots = generate_slots(MONDAY, make_service(30), make_week(), [booked])
        assert find_slot(slots, at(MONDAY, "09:00")).is_available
        assert find_slot(slots, at(MONDAY, "10:00")).is_available

    def test_cancelled_appointment_does_not_block(self):
        booked = make_appointment(at(MONDAY, "10:00"), status=AppointmentStatus.CANCELLED)
        slots = generate_slots(MONDAY, make_service(30), make_week(), [booked])
        assert all(s.is_available for s in slots)

    def test_completed_appointment_still_blocks(self):
        booked = make_appointment(at(MONDAY, "10:00"), status=AppointmentStatus.COMPLETED)
        slots = generate_slots(MONDAY, make_service(30), make_week(), [booked])
        assert not find_slot(slots, at(MONDAY, "10:00")).is_available

    def test_other_business_appointment_does_not_block(self):
        booked = make_appointment(at(MONDAY, "10:00"), owner_id="someone-else")
        slots = generate_slots(MONDAY, make_service(30), make_week(), [booked])
        assert all(s.is_available for s in slots)

    def test_appointment_stored_in_utc_still_conflicts(self):
        booked = make_appointment(at(MONDAY, "10:00").astimezone(timezone.utc))
        slots = generate_slots(MONDAY, make_service(30), make_week(), [booked])
        assert not find_slot(slots, at(MONDAY, "10:00")).is_available


class TestPurity:
    def test_identical_inputs_give_identical_output(self):
        week = make_week()
        service = make_service(45)
        booked = [make_appointment(at(MONDAY, "11:00"), 45)]
        first = generate_slots(MONDAY, service, week, booked)
        second = generate_slots(MONDAY, service, week, booked)
        assert first == second

    def test_accepts_generator_of_appointments(self):
        booked = (a for a in [make_appointment(at(MONDAY, "10:00"))])
        slots = generate_slots(MONDAY, make_service(30), make_week(), booked)
        assert not find_slot(slots, at(MONDAY, "10:00")).is_available


class TestFindSlot:
    def test_naive_time_is_business_local(self):
        slots = generate_slots(MONDAY, make_service(30), make_week())
        naive = at(MONDAY, "11:00").replace(tzinfo=None)
        assert find_slot(slots, naive).start_time == at(MONDAY, "11:00")

    def test_unlisted_time_returns_none(self):
        slots = generate_slots(MONDAY, make_service(30), make_week())
        assert find_slot(slots, at(MONDAY, "11:10")) is None
        assert find_slot(slots, at(MONDAY, "20:00")) is None
