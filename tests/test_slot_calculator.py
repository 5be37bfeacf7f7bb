"""
Tests for slot calculator.
"""

from datetime import date, timedelta

import pytest

from clinicslots.domain.exceptions import InvalidDurationError
from clinicslots.domain.models import BookedRange, PaidWindow, TimeOfDay, WeeklyScheduleEntry
from clinicslots.domain.slot_calculator import SlotCalculator

MONDAY = date(2024, 11, 25)


def _monday_schedule(start="08:00", end="16:00", paid=None, effective_from=MONDAY, effective_to=None):
    paid_window = None
    if paid:
        paid_window = PaidWindow(start=TimeOfDay.parse(paid[0]), end=TimeOfDay.parse(paid[1]))
    return WeeklyScheduleEntry(
        day_of_week=1,
        start_time=TimeOfDay.parse(start),
        end_time=TimeOfDay.parse(end),
        effective_from=effective_from,
        effective_to=effective_to,
        paid_window=paid_window,
    )


def _booked(start, end):
    return BookedRange(start=TimeOfDay.parse(start), end=TimeOfDay.parse(end))


class TestSlotCalculator:
    """Tests for SlotCalculator."""

    def test_full_day_without_bookings(self):
        """08:00-16:00 in 30 minute steps gives 16 free slots."""
        calculator = SlotCalculator()

        slots = calculator.compute_slots(MONDAY, [_monday_schedule()], [], 30)

        assert len(slots) == 16
        assert slots[0].start_time == TimeOfDay.of(8)
        assert slots[-1].start_time == TimeOfDay.of(15, 30)
        assert slots[-1].end_time == TimeOfDay.of(16)
        assert all(slot.available and not slot.is_paid for slot in slots)

    def test_slots_are_contiguous_and_sized(self):
        calculator = SlotCalculator()

        slots = calculator.compute_slots(MONDAY, [_monday_schedule()], [], 45)

        assert all(slot.duration_minutes() == 45 for slot in slots)
        for current, following in zip(slots, slots[1:]):
            assert current.end_time == following.start_time

    def test_paid_window_tagging(self):
        """Only slots fully inside 12:00-14:00 are paid."""
        calculator = SlotCalculator()
        schedule = _monday_schedule(paid=("12:00", "14:00"))

        slots = calculator.compute_slots(MONDAY, [schedule], [], 30)

        paid = [slot.start_time.format() for slot in slots if slot.is_paid]
        assert paid == ["12:00", "12:30", "13:00", "13:30"]

    def test_paid_window_partial_overlap_is_not_paid(self):
        calculator = SlotCalculator()
        schedule = _monday_schedule(paid=("12:15", "14:00"))

        slots = calculator.compute_slots(MONDAY, [schedule], [], 30)
        by_start = {slot.start_time.format(): slot for slot in slots}

        assert not by_start["12:00"].is_paid
        assert by_start["12:30"].is_paid
        assert by_start["13:30"].is_paid
        assert not by_start["14:00"].is_paid

    def test_booked_slot_is_excluded(self):
        calculator = SlotCalculator()

        slots = calculator.compute_slots(
            MONDAY, [_monday_schedule()], [_booked("09:00", "09:30")], 30
        )
        starts = [slot.start_time.format() for slot in slots]

        assert "09:00" not in starts
        assert "08:30" in starts
        assert "09:30" in starts
        assert len(slots) == 15

    def test_booking_straddling_two_slots(self):
        calculator = SlotCalculator()

        slots = calculator.compute_slots(
            MONDAY, [_monday_schedule()], [_booked("09:15", "09:45")], 30
        )
        starts = [slot.start_time.format() for slot in slots]

        assert "09:00" not in starts
        assert "09:30" not in starts
        assert "10:00" in starts

    def test_no_returned_slot_overlaps_bookings(self):
        calculator = SlotCalculator()
        booked = [_booked("08:10", "08:20"), _booked("11:00", "12:40"), _booked("15:50", "16:00")]

        slots = calculator.compute_slots(MONDAY, [_monday_schedule()], booked, 20)

        for slot in slots:
            assert not any(b.overlaps(slot.start_time, slot.end_time) for b in booked)

    def test_include_booked_marks_unavailable(self):
        calculator = SlotCalculator(include_booked=True)

        slots = calculator.compute_slots(
            MONDAY, [_monday_schedule()], [_booked("09:00", "09:30")], 30
        )
        unavailable = [slot for slot in slots if not slot.available]

        assert len(slots) == 16
        assert [slot.start_time.format() for slot in unavailable] == ["09:00"]

    def test_no_partial_slot(self):
        """08:00-08:50 with 30 minutes yields only 08:00-08:30."""
        calculator = SlotCalculator()

        slots = calculator.compute_slots(MONDAY, [_monday_schedule(end="08:50")], [], 30)

        assert len(slots) == 1
        assert slots[0].end_time == TimeOfDay.of(8, 30)

    def test_duration_longer_than_shift(self):
        calculator = SlotCalculator()

        slots = calculator.compute_slots(MONDAY, [_monday_schedule(end="08:50")], [], 60)

        assert slots == []

    def test_non_working_day(self):
        """Only Monday is scheduled; Sunday gives nothing."""
        calculator = SlotCalculator()

        slots = calculator.compute_slots(date(2024, 12, 1), [_monday_schedule()], [], 30)

        assert slots == []

    def test_expired_entry(self):
        calculator = SlotCalculator()
        schedule = _monday_schedule(
            effective_from=MONDAY - timedelta(days=28),
            effective_to=MONDAY - timedelta(days=1),
        )

        assert calculator.compute_slots(MONDAY, [schedule], [], 30) == []

    def test_not_yet_effective_entry(self):
        calculator = SlotCalculator()
        schedule = _monday_schedule(effective_from=MONDAY + timedelta(days=7))

        assert calculator.compute_slots(MONDAY, [schedule], [], 30) == []

    def test_open_ended_entry_applies_far_ahead(self):
        calculator = SlotCalculator()
        far_monday = MONDAY + timedelta(weeks=52 * 50)

        slots = calculator.compute_slots(far_monday, [_monday_schedule()], [], 30)

        assert len(slots) == 16

    def test_missing_working_window(self):
        calculator = SlotCalculator()
        schedule = WeeklyScheduleEntry(
            day_of_week=1,
            start_time=TimeOfDay.of(8),
            end_time=None,
            effective_from=MONDAY,
        )

        assert calculator.compute_slots(MONDAY, [schedule], [], 30) == []

    def test_entry_for_date_is_chosen_among_weekdays(self):
        calculator = SlotCalculator()
        tuesday = WeeklyScheduleEntry(
            day_of_week=2,
            start_time=TimeOfDay.of(12),
            end_time=TimeOfDay.of(13),
            effective_from=MONDAY,
        )

        slots = calculator.compute_slots(MONDAY + timedelta(days=1), [_monday_schedule(), tuesday], [], 30)

        assert [slot.start_time.format() for slot in slots] == ["12:00", "12:30"]

    def test_overlapping_entries_prefer_latest_effective_from(self):
        calculator = SlotCalculator()
        old = _monday_schedule(effective_from=date(2024, 1, 1))
        new = _monday_schedule(start="10:00", end="11:00", effective_from=date(2024, 11, 1))

        slots = calculator.compute_slots(MONDAY, [old, new], [], 30)

        assert [slot.start_time.format() for slot in slots] == ["10:00", "10:30"]
        assert calculator.resolve_schedule(MONDAY, [new, old]) is new

    def test_idempotent(self):
        calculator = SlotCalculator()
        args = (MONDAY, [_monday_schedule(paid=("12:00", "14:00"))], [_booked("09:00", "09:30")], 30)

        assert calculator.compute_slots(*args) == calculator.compute_slots(*args)

    @pytest.mark.parametrize("duration", [0, -30])
    def test_non_positive_duration_raises(self, duration):
        calculator = SlotCalculator()

        with pytest.raises(InvalidDurationError):
            calculator.compute_slots(MONDAY, [_monday_schedule()], [], duration)

    def test_duration_checked_even_without_schedule(self):
        calculator = SlotCalculator()

        with pytest.raises(ValueError):
            calculator.compute_slots(MONDAY, [], [], 0)
