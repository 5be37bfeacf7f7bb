"""
Tests for the booking companion rules.
"""

from datetime import date, datetime

from clinicslots.domain.models import ExceptionType, ScheduleException, Slot, TimeOfDay
from clinicslots.domain.rules import (
    PaymentFilter,
    drop_past_slots,
    filter_by_payment,
    find_blocking_exception,
    resolve_service_duration,
)

TODAY = date(2024, 11, 25)


def _slot(start, paid=False):
    start_time = TimeOfDay.parse(start)
    return Slot(start_time=start_time, end_time=start_time.plus(30), is_paid=paid)


class TestDropPastSlots:
    """Tests for same-day filtering."""

    def test_drops_started_slots_today(self):
        slots = [_slot("09:00"), _slot("09:30"), _slot("10:00")]

        visible = drop_past_slots(slots, TODAY, datetime(2024, 11, 25, 9, 30, 45))

        # 09:30 is not strictly after the current minute
        assert [s.start_time.format() for s in visible] == ["10:00"]

    def test_other_dates_untouched(self):
        slots = [_slot("09:00"), _slot("09:30")]

        visible = drop_past_slots(slots, date(2024, 11, 26), datetime(2024, 11, 25, 23, 0))

        assert visible == slots


class TestPaymentFilter:
    """Tests for the free/paid slot picker filter."""

    def test_filters(self):
        slots = [_slot("11:30"), _slot("12:00", paid=True)]

        assert filter_by_payment(slots, PaymentFilter.ALL) == slots
        assert filter_by_payment(slots, PaymentFilter.FREE) == [slots[0]]
        assert filter_by_payment(slots, PaymentFilter.PAID) == [slots[1]]


class TestServiceDuration:
    """Tests for duration fallback."""

    def test_first_positive_candidate_wins(self):
        assert resolve_service_duration(None, 20) == 20
        assert resolve_service_duration(45, 20) == 45
        assert resolve_service_duration(0, None) == 30
        assert resolve_service_duration(None, default=15) == 15


class TestBlockingException:
    """Tests for schedule exception lookup."""

    def _exception(self, date_from, date_to):
        return ScheduleException(
            employee_id="doc-1",
            exception_type=ExceptionType.VACATION,
            date_from=date_from,
            date_to=date_to,
        )

    def test_finds_covering_exception(self):
        vacation = self._exception(date(2024, 11, 27), date(2024, 11, 29))

        assert find_blocking_exception([vacation], date(2024, 11, 28), TODAY) is vacation
        assert find_blocking_exception([vacation], date(2024, 11, 30), TODAY) is None

    def test_expired_exception_ignored(self):
        past = self._exception(date(2024, 11, 1), date(2024, 11, 5))

        assert find_blocking_exception([past], date(2024, 11, 4), TODAY) is None
