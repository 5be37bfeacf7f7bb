"""
Companion rules every booking flow applies around the slot calculator.
"""

from datetime import date, datetime
from enum import Enum
from typing import Iterable, List, Sequence

from .models import Slot, ScheduleException, TimeOfDay

DEFAULT_SERVICE_DURATION = 30


class PaymentFilter(str, Enum):
    """Slot picker filter: all slots, only free ones or only paid ones."""
    ALL = "all"
    FREE = "free"
    PAID = "paid"


def drop_past_slots(slots: Sequence[Slot], target_date: date, now: datetime) -> List[Slot]:
    """
    Remove same-day slots that have already started.

    Only applies when target_date is the date of `now`; a slot survives if
    its start is strictly after the current wall-clock minute.
    """
    if target_date != now.date():
        return list(slots)

    current = TimeOfDay.of(now.hour, now.minute)
    return [slot for slot in slots if slot.start_time > current]


def filter_by_payment(slots: Iterable[Slot], payment: PaymentFilter) -> List[Slot]:
    if payment is PaymentFilter.FREE:
        return [slot for slot in slots if not slot.is_paid]
    if payment is PaymentFilter.PAID:
        return [slot for slot in slots if slot.is_paid]
    return list(slots)


def resolve_service_duration(*candidates: int | None, default: int = DEFAULT_SERVICE_DURATION) -> int:
    """
    Return the first positive duration among the candidates, else the default.

    Mirrors the upstream preference order: current duration, base duration, 30.
    """
    for candidate in candidates:
        if candidate is not None and candidate > 0:
            return candidate
    return default


def active_exceptions(exceptions: Iterable[ScheduleException], today: date) -> List[ScheduleException]:
    return [exc for exc in exceptions if exc.is_active(today)]


def find_blocking_exception(
    exceptions: Iterable[ScheduleException],
    target_date: date,
    today: date
) -> ScheduleException | None:
    """Return the first active exception covering target_date, if any."""
    for exc in active_exceptions(exceptions, today):
        if exc.covers(target_date):
            return exc
    return None
