"""
Core business logic for calculating bookable appointment slots.

Pure domain logic without any external dependencies (no API calls, no
database, no I/O, no clock).
"""

import logging
from datetime import date
from typing import List, Sequence

from .exceptions import InvalidDurationError
from .models import BookedRange, PaidWindow, Slot, TimeOfDay, WeeklyScheduleEntry

logger = logging.getLogger(__name__)


class SlotCalculator:
    """
    Calculates bookable slots for one employee on one date.

    Algorithm:
    1. Resolve the weekly schedule entry in force on the date
    2. Validate its working window and paid sub-window
    3. Partition the window into contiguous slots of the service duration
    4. Drop slots that overlap an existing booking
    5. Tag slots lying fully inside the paid window
    6. Return them in ascending start order
    """

    def __init__(self, include_booked: bool = False):
        # When set, booked slots are kept with available=False instead of dropped.
        self.include_booked = include_booked

    def compute_slots(
        self,
        target_date: date,
        weekly_schedules: Sequence[WeeklyScheduleEntry],
        booked_ranges: Sequence[BookedRange],
        service_duration_minutes: int
    ) -> List[Slot]:
        """
        Compute the ordered slot list for a date.

        Args:
            target_date: Calendar date to book on
            weekly_schedules: All weekly schedule entries of the employee
            booked_ranges: Occupied intervals of that employee on that date
            service_duration_minutes: Slot length in minutes

        Returns:
            List of Slot objects in ascending start order; empty when the
            employee does not work that day

        Raises:
            InvalidDurationError: If the duration is not a positive integer
        """
        self._validate_duration(service_duration_minutes)

        # Step 1: Find the schedule entry in force
        entry = self.resolve_schedule(target_date, weekly_schedules)
        if entry is None:
            logger.debug("No schedule entry applies to %s", target_date)
            return []

        # Step 2: Working window
        if entry.start_time is None or entry.end_time is None:
            logger.debug("Schedule entry %s has no usable working window", entry.entry_id)
            return []

        # Steps 3-5
        slots: List[Slot] = []
        for start, end in self._generate_windows(
            entry.start_time, entry.end_time, service_duration_minutes
        ):
            booked = self._is_booked(start, end, booked_ranges)
            if booked and not self.include_booked:
                continue

            slots.append(
                Slot(
                    start_time=start,
                    end_time=end,
                    available=not booked,
                    is_paid=self._is_paid(start, end, entry.paid_window),
                )
            )

        logger.debug(
            "Computed %d slot(s) for %s (%d min)",
            len(slots), target_date, service_duration_minutes
        )
        return slots

    def resolve_schedule(
        self,
        target_date: date,
        weekly_schedules: Sequence[WeeklyScheduleEntry]
    ) -> WeeklyScheduleEntry | None:
        """
        Select the entry whose weekday and effective range match the date.

        Entries for one weekday are not supposed to overlap. If they do, the
        entry with the latest effective_from wins; ties keep input order.
        """
        matches = [entry for entry in weekly_schedules if entry.applies_to(target_date)]

        if not matches:
            return None

        if len(matches) > 1:
            logger.warning(
                "%d schedule entries apply to %s; using the one effective from the latest date",
                len(matches), target_date
            )
            # max() returns the first of equal keys
            return max(matches, key=lambda entry: entry.effective_from)

        return matches[0]

    @staticmethod
    def _validate_duration(service_duration_minutes: int) -> None:
        if isinstance(service_duration_minutes, bool) or not isinstance(service_duration_minutes, int):
            raise InvalidDurationError(
                f"Service duration must be an integer, got {service_duration_minutes!r}"
            )
        if service_duration_minutes <= 0:
            raise InvalidDurationError(
                f"Service duration must be greater than zero, got {service_duration_minutes}"
            )

    @staticmethod
    def _generate_windows(
        start: TimeOfDay,
        end: TimeOfDay,
        duration: int
    ) -> List[tuple[TimeOfDay, TimeOfDay]]:
        """
        Split [start, end) into contiguous windows of `duration` minutes.

        Example:
        Shift: 08:00 - 08:50, duration 30
        Result: [08:00-08:30]  (the trailing 20 minutes are not offered)
        """
        windows: List[tuple[TimeOfDay, TimeOfDay]] = []
        cursor = start.minutes

        while cursor + duration <= end.minutes:
            windows.append((TimeOfDay(cursor), TimeOfDay(cursor + duration)))
            cursor += duration

        return windows

    @staticmethod
    def _is_booked(
        start: TimeOfDay,
        end: TimeOfDay,
        booked_ranges: Sequence[BookedRange]
    ) -> bool:
        return any(booked.overlaps(start, end) for booked in booked_ranges)

    @staticmethod
    def _is_paid(
        start: TimeOfDay,
        end: TimeOfDay,
        paid_window: PaidWindow | None
    ) -> bool:
        return paid_window is not None and paid_window.contains(start, end)
