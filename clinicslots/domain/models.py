"""
Domain models for schedules, bookings and appointment slots.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

# Stand-in for an open-ended effective range.
FAR_FUTURE = date(9999, 12, 31)

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """
    Wall-clock time of day stored as minutes since midnight.

    24:00 is allowed so a shift can close at midnight.
    """
    minutes: int

    def __post_init__(self):
        if not 0 <= self.minutes <= MINUTES_PER_DAY:
            raise ValueError(f"Time of day out of range: {self.minutes} minutes")

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        """
        Parse an "HH:MM" or "HH:MM:SS" string.

        Only the first five characters are significant.

        Raises:
            ValueError: If the string is not a valid time of day
        """
        text = value.strip()[:5]
        hours, sep, minutes = text.partition(":")
        if not sep or not hours.isdigit() or len(minutes) != 2 or not minutes.isdigit():
            raise ValueError(f"Invalid time of day: {value!r}")
        if int(minutes) > 59:
            raise ValueError(f"Invalid time of day: {value!r}")
        return cls(int(hours) * 60 + int(minutes))

    @classmethod
    def of(cls, hour: int, minute: int = 0) -> "TimeOfDay":
        return cls(hour * 60 + minute)

    def plus(self, minutes: int) -> "TimeOfDay":
        return TimeOfDay(self.minutes + minutes)

    def format(self) -> str:
        hours, minutes = divmod(self.minutes, 60)
        return f"{hours:02d}:{minutes:02d}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class PaidWindow:
    """
    Sub-window of a shift during which slots are billable.

    Invariant: start must be before end.
    """
    start: TimeOfDay
    end: TimeOfDay

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Paid window start {self.start} must be before end {self.end}")

    def contains(self, start: TimeOfDay, end: TimeOfDay) -> bool:
        """Check if the interval [start, end) lies fully inside the window."""
        return start >= self.start and end <= self.end


@dataclass(frozen=True)
class WeeklyScheduleEntry:
    """
    A recurring work shift for one employee on one weekday.

    day_of_week follows ISO numbering (1=Monday, 7=Sunday). start_time and
    end_time are None when the source record had no usable value.
    """
    day_of_week: int
    start_time: TimeOfDay | None
    end_time: TimeOfDay | None
    effective_from: date
    effective_to: date | None = None
    paid_window: PaidWindow | None = None
    entry_id: str | None = None

    def __post_init__(self):
        if not 1 <= self.day_of_week <= 7:
            raise ValueError(f"day_of_week must be between 1 and 7, got {self.day_of_week}")

    @property
    def effective_until(self) -> date:
        """Last day the entry applies, FAR_FUTURE when open-ended."""
        return self.effective_to or FAR_FUTURE

    def is_effective_on(self, target_date: date) -> bool:
        return self.effective_from <= target_date <= self.effective_until

    def applies_to(self, target_date: date) -> bool:
        """Check weekday and effective range against a calendar date."""
        return (
            self.day_of_week == target_date.isoweekday()
            and self.is_effective_on(target_date)
        )


@dataclass(frozen=True)
class BookedRange:
    """
    Time occupied by an existing appointment, as a half-open interval.

    Invariant: start must be before end.
    """
    start: TimeOfDay
    end: TimeOfDay

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def overlaps(self, start: TimeOfDay, end: TimeOfDay) -> bool:
        """Check if [start, end) overlaps this range."""
        return start < self.end and end > self.start

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"


@dataclass(frozen=True)
class Slot:
    """
    A candidate appointment interval offered to the user.
    """
    start_time: TimeOfDay
    end_time: TimeOfDay
    available: bool = True
    is_paid: bool = False

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end_time.minutes - self.start_time.minutes

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: HH:MM – HH:MM (paid|free)
        """
        kind = "paid" if self.is_paid else "free"
        suffix = "" if self.available else ", booked"
        return f"{self.start_time} – {self.end_time} ({kind}{suffix})"


class AppointmentStatus(str, Enum):
    WAITING = "WAITING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"
    CANCELLED = "CANCELLED"
    RESCHEDULED = "RESCHEDULED"
    # Any status the backend sends that this client does not know yet
    UNKNOWN = "UNKNOWN"

    @property
    def occupies_time(self) -> bool:
        """Cancelled and no-show appointments free their time again."""
        return self not in (AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW)

    @property
    def needs_rescheduling(self) -> bool:
        """Whether a schedule exception still requires moving the appointment."""
        return self not in (
            AppointmentStatus.CANCELLED,
            AppointmentStatus.RESCHEDULED,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.NO_SHOW,
        )


@dataclass(frozen=True)
class AppointmentRecord:
    """
    An existing appointment as delivered by the appointment source.

    Times are kept as raw strings: full timestamps or bare times.
    """
    appointment_id: str
    employee_id: str
    appointment_date: date | None
    start_time: str | None
    end_time: str | None
    status: AppointmentStatus = AppointmentStatus.WAITING
    service_id: str | None = None
    patient_name: str | None = None


class ExceptionType(str, Enum):
    VACATION = "VACATION"
    SICK_LEAVE = "SICK_LEAVE"
    DAY_OFF = "DAY_OFF"
    DISMISSAL = "DISMISSAL"
    OTHER = "OTHER"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").lower()


@dataclass(frozen=True)
class ScheduleException:
    """
    A period during which an employee does not work despite the weekly schedule.
    """
    employee_id: str
    exception_type: ExceptionType
    date_from: date
    date_to: date
    reason: str | None = None
    exception_id: str | None = None

    def __post_init__(self):
        if self.date_from > self.date_to:
            raise ValueError(f"date_from {self.date_from} must not be after date_to {self.date_to}")

    def covers(self, target_date: date) -> bool:
        return self.date_from <= target_date <= self.date_to

    def is_active(self, today: date) -> bool:
        """An exception stays relevant until its last day has passed."""
        return self.date_to >= today
