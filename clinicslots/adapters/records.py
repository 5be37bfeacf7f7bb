"""
Conversion of clinic API records (camelCase JSON) into domain values.

Record format, as served by the clinic backend:
    schedule:    {"id", "employeeId", "dayOfWeek", "startTime", "endTime",
                  "paidStartTime", "paidEndTime", "effectiveFrom", "effectiveTo"}
    appointment: {"id", "employee": {"id"}, "service": {"id"}, "appointmentDate",
                  "startTime", "endTime", "status"}
    exception:   {"id", "employeeId", "exceptionType", "dateFrom", "dateTo", "reason"}
    service:     {"id", "name", "currentDurationMin", "durationMin"}
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from ..domain.models import (
    AppointmentRecord,
    AppointmentStatus,
    BookedRange,
    ExceptionType,
    PaidWindow,
    ScheduleException,
    TimeOfDay,
    WeeklyScheduleEntry,
)

logger = logging.getLogger(__name__)


def parse_time(value: Any) -> Optional[TimeOfDay]:
    """Parse an optional "HH:MM[:SS]" value, returning None when unusable."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return TimeOfDay.parse(value)
    except ValueError:
        logger.warning("Ignoring unparseable time of day %r", value)
        return None


def parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_paid_window(record: Dict[str, Any]) -> Optional[PaidWindow]:
    start = parse_time(record.get("paidStartTime"))
    end = parse_time(record.get("paidEndTime"))
    if start is None or end is None:
        return None
    try:
        return PaidWindow(start=start, end=end)
    except ValueError as exc:
        logger.warning("Ignoring paid window of schedule %s: %s", record.get("id"), exc)
        return None


def parse_schedule_entry(record: Dict[str, Any]) -> WeeklyScheduleEntry:
    """
    Convert a schedule record into a WeeklyScheduleEntry.

    Missing or invalid working times become None; an incomplete paid window
    makes the entry fully unpaid.

    Raises:
        KeyError: If dayOfWeek or effectiveFrom is missing
        ValueError: If dayOfWeek or a date is invalid
    """
    effective_from = parse_date(record["effectiveFrom"])
    if effective_from is None:
        raise ValueError("effectiveFrom must not be empty")

    return WeeklyScheduleEntry(
        day_of_week=int(record["dayOfWeek"]),
        start_time=parse_time(record.get("startTime")),
        end_time=parse_time(record.get("endTime")),
        effective_from=effective_from,
        effective_to=parse_date(record.get("effectiveTo")),
        paid_window=_parse_paid_window(record),
        entry_id=record.get("id"),
    )


def parse_schedule_entries(records: Iterable[Dict[str, Any]]) -> List[WeeklyScheduleEntry]:
    """Convert schedule records, skipping the ones that cannot be used at all."""
    entries: List[WeeklyScheduleEntry] = []

    for record in records:
        try:
            entries.append(parse_schedule_entry(record))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping schedule record %s: %s", record.get("id"), exc)

    return entries


def _nested_id(record: Dict[str, Any], key: str) -> Optional[str]:
    nested = record.get(key)
    if isinstance(nested, dict) and nested.get("id") is not None:
        return str(nested["id"])
    flat = record.get(f"{key}Id")
    return str(flat) if flat is not None else None


def parse_status(value: Any) -> AppointmentStatus:
    """
    Map a status string onto AppointmentStatus.

    A missing status means WAITING. Unrecognised values become UNKNOWN, which
    still occupies time so the slot cannot be booked twice.
    """
    if not value:
        return AppointmentStatus.WAITING
    try:
        return AppointmentStatus(str(value).upper())
    except ValueError:
        logger.warning("Unknown appointment status %r; treating it as occupying", value)
        return AppointmentStatus.UNKNOWN


def parse_appointment(record: Dict[str, Any]) -> AppointmentRecord:
    """
    Convert an appointment record.

    Raises:
        KeyError: If the id is missing
        ValueError: If appointmentDate is invalid
    """
    patient = record.get("patient") or {}
    return AppointmentRecord(
        appointment_id=str(record["id"]),
        employee_id=_nested_id(record, "employee") or "",
        appointment_date=parse_date(record.get("appointmentDate")),
        start_time=record.get("startTime"),
        end_time=record.get("endTime"),
        status=parse_status(record.get("status")),
        service_id=_nested_id(record, "service"),
        patient_name=patient.get("fullName") if isinstance(patient, dict) else None,
    )


def parse_appointments(records: Iterable[Dict[str, Any]]) -> List[AppointmentRecord]:
    appointments: List[AppointmentRecord] = []

    for record in records:
        try:
            appointments.append(parse_appointment(record))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping appointment record %s: %s", record.get("id"), exc)

    return appointments


def time_of_day_from_appointment(value: Optional[str]) -> Optional[TimeOfDay]:
    """
    Extract the time of day from a timestamp or bare time string.

    "YYYY-MM-DDTHH:MM:SS" yields characters 11-16; anything shorter is read
    from its first five characters.
    """
    if not value:
        return None
    return parse_time(value[11:16] or value[:5])


def booked_ranges_from_appointments(
    appointments: Iterable[AppointmentRecord],
    exclude_appointment_id: Optional[str] = None
) -> List[BookedRange]:
    """
    Reduce appointments to the time ranges they occupy.

    Cancelled and no-show appointments are dropped, as is the appointment
    being rescheduled (it must not block its own new slot).
    """
    ranges: List[BookedRange] = []

    for appointment in appointments:
        if not appointment.status.occupies_time:
            continue
        if exclude_appointment_id is not None and appointment.appointment_id == exclude_appointment_id:
            continue

        start = time_of_day_from_appointment(appointment.start_time)
        end = time_of_day_from_appointment(appointment.end_time)
        if start is None or end is None:
            logger.warning("Appointment %s has no usable time range", appointment.appointment_id)
            continue

        try:
            ranges.append(BookedRange(start=start, end=end))
        except ValueError as exc:
            logger.warning("Skipping appointment %s: %s", appointment.appointment_id, exc)

    return ranges


def parse_schedule_exception(record: Dict[str, Any]) -> ScheduleException:
    date_from = parse_date(record["dateFrom"])
    date_to = parse_date(record["dateTo"])
    if date_from is None or date_to is None:
        raise ValueError("dateFrom and dateTo must not be empty")

    return ScheduleException(
        employee_id=str(record["employeeId"]),
        exception_type=ExceptionType(record.get("exceptionType") or ExceptionType.OTHER.value),
        date_from=date_from,
        date_to=date_to,
        reason=record.get("reason"),
        exception_id=record.get("id"),
    )


def parse_schedule_exceptions(records: Iterable[Dict[str, Any]]) -> List[ScheduleException]:
    exceptions: List[ScheduleException] = []

    for record in records:
        try:
            exceptions.append(parse_schedule_exception(record))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping schedule exception %s: %s", record.get("id"), exc)

    return exceptions


def service_duration(record: Dict[str, Any]) -> Optional[int]:
    """Return currentDurationMin, falling back to durationMin; None if neither is usable."""
    for key in ("currentDurationMin", "durationMin"):
        value = record.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
    return None
