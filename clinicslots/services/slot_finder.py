"""
Application services for the booking flows.

The service coordinates fetching schedules and appointments via a clinic
data source adapter and delegates the slot calculation to the domain-level
``SlotCalculator``. Patient self-booking and receptionist-assisted booking
share ``find_slots``; rescheduling an appointment affected by a schedule
exception uses ``find_reschedule_slots``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Protocol, Set

from ..adapters.records import booked_ranges_from_appointments
from ..domain.exceptions import DateBlockedError
from ..domain.models import AppointmentRecord, ScheduleException, Slot, WeeklyScheduleEntry
from ..domain.rules import (
    DEFAULT_SERVICE_DURATION,
    active_exceptions,
    drop_past_slots,
    find_blocking_exception,
    resolve_service_duration,
)
from ..domain.slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)


class ClinicDataSourceProtocol(Protocol):
    """Protocol describing the clinic data needed by the service."""

    async def get_schedules(self, employee_id: str) -> List[WeeklyScheduleEntry]:
        """Return all weekly schedule entries of an employee."""

    async def get_appointments(self, employee_id: str, target_date: date) -> List[AppointmentRecord]:
        """Return the employee's appointments on a date, any status."""

    async def get_appointment(self, appointment_id: str) -> AppointmentRecord:
        """Return one appointment or raise NotFoundError."""

    async def get_service_duration(self, service_id: str) -> Optional[int]:
        """Return the service's duration in minutes, None if unknown."""

    async def get_schedule_exceptions(self, employee_id: str) -> List[ScheduleException]:
        """Return all schedule exceptions of an employee."""

    async def get_affected_appointments(
        self,
        employee_id: str,
        date_from: date,
        date_to: date,
    ) -> List[AppointmentRecord]:
        """Return the employee's appointments within a date range."""


@dataclass(frozen=True)
class AffectedAppointment:
    """An appointment that falls inside a schedule exception."""
    appointment: AppointmentRecord
    exception: ScheduleException


class SlotFinderService:
    """
    Orchestrates data retrieval and slot calculation for the booking flows.

    Dependency inversion toward a protocol makes it easy to plug in the
    REST API client or the JSON file source in tests.
    """

    def __init__(
        self,
        data_source: ClinicDataSourceProtocol,
        slot_calculator: SlotCalculator,
        default_duration_minutes: int = DEFAULT_SERVICE_DURATION,
    ) -> None:
        self._data_source = data_source
        self._slot_calculator = slot_calculator
        self._default_duration = default_duration_minutes

    async def find_slots(
        self,
        *,
        employee_id: str,
        target_date: date,
        now: datetime,
        service_id: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ) -> List[Slot]:
        """
        Slots for a new booking (patient or receptionist).

        An explicit duration_minutes wins over the service's duration.
        """
        duration = await self.resolve_duration(service_id, duration_minutes)
        return await self._compute(
            employee_id=employee_id,
            target_date=target_date,
            now=now,
            duration=duration,
        )

    async def find_reschedule_slots(
        self,
        *,
        appointment_id: str,
        employee_id: str,
        target_date: date,
        now: datetime,
    ) -> List[Slot]:
        """
        Slots for moving an existing appointment to employee/date.

        Raises:
            DateBlockedError: If an active schedule exception covers the date
            NotFoundError: If the appointment does not exist
        """
        exceptions = await self._data_source.get_schedule_exceptions(employee_id)
        blocking = find_blocking_exception(exceptions, target_date, now.date())
        if blocking is not None:
            raise DateBlockedError(blocking)

        appointment = await self._data_source.get_appointment(appointment_id)
        duration = await self.resolve_duration(appointment.service_id, None)

        return await self._compute(
            employee_id=employee_id,
            target_date=target_date,
            now=now,
            duration=duration,
            exclude_appointment_id=appointment_id,
        )

    async def find_affected_appointments(
        self,
        *,
        employee_id: str,
        today: date,
    ) -> List[AffectedAppointment]:
        """
        Appointments that fall into the employee's active schedule exceptions.

        Past days of an exception are not searched. An appointment covered by
        several overlapping exceptions is listed once, under the first one.
        Appointments that are already cancelled, rescheduled, completed or
        marked no-show are left out.
        """
        exceptions = await self._data_source.get_schedule_exceptions(employee_id)
        affected: List[AffectedAppointment] = []
        seen: Set[str] = set()

        for exception in active_exceptions(exceptions, today):
            appointments = await self._data_source.get_affected_appointments(
                employee_id,
                max(exception.date_from, today),
                exception.date_to,
            )
            for appointment in appointments:
                if appointment.appointment_id in seen:
                    continue
                if not appointment.status.needs_rescheduling:
                    logger.debug(
                        "Skipping %s appointment %s",
                        appointment.status.value, appointment.appointment_id
                    )
                    continue
                seen.add(appointment.appointment_id)
                affected.append(AffectedAppointment(appointment=appointment, exception=exception))

        return affected

    async def resolve_duration(
        self,
        service_id: Optional[str],
        duration_minutes: Optional[int],
    ) -> int:
        """Explicit duration, then the service's duration, then the default."""
        if duration_minutes is not None:
            return duration_minutes

        service_duration = None
        if service_id is not None:
            service_duration = await self._data_source.get_service_duration(service_id)

        return resolve_service_duration(service_duration, default=self._default_duration)

    async def _compute(
        self,
        *,
        employee_id: str,
        target_date: date,
        now: datetime,
        duration: int,
        exclude_appointment_id: Optional[str] = None,
    ) -> List[Slot]:
        schedules = await self._data_source.get_schedules(employee_id)
        appointments = await self._data_source.get_appointments(employee_id, target_date)
        booked = booked_ranges_from_appointments(
            appointments,
            exclude_appointment_id=exclude_appointment_id,
        )

        slots = self._slot_calculator.compute_slots(
            target_date=target_date,
            weekly_schedules=schedules,
            booked_ranges=booked,
            service_duration_minutes=duration,
        )

        visible = drop_past_slots(slots, target_date, now)
        logger.info(
            "Employee %s on %s: %d slot(s), %d after same-day filtering",
            employee_id, target_date, len(slots), len(visible)
        )
        return visible
