"""
Clinic data source backed by a local JSON document.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.exceptions import DataSourceError, NotFoundError
from ..domain.models import AppointmentRecord, ScheduleException, WeeklyScheduleEntry
from .records import (
    parse_appointments,
    parse_schedule_entries,
    parse_schedule_exceptions,
    service_duration,
)

logger = logging.getLogger(__name__)


class JsonClinicDataSource:
    """
    Serves schedules, appointments, services and schedule exceptions from
    a JSON file, for offline use and tests.

    Document format:
    {
        "schedules": [ {schedule record}, ... ],
        "appointments": [ {appointment record}, ... ],
        "services": [ {service record}, ... ],
        "scheduleExceptions": [ {exception record}, ... ]
    }
    """

    def __init__(self, data: Dict[str, Any]):
        self.schedule_records: List[Dict[str, Any]] = data.get("schedules", [])
        self.appointments = parse_appointments(data.get("appointments", []))
        self.service_records: List[Dict[str, Any]] = data.get("services", [])
        self.exceptions = parse_schedule_exceptions(data.get("scheduleExceptions", []))

    @classmethod
    def from_file(cls, data_file: Path) -> "JsonClinicDataSource":
        """
        Load the data source from a JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            DataSourceError: If the file is not a valid JSON object
        """
        if not data_file.exists():
            raise FileNotFoundError(f"Data file not found: {data_file}")

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise DataSourceError(f"Invalid JSON in {data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise DataSourceError("Data file must contain an object at the root level.")

        return cls(data)

    async def get_schedules(self, employee_id: str) -> List[WeeklyScheduleEntry]:
        records = [
            record for record in self.schedule_records
            if str(record.get("employeeId")) == employee_id
        ]
        return parse_schedule_entries(records)

    async def get_appointments(self, employee_id: str, target_date: date) -> List[AppointmentRecord]:
        return [
            appointment for appointment in self.appointments
            if appointment.employee_id == employee_id
            and appointment.appointment_date == target_date
        ]

    async def get_appointment(self, appointment_id: str) -> AppointmentRecord:
        for appointment in self.appointments:
            if appointment.appointment_id == appointment_id:
                return appointment
        raise NotFoundError(f"Appointment not found: {appointment_id}")

    async def get_service_duration(self, service_id: str) -> Optional[int]:
        for record in self.service_records:
            if str(record.get("id")) == service_id:
                return service_duration(record)
        logger.warning("Service %s not found; using default duration", service_id)
        return None

    async def get_schedule_exceptions(self, employee_id: str) -> List[ScheduleException]:
        return [exc for exc in self.exceptions if exc.employee_id == employee_id]

    async def get_affected_appointments(
        self,
        employee_id: str,
        date_from: date,
        date_to: date
    ) -> List[AppointmentRecord]:
        """Appointments of the employee within [date_from, date_to], any status."""
        return [
            appointment for appointment in self.appointments
            if appointment.employee_id == employee_id
            and appointment.appointment_date is not None
            and date_from <= appointment.appointment_date <= date_to
        ]
