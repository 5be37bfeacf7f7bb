"""
Clinic REST API client for fetching schedules and appointments.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from ..domain.exceptions import DataSourceError, NotFoundError
from ..domain.models import AppointmentRecord, ScheduleException, WeeklyScheduleEntry
from .records import (
    parse_appointment,
    parse_appointments,
    parse_schedule_entries,
    parse_schedule_exceptions,
    service_duration,
)

logger = logging.getLogger(__name__)


class ClinicApiClient:
    """
    Client for the clinic backend REST API.

    Every response is wrapped in an envelope:
    {"success": true, "message": "...", "data": <payload>}
    """

    def __init__(self, base_url: str, access_token: str | None = None, timeout: float = 30):
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. https://clinic.example.com/api/v1
            access_token: Optional bearer token
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}
        if access_token:
            self.headers["Authorization"] = f"Bearer {access_token}"

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        """
        Perform a GET request and unwrap the response envelope.

        Raises:
            NotFoundError: On HTTP 404
            DataSourceError: If the request fails or the body is not JSON
        """
        url = f"{self.base_url}{path}"

        try:
            response = requests.get(url, headers=self.headers, params=params, timeout=self.timeout)
            if response.status_code == 404:
                raise NotFoundError(f"Not found: {path}")
            response.raise_for_status()
            body = response.json()

        except requests.exceptions.RequestException as e:
            raise DataSourceError(f"Failed to fetch {path} from clinic API: {e}") from e
        except ValueError as e:
            raise DataSourceError(f"Invalid JSON from {path}: {e}") from e

        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    async def _fetch(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        # requests is blocking; keep the event loop free.
        return await asyncio.to_thread(self._get, path, params)

    async def _fetch_list(self, path: str, params: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        data = await self._fetch(path, params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise DataSourceError(f"Expected a list from {path}, got {type(data).__name__}")
        return data

    async def get_schedules(self, employee_id: str) -> List[WeeklyScheduleEntry]:
        records = await self._fetch_list(f"/schedules/employee/{employee_id}")
        return parse_schedule_entries(records)

    async def get_appointments(self, employee_id: str, target_date: date) -> List[AppointmentRecord]:
        records = await self._fetch_list(
            f"/appointments/employee/{employee_id}/date/{target_date.isoformat()}"
        )
        return parse_appointments(records)

    async def get_appointment(self, appointment_id: str) -> AppointmentRecord:
        record = await self._fetch(f"/appointments/{appointment_id}")
        try:
            return parse_appointment(record)
        except (KeyError, TypeError, ValueError) as exc:
            raise DataSourceError(f"Could not parse appointment {appointment_id}: {exc}") from exc

    async def get_service_duration(self, service_id: str) -> Optional[int]:
        record = await self._fetch(f"/services/{service_id}")
        if not isinstance(record, dict):
            return None
        return service_duration(record)

    async def get_schedule_exceptions(self, employee_id: str) -> List[ScheduleException]:
        records = await self._fetch_list(f"/schedules/exceptions/employee/{employee_id}")
        return parse_schedule_exceptions(records)

    async def get_affected_appointments(
        self,
        employee_id: str,
        date_from: date,
        date_to: date
    ) -> List[AppointmentRecord]:
        records = await self._fetch_list(
            f"/schedules/exceptions/employee/{employee_id}/affected-appointments",
            params={"dateFrom": date_from.isoformat(), "dateTo": date_to.isoformat()},
        )
        return parse_appointments(records)
