"""
Domain-specific exception hierarchy for the clinic slot application.
"""


class ClinicSlotsError(Exception):
    """Base class for all application-level errors."""


class InvalidDurationError(ClinicSlotsError, ValueError):
    """Raised when a service duration is not a positive number of minutes."""


class DataSourceError(ClinicSlotsError):
    """Raised when clinic data cannot be fetched or parsed."""


class NotFoundError(ClinicSlotsError):
    """Raised when a requested record does not exist in the data source."""


class DateBlockedError(ClinicSlotsError):
    """Raised when a schedule exception covers the requested date."""

    def __init__(self, exception):
        self.exception = exception
        super().__init__(
            f"Employee {exception.employee_id} is unavailable "
            f"({exception.exception_type.label}) from "
            f"{exception.date_from.isoformat()} to {exception.date_to.isoformat()}"
        )
