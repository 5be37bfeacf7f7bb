"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .slot_finder import AffectedAppointment, ClinicDataSourceProtocol, SlotFinderService

__all__ = ["AffectedAppointment", "ClinicDataSourceProtocol", "SlotFinderService"]
