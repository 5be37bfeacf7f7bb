"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import BookedRange, PaidWindow, Slot, TimeOfDay, WeeklyScheduleEntry
from .slot_calculator import SlotCalculator

__all__ = ["BookedRange", "PaidWindow", "Slot", "TimeOfDay", "WeeklyScheduleEntry", "SlotCalculator"]
