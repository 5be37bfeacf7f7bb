"""
clinicslots - bookable appointment slots from doctors' weekly schedules.
"""

__version__ = "0.1.0"
