"""Medication dosing schedules and dose reminders."""
__version__ = "0.1.0"
