from medtrack.domain.dose_reminder import DoseReminder, ReminderStatus
from medtrack.domain.errors import (
    InvalidMedicineError,
    InvalidScheduleError,
    MedicineNotFoundError,
    MedTrackError,
    MissingIdentityError,
    ReminderNotFoundError,
    ScheduleNotFoundError,
)
from medtrack.domain.medicine import Medicine
from medtrack.domain.notification import NotificationRequest
from medtrack.domain.schedule import Schedule

__all__ = [
    "DoseReminder",
    "ReminderStatus",
    "Medicine",
    "NotificationRequest",
    "Schedule",
    "MedTrackError",
    "InvalidMedicineError",
    "InvalidScheduleError",
    "MissingIdentityError",
    "ReminderNotFoundError",
    "ScheduleNotFoundError",
    "MedicineNotFoundError",
]
