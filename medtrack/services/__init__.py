from medtrack.services.expansion import expand
from medtrack.services.medicine_service import MedicineService
from medtrack.services.reminder_service import ReminderDetails, ReminderService
from medtrack.services.schedule_service import ScheduleService

__all__ = ["expand", "MedicineService", "ReminderDetails", "ReminderService", "ScheduleService"]
