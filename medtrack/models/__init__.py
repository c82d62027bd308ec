from medtrack.models.dose_reminder import DoseReminderRecord
from medtrack.models.medicine import MedicineRecord
from medtrack.models.schedule import ScheduleRecord

__all__ = ["MedicineRecord", "ScheduleRecord", "DoseReminderRecord"]
