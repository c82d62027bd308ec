from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NotificationRequest:
    """What a notification scheduler needs to announce one dose."""

    reminder_id: int
    medicine_name: str
    dosage: str
    scheduled_time: datetime

    @property
    def title(self) -> str:
        return "Time for your medicine"

    @property
    def body(self) -> str:
        return f"{self.medicine_name} - {self.dosage}"
