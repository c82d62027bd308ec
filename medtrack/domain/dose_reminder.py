from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional


class ReminderStatus(str, Enum):
    """Status of a dose reminder as shown to users."""

    PENDING = "pending"
    TAKEN = "taken"
    SKIPPED = "skipped"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class DoseReminder:
    """
    A single dose occurrence generated from a schedule.

    Only ``is_taken`` and ``is_skipped`` are stored; "overdue" is derived from
    the scheduled time whenever the status is read.
    """

    schedule_id: int
    medicine_id: int
    scheduled_time: datetime
    created_at: datetime
    id: Optional[int] = None
    taken_at: Optional[datetime] = None
    is_taken: bool = False
    is_skipped: bool = False

    @classmethod
    def create(
        cls,
        schedule_id: int,
        medicine_id: int,
        scheduled_time: datetime,
        created_at: Optional[datetime] = None,
    ) -> "DoseReminder":
        """Build an unsaved, pending reminder."""
        return cls(
            schedule_id=schedule_id,
            medicine_id=medicine_id,
            scheduled_time=scheduled_time,
            created_at=created_at or datetime.now(),
        )

    def mark_as_taken(self, now: Optional[datetime] = None) -> "DoseReminder":
        """
        Return a copy in the taken state.

        Clears ``is_skipped`` and stamps ``taken_at`` with the current time, even
        when the reminder was already taken.
        """
        return replace(
            self,
            is_taken=True,
            is_skipped=False,
            taken_at=now or datetime.now(),
        )

    def mark_as_skipped(self) -> "DoseReminder":
        """
        Return a copy in the skipped state.

        ``taken_at`` is left untouched, so a dose that was taken and later
        skipped still remembers when it was taken.
        """
        return replace(self, is_taken=False, is_skipped=True)

    def is_pending(self) -> bool:
        return not self.is_taken and not self.is_skipped

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now()
        return now > self.scheduled_time and self.is_pending()

    def get_status(self, now: Optional[datetime] = None) -> ReminderStatus:
        if self.is_taken:
            return ReminderStatus.TAKEN
        if self.is_skipped:
            return ReminderStatus.SKIPPED
        if self.is_overdue(now):
            return ReminderStatus.OVERDUE
        return ReminderStatus.PENDING
