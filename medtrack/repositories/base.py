from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from medtrack.domain.dose_reminder import DoseReminder
from medtrack.domain.medicine import Medicine
from medtrack.domain.schedule import Schedule


class ReminderRepository(ABC):
    """
    Storage contract for dose reminders.

    Every implementation must return the same results for the same data:
    ordered queries sort ascending with ties broken by id, ``find_overdue``
    compares against the clock at call time, and date ranges are half-open
    (start inclusive, end exclusive).
    """

    @abstractmethod
    async def create(self, reminder: DoseReminder) -> DoseReminder:
        """Insert an unsaved reminder and return it with its new id."""

    @abstractmethod
    async def find_by_id(self, reminder_id: int) -> Optional[DoseReminder]:
        """Return the reminder, or None when it does not exist."""

    @abstractmethod
    async def find_by_schedule_id(self, schedule_id: int) -> List[DoseReminder]:
        ...

    @abstractmethod
    async def find_by_medicine_id(self, medicine_id: int) -> List[DoseReminder]:
        ...

    @abstractmethod
    async def find_pending(self) -> List[DoseReminder]:
        """Reminders neither taken nor skipped."""

    @abstractmethod
    async def find_overdue(self) -> List[DoseReminder]:
        """Pending reminders scheduled before now."""

    @abstractmethod
    async def find_taken(self) -> List[DoseReminder]:
        """Taken reminders ordered by taken_at."""

    @abstractmethod
    async def find_by_date_range(self, start: datetime, end: datetime) -> List[DoseReminder]:
        """Reminders with start <= scheduled_time < end."""

    @abstractmethod
    async def update(self, reminder: DoseReminder) -> DoseReminder:
        """
        Persist the full state of a stored reminder.

        Raises:
            MissingIdentityError: If the reminder has no id
            ReminderNotFoundError: If no row has the reminder's id
        """

    @abstractmethod
    async def delete(self, reminder_id: int) -> None:
        """Delete a reminder; unknown ids are ignored."""

    @abstractmethod
    async def delete_by_schedule_id(self, schedule_id: int) -> None:
        ...

    @abstractmethod
    async def find_all(self) -> List[DoseReminder]:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...


class ScheduleRepository(ABC):
    """Storage contract for schedules."""

    @abstractmethod
    async def create(self, schedule: Schedule) -> Schedule:
        ...

    @abstractmethod
    async def find_by_id(self, schedule_id: int) -> Optional[Schedule]:
        ...

    @abstractmethod
    async def find_by_medicine_id(self, medicine_id: int) -> List[Schedule]:
        ...

    @abstractmethod
    async def find_all(self) -> List[Schedule]:
        ...

    @abstractmethod
    async def find_active(self) -> List[Schedule]:
        ...

    @abstractmethod
    async def update(self, schedule: Schedule) -> Schedule:
        """Persist activation state and notes of a stored schedule."""

    @abstractmethod
    async def delete(self, schedule_id: int) -> None:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...


class MedicineRepository(ABC):
    """Storage contract for medicines."""

    @abstractmethod
    async def create(self, medicine: Medicine) -> Medicine:
        ...

    @abstractmethod
    async def find_by_id(self, medicine_id: int) -> Optional[Medicine]:
        ...

    @abstractmethod
    async def find_by_ids(self, medicine_ids: List[int]) -> List[Medicine]:
        ...

    @abstractmethod
    async def find_all(self) -> List[Medicine]:
        ...

    @abstractmethod
    async def delete(self, medicine_id: int) -> None:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...
