import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Dict, List, Optional

from medtrack.domain.dose_reminder import DoseReminder
from medtrack.domain.errors import MedicineNotFoundError, ReminderNotFoundError
from medtrack.domain.notification import NotificationRequest
from medtrack.repositories.base import MedicineRepository
from medtrack.services.base import Service

logger = logging.getLogger(__name__)

HISTORY_FILTERS = ("all", "taken", "skipped")


@dataclass(frozen=True)
class ReminderDetails:
    """A dose reminder together with the medicine it is for."""

    reminder: DoseReminder
    medicine_name: str
    dosage: str


async def _with_medicines(medicines: MedicineRepository, reminders: List[DoseReminder]) -> List[ReminderDetails]:
    found = await medicines.find_by_ids([reminder.medicine_id for reminder in reminders])
    by_id = {medicine.id: medicine for medicine in found}

    details = []
    for reminder in reminders:
        medicine = by_id.get(reminder.medicine_id)
        if medicine is None:
            raise MedicineNotFoundError(reminder.medicine_id)
        details.append(ReminderDetails(reminder=reminder, medicine_name=medicine.name, dosage=medicine.dosage))
    return details


def _day_bounds(now: datetime):
    start = datetime.combine(now.date(), time.min)
    return start, start + timedelta(days=1)


class ReminderService(Service):
    """Dose reminder queries and taken/skipped transitions."""

    async def get_reminder(self, reminder_id: int) -> DoseReminder:
        async with self.database.session() as session:
            reminder = await self.reminders(session).find_by_id(reminder_id)
        if reminder is None:
            raise ReminderNotFoundError(reminder_id)
        return reminder

    async def mark_as_taken(self, reminder_id: int, now: Optional[datetime] = None) -> DoseReminder:
        """
        Mark a dose as taken.

        Marking an already taken dose again refreshes its taken time.

        Raises:
            ReminderNotFoundError: If the reminder does not exist
        """
        async with self.database.session() as session:
            repository = self.reminders(session)
            reminder = await repository.find_by_id(reminder_id)
            if reminder is None:
                raise ReminderNotFoundError(reminder_id)
            updated = await repository.update(reminder.mark_as_taken(now))

        logger.info(f"Dose reminder {reminder_id} marked as taken at {updated.taken_at}")
        return updated

    async def mark_as_skipped(self, reminder_id: int) -> DoseReminder:
        """
        Mark a dose as skipped, keeping any earlier taken time.

        Raises:
            ReminderNotFoundError: If the reminder does not exist
        """
        async with self.database.session() as session:
            repository = self.reminders(session)
            reminder = await repository.find_by_id(reminder_id)
            if reminder is None:
                raise ReminderNotFoundError(reminder_id)
            updated = await repository.update(reminder.mark_as_skipped())

        logger.info(f"Dose reminder {reminder_id} marked as skipped")
        return updated

    async def get_reminders(
        self,
        medicine_id: Optional[int] = None,
        taken: Optional[bool] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ReminderDetails]:
        """
        Query reminders with their medicine name and dosage.

        Filters combine: a date range needs both start and end, and
        medicine_id / taken further narrow the result.

        Returns:
            Matching reminders, most recent first
        """
        async with self.database.session() as session:
            repository = self.reminders(session)
            if start is not None and end is not None:
                reminders = await repository.find_by_date_range(start, end)
            elif medicine_id is not None:
                reminders = await repository.find_by_medicine_id(medicine_id)
            elif taken is True:
                reminders = await repository.find_taken()
            else:
                reminders = await repository.find_all()

            if medicine_id is not None:
                reminders = [reminder for reminder in reminders if reminder.medicine_id == medicine_id]
            if taken is not None:
                reminders = [reminder for reminder in reminders if reminder.is_taken == taken]

            reminders.sort(key=lambda reminder: (reminder.scheduled_time, reminder.id), reverse=True)
            return await _with_medicines(self.medicines(session), reminders)

    async def get_today_reminders(self, now: Optional[datetime] = None) -> List[ReminderDetails]:
        """Reminders scheduled for the current calendar day, in time order."""
        start, end = _day_bounds(now or datetime.now())
        async with self.database.session() as session:
            reminders = await self.reminders(session).find_by_date_range(start, end)
            return await _with_medicines(self.medicines(session), reminders)

    async def get_pending(self) -> List[ReminderDetails]:
        async with self.database.session() as session:
            reminders = await self.reminders(session).find_pending()
            return await _with_medicines(self.medicines(session), reminders)

    async def get_overdue(self) -> List[ReminderDetails]:
        async with self.database.session() as session:
            reminders = await self.reminders(session).find_overdue()
            return await _with_medicines(self.medicines(session), reminders)

    async def get_history(self, status: str = "all") -> List[ReminderDetails]:
        """
        Reminders that were acted upon, most recent first.

        Args:
            status: "all", "taken" or "skipped"
        """
        if status not in HISTORY_FILTERS:
            raise ValueError(f"History filter must be one of {', '.join(HISTORY_FILTERS)}, got {status!r}")

        async with self.database.session() as session:
            reminders = await self.reminders(session).find_all()
            if status == "taken":
                reminders = [reminder for reminder in reminders if reminder.is_taken]
            elif status == "skipped":
                reminders = [reminder for reminder in reminders if reminder.is_skipped]
            else:
                reminders = [reminder for reminder in reminders if not reminder.is_pending()]

            reminders.sort(key=lambda reminder: (reminder.scheduled_time, reminder.id), reverse=True)
            return await _with_medicines(self.medicines(session), reminders)

    async def get_stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        now = now or datetime.now()
        start, end = _day_bounds(now)

        async with self.database.session() as session:
            repository = self.reminders(session)
            reminders = await repository.find_all()
            today = await repository.find_by_date_range(start, end)
            return {
                "medicines": await self.medicines(session).count(),
                "schedules": await self.schedules(session).count(),
                "dose_reminders": len(reminders),
                "today_reminders": len(today),
                "taken": sum(1 for reminder in reminders if reminder.is_taken),
                "skipped": sum(1 for reminder in reminders if reminder.is_skipped),
                "overdue": sum(1 for reminder in reminders if reminder.is_overdue(now)),
            }

    async def get_notification_requests(
        self, now: Optional[datetime] = None, schedule_id: Optional[int] = None
    ) -> List[NotificationRequest]:
        """
        Notification data for every pending reminder still in the future.

        Reminders of deactivated schedules are left out.

        Args:
            now: Reference time, defaults to the current time
            schedule_id: Restrict the result to one schedule
        """
        now = now or datetime.now()
        async with self.database.session() as session:
            active_ids = {schedule.id for schedule in await self.schedules(session).find_active()}
            if schedule_id is not None:
                active_ids &= {schedule_id}
            reminders = [
                reminder for reminder in await self.reminders(session).find_pending()
                if reminder.scheduled_time > now and reminder.schedule_id in active_ids
            ]
            details = await _with_medicines(self.medicines(session), reminders)

        return [
            NotificationRequest(
                reminder_id=item.reminder.id,
                medicine_name=item.medicine_name,
                dosage=item.dosage,
                scheduled_time=item.reminder.scheduled_time,
            )
            for item in details
        ]
