import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from medtrack.domain.dose_reminder import DoseReminder
from medtrack.domain.errors import MedicineNotFoundError, ScheduleNotFoundError
from medtrack.domain.schedule import Schedule
from medtrack.services.base import Service
from medtrack.services.expansion import expand

logger = logging.getLogger(__name__)


class ScheduleService(Service):
    """Create schedules and manage their generated reminders."""

    async def create_schedule(
        self,
        medicine_id: int,
        interval_hours: int,
        duration_days: int,
        start_time: str,
        notes: Optional[str] = None,
        start_date: Optional[date] = None,
    ) -> Tuple[Schedule, List[DoseReminder]]:
        """
        Create a schedule and every dose reminder of its treatment.

        The schedule and all reminders are written in one transaction: if any
        insert fails, nothing is stored.

        Args:
            medicine_id: Medicine the schedule belongs to
            interval_hours: Hours between doses within a day (1-24)
            duration_days: Number of treatment days (at least 1)
            start_time: "HH:MM" time of day or ISO timestamp of the first dose
            notes: Optional free text
            start_date: First treatment day for time-of-day start times

        Returns:
            The stored schedule and its stored reminders

        Raises:
            InvalidScheduleError: If interval, duration or start time is invalid
            MedicineNotFoundError: If the medicine does not exist
        """
        schedule = Schedule.create(
            medicine_id=medicine_id,
            interval_hours=interval_hours,
            duration_days=duration_days,
            start_time=start_time,
            notes=notes,
        )
        schedule.validate()

        async with self.database.session() as session:
            if await self.medicines(session).find_by_id(medicine_id) is None:
                raise MedicineNotFoundError(medicine_id)

            created = await self.schedules(session).create(schedule)
            repository = self.reminders(session)
            reminders = [
                await repository.create(reminder)
                for reminder in expand(created, start_date=start_date, now=created.created_at)
            ]

        logger.info(
            f"Created schedule {created.id} for medicine {medicine_id} "
            f"with {len(reminders)} dose reminders"
        )
        return created, reminders

    async def get_schedule(self, schedule_id: int) -> Schedule:
        async with self.database.session() as session:
            schedule = await self.schedules(session).find_by_id(schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(schedule_id)
        return schedule

    async def list_schedules(self, medicine_id: Optional[int] = None, active_only: bool = False) -> List[Schedule]:
        async with self.database.session() as session:
            repository = self.schedules(session)
            if medicine_id is not None:
                schedules = await repository.find_by_medicine_id(medicine_id)
            elif active_only:
                schedules = await repository.find_active()
            else:
                schedules = await repository.find_all()

        if active_only:
            schedules = [schedule for schedule in schedules if schedule.is_active]
        return schedules

    async def get_schedule_reminders(self, schedule_id: int) -> List[DoseReminder]:
        async with self.database.session() as session:
            if await self.schedules(session).find_by_id(schedule_id) is None:
                raise ScheduleNotFoundError(schedule_id)
            return await self.reminders(session).find_by_schedule_id(schedule_id)

    async def set_active(self, schedule_id: int, active: bool) -> Schedule:
        async with self.database.session() as session:
            repository = self.schedules(session)
            schedule = await repository.find_by_id(schedule_id)
            if schedule is None:
                raise ScheduleNotFoundError(schedule_id)

            schedule = schedule.activate() if active else schedule.deactivate()
            updated = await repository.update(schedule)

        logger.info(f"Schedule {schedule_id} {'activated' if active else 'deactivated'}")
        return updated

    async def delete_schedule(self, schedule_id: int) -> None:
        """Delete a schedule and its reminders. Unknown ids are ignored."""
        async with self.database.session() as session:
            await self.reminders(session).delete_by_schedule_id(schedule_id)
            await self.schedules(session).delete(schedule_id)

        logger.info(f"Deleted schedule {schedule_id}")

    async def find_expired(self, now: Optional[datetime] = None) -> List[Schedule]:
        async with self.database.session() as session:
            schedules = await self.schedules(session).find_all()
        return [schedule for schedule in schedules if schedule.is_expired(now)]
