from sqlalchemy.ext.asyncio import AsyncSession

from medtrack.db.database import Database
from medtrack.repositories import (
    MedicineRepository,
    OrmMedicineRepository,
    OrmScheduleRepository,
    ReminderRepository,
    ScheduleRepository,
    create_reminder_repository,
)


class Service:
    """Base for services that open their own unit of work per operation."""

    def __init__(self, database: Database, reminder_backend: str = "orm"):
        """
        Initialize the service.

        Args:
            database: Storage handle used to open sessions
            reminder_backend: Which ReminderRepository implementation to use
        """
        self.database = database
        self.reminder_backend = reminder_backend

    def medicines(self, session: AsyncSession) -> MedicineRepository:
        return OrmMedicineRepository(session)

    def schedules(self, session: AsyncSession) -> ScheduleRepository:
        return OrmScheduleRepository(session)

    def reminders(self, session: AsyncSession) -> ReminderRepository:
        return create_reminder_repository(session, self.reminder_backend)
