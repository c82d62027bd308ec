from sqlalchemy.ext.asyncio import AsyncSession

from medtrack.repositories.base import (
    MedicineRepository,
    ReminderRepository,
    ScheduleRepository,
)
from medtrack.repositories.orm import (
    OrmMedicineRepository,
    OrmReminderRepository,
    OrmScheduleRepository,
)
from medtrack.repositories.sql import SqlReminderRepository

REMINDER_REPOSITORIES = {
    "orm": OrmReminderRepository,
    "sql": SqlReminderRepository,
}


def create_reminder_repository(session: AsyncSession, backend: str = "orm") -> ReminderRepository:
    """Build the reminder repository for the configured backend."""
    try:
        repository_class = REMINDER_REPOSITORIES[backend]
    except KeyError:
        raise ValueError(f"Unknown reminder backend: {backend}") from None
    return repository_class(session)


__all__ = [
    "MedicineRepository",
    "ReminderRepository",
    "ScheduleRepository",
    "OrmMedicineRepository",
    "OrmReminderRepository",
    "OrmScheduleRepository",
    "SqlReminderRepository",
    "REMINDER_REPOSITORIES",
    "create_reminder_repository",
]
