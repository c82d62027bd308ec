from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, DateTime, bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from medtrack.domain.dose_reminder import DoseReminder
from medtrack.domain.errors import MissingIdentityError, ReminderNotFoundError
from medtrack.domain.schedule import to_local_naive
from medtrack.models.dose_reminder import DoseReminderRecord
from medtrack.repositories.base import ReminderRepository

_table = DoseReminderRecord.__table__

_COLUMNS = (
    _table.c.id,
    _table.c.schedule_id,
    _table.c.medicine_id,
    _table.c.scheduled_time,
    _table.c.taken_at,
    _table.c.is_taken,
    _table.c.is_skipped,
    _table.c.created_at,
)

_SELECT = f"SELECT {', '.join(column.name for column in _COLUMNS)} FROM dose_reminders"

# Typed parameters so datetimes and booleans are stored exactly as the ORM stores them
_TYPED_PARAMS = {
    "scheduled_time": DateTime(),
    "taken_at": DateTime(),
    "created_at": DateTime(),
    "now": DateTime(),
    "start": DateTime(),
    "end": DateTime(),
    "is_taken": Boolean(),
    "is_skipped": Boolean(),
}


def _statement(sql: str, returns_rows: bool = False):
    statement = text(sql)
    names = [name for name in _TYPED_PARAMS if f":{name}" in sql]
    if names:
        statement = statement.bindparams(*(bindparam(name, type_=_TYPED_PARAMS[name]) for name in names))
    if returns_rows:
        statement = statement.columns(*_COLUMNS)
    return statement


def _reminder_from_row(row: Dict[str, Any]) -> DoseReminder:
    return DoseReminder(
        id=row["id"],
        schedule_id=row["schedule_id"],
        medicine_id=row["medicine_id"],
        scheduled_time=row["scheduled_time"],
        taken_at=row["taken_at"],
        is_taken=bool(row["is_taken"]),
        is_skipped=bool(row["is_skipped"]),
        created_at=row["created_at"],
    )


class SqlReminderRepository(ReminderRepository):
    """Reminder repository issuing hand-written SQL through the session's connection."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _query(self, where: str = "", order_by: str = "scheduled_time", **params) -> List[DoseReminder]:
        sql = _SELECT
        if where:
            sql += f" WHERE {where}"
        sql += f" ORDER BY {order_by} ASC, id ASC"
        result = await self.session.execute(_statement(sql, returns_rows=True), params)
        return [_reminder_from_row(row) for row in result.mappings().all()]

    async def create(self, reminder: DoseReminder) -> DoseReminder:
        result = await self.session.execute(
            _statement(
                "INSERT INTO dose_reminders "
                "(schedule_id, medicine_id, scheduled_time, taken_at, is_taken, is_skipped, created_at) "
                "VALUES (:schedule_id, :medicine_id, :scheduled_time, :taken_at, :is_taken, :is_skipped, :created_at) "
                "RETURNING id"
            ),
            {
                "schedule_id": reminder.schedule_id,
                "medicine_id": reminder.medicine_id,
                "scheduled_time": reminder.scheduled_time,
                "taken_at": reminder.taken_at,
                "is_taken": reminder.is_taken,
                "is_skipped": reminder.is_skipped,
                "created_at": reminder.created_at,
            },
        )
        return replace(reminder, id=result.scalar_one())

    async def find_by_id(self, reminder_id: int) -> Optional[DoseReminder]:
        result = await self.session.execute(
            _statement(f"{_SELECT} WHERE id = :id", returns_rows=True), {"id": reminder_id}
        )
        row = result.mappings().first()
        return _reminder_from_row(row) if row is not None else None

    async def find_by_schedule_id(self, schedule_id: int) -> List[DoseReminder]:
        return await self._query("schedule_id = :schedule_id", schedule_id=schedule_id)

    async def find_by_medicine_id(self, medicine_id: int) -> List[DoseReminder]:
        return await self._query("medicine_id = :medicine_id", medicine_id=medicine_id)

    async def find_pending(self) -> List[DoseReminder]:
        return await self._query("NOT is_taken AND NOT is_skipped")

    async def find_overdue(self) -> List[DoseReminder]:
        return await self._query(
            "NOT is_taken AND NOT is_skipped AND scheduled_time < :now",
            now=datetime.now(),
        )

    async def find_taken(self) -> List[DoseReminder]:
        return await self._query("is_taken", order_by="taken_at")

    async def find_by_date_range(self, start: datetime, end: datetime) -> List[DoseReminder]:
        return await self._query(
            "scheduled_time >= :start AND scheduled_time < :end",
            start=to_local_naive(start),
            end=to_local_naive(end),
        )

    async def update(self, reminder: DoseReminder) -> DoseReminder:
        if reminder.id is None:
            raise MissingIdentityError("Dose reminder id is required for update")

        result = await self.session.execute(
            _statement(
                "UPDATE dose_reminders SET schedule_id = :schedule_id, medicine_id = :medicine_id, "
                "scheduled_time = :scheduled_time, taken_at = :taken_at, "
                "is_taken = :is_taken, is_skipped = :is_skipped "
                "WHERE id = :id"
            ),
            {
                "id": reminder.id,
                "schedule_id": reminder.schedule_id,
                "medicine_id": reminder.medicine_id,
                "scheduled_time": reminder.scheduled_time,
                "taken_at": reminder.taken_at,
                "is_taken": reminder.is_taken,
                "is_skipped": reminder.is_skipped,
            },
        )
        if result.rowcount == 0:
            raise ReminderNotFoundError(reminder.id)
        return reminder

    async def delete(self, reminder_id: int) -> None:
        await self.session.execute(text("DELETE FROM dose_reminders WHERE id = :id"), {"id": reminder_id})

    async def delete_by_schedule_id(self, schedule_id: int) -> None:
        await self.session.execute(
            text("DELETE FROM dose_reminders WHERE schedule_id = :schedule_id"),
            {"schedule_id": schedule_id},
        )

    async def find_all(self) -> List[DoseReminder]:
        return await self._query()

    async def count(self) -> int:
        result = await self.session.execute(text("SELECT COUNT(*) FROM dose_reminders"))
        return result.scalar_one()
