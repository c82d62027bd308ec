from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from medtrack.domain.dose_reminder import DoseReminder
from medtrack.domain.errors import (
    MissingIdentityError,
    ReminderNotFoundError,
    ScheduleNotFoundError,
)
from medtrack.domain.medicine import Medicine
from medtrack.domain.schedule import Schedule, to_local_naive
from medtrack.models.dose_reminder import DoseReminderRecord
from medtrack.models.medicine import MedicineRecord
from medtrack.models.schedule import ScheduleRecord
from medtrack.repositories.base import (
    MedicineRepository,
    ReminderRepository,
    ScheduleRepository,
)


def _reminder_from_record(record: DoseReminderRecord) -> DoseReminder:
    return DoseReminder(
        id=record.id,
        schedule_id=record.schedule_id,
        medicine_id=record.medicine_id,
        scheduled_time=record.scheduled_time,
        taken_at=record.taken_at,
        is_taken=bool(record.is_taken),
        is_skipped=bool(record.is_skipped),
        created_at=record.created_at,
    )


def _schedule_from_record(record: ScheduleRecord) -> Schedule:
    return Schedule(
        id=record.id,
        medicine_id=record.medicine_id,
        interval_hours=record.interval_hours,
        duration_days=record.duration_days,
        start_time=record.start_time,
        notes=record.notes,
        is_active=bool(record.is_active),
        created_at=record.created_at,
    )


def _medicine_from_record(record: MedicineRecord) -> Medicine:
    return Medicine(
        id=record.id,
        name=record.name,
        dosage=record.dosage,
        description=record.description,
        quantity=record.quantity,
        unit=record.unit,
        form=record.form,
        image_uri=record.image_uri,
        is_active=bool(record.is_active),
        created_at=record.created_at,
    )


class OrmReminderRepository(ReminderRepository):
    """Reminder repository built on SQLAlchemy ORM queries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _find(self, *criteria, order_by=None) -> List[DoseReminder]:
        order_by = order_by if order_by is not None else DoseReminderRecord.scheduled_time
        result = await self.session.execute(
            select(DoseReminderRecord).where(*criteria).order_by(order_by, DoseReminderRecord.id)
        )
        return [_reminder_from_record(record) for record in result.scalars().all()]

    async def create(self, reminder: DoseReminder) -> DoseReminder:
        record = DoseReminderRecord(
            schedule_id=reminder.schedule_id,
            medicine_id=reminder.medicine_id,
            scheduled_time=reminder.scheduled_time,
            taken_at=reminder.taken_at,
            is_taken=reminder.is_taken,
            is_skipped=reminder.is_skipped,
            created_at=reminder.created_at,
        )
        self.session.add(record)
        await self.session.flush()
        return _reminder_from_record(record)

    async def find_by_id(self, reminder_id: int) -> Optional[DoseReminder]:
        record = await self.session.get(DoseReminderRecord, reminder_id)
        return _reminder_from_record(record) if record else None

    async def find_by_schedule_id(self, schedule_id: int) -> List[DoseReminder]:
        return await self._find(DoseReminderRecord.schedule_id == schedule_id)

    async def find_by_medicine_id(self, medicine_id: int) -> List[DoseReminder]:
        return await self._find(DoseReminderRecord.medicine_id == medicine_id)

    async def find_pending(self) -> List[DoseReminder]:
        return await self._find(
            DoseReminderRecord.is_taken == False,
            DoseReminderRecord.is_skipped == False,
        )

    async def find_overdue(self) -> List[DoseReminder]:
        now = datetime.now()
        return await self._find(
            DoseReminderRecord.is_taken == False,
            DoseReminderRecord.is_skipped == False,
            DoseReminderRecord.scheduled_time < now,
        )

    async def find_taken(self) -> List[DoseReminder]:
        return await self._find(
            DoseReminderRecord.is_taken == True,
            order_by=DoseReminderRecord.taken_at,
        )

    async def find_by_date_range(self, start: datetime, end: datetime) -> List[DoseReminder]:
        return await self._find(
            DoseReminderRecord.scheduled_time >= to_local_naive(start),
            DoseReminderRecord.scheduled_time < to_local_naive(end),
        )

    async def update(self, reminder: DoseReminder) -> DoseReminder:
        if reminder.id is None:
            raise MissingIdentityError("Dose reminder id is required for update")

        record = await self.session.get(DoseReminderRecord, reminder.id)
        if record is None:
            raise ReminderNotFoundError(reminder.id)

        record.schedule_id = reminder.schedule_id
        record.medicine_id = reminder.medicine_id
        record.scheduled_time = reminder.scheduled_time
        record.taken_at = reminder.taken_at
        record.is_taken = reminder.is_taken
        record.is_skipped = reminder.is_skipped
        await self.session.flush()
        return _reminder_from_record(record)

    async def delete(self, reminder_id: int) -> None:
        await self.session.execute(delete(DoseReminderRecord).where(DoseReminderRecord.id == reminder_id))

    async def delete_by_schedule_id(self, schedule_id: int) -> None:
        await self.session.execute(delete(DoseReminderRecord).where(DoseReminderRecord.schedule_id == schedule_id))

    async def find_all(self) -> List[DoseReminder]:
        return await self._find()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(DoseReminderRecord.id)))
        return result.scalar_one()


class OrmScheduleRepository(ScheduleRepository):
    """Schedule repository built on SQLAlchemy ORM queries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, schedule: Schedule) -> Schedule:
        record = ScheduleRecord(
            medicine_id=schedule.medicine_id,
            interval_hours=schedule.interval_hours,
            duration_days=schedule.duration_days,
            start_time=schedule.start_time,
            notes=schedule.notes,
            is_active=schedule.is_active,
            created_at=schedule.created_at,
        )
        self.session.add(record)
        await self.session.flush()
        return _schedule_from_record(record)

    async def find_by_id(self, schedule_id: int) -> Optional[Schedule]:
        record = await self.session.get(ScheduleRecord, schedule_id)
        return _schedule_from_record(record) if record else None

    async def find_by_medicine_id(self, medicine_id: int) -> List[Schedule]:
        result = await self.session.execute(
            select(ScheduleRecord)
            .where(ScheduleRecord.medicine_id == medicine_id)
            .order_by(ScheduleRecord.created_at.desc(), ScheduleRecord.id.desc())
        )
        return [_schedule_from_record(record) for record in result.scalars().all()]

    async def find_all(self) -> List[Schedule]:
        result = await self.session.execute(
            select(ScheduleRecord).order_by(ScheduleRecord.created_at.desc(), ScheduleRecord.id.desc())
        )
        return [_schedule_from_record(record) for record in result.scalars().all()]

    async def find_active(self) -> List[Schedule]:
        result = await self.session.execute(
            select(ScheduleRecord)
            .where(ScheduleRecord.is_active == True)
            .order_by(ScheduleRecord.created_at.desc(), ScheduleRecord.id.desc())
        )
        return [_schedule_from_record(record) for record in result.scalars().all()]

    async def update(self, schedule: Schedule) -> Schedule:
        if schedule.id is None:
            raise MissingIdentityError("Schedule id is required for update")

        record = await self.session.get(ScheduleRecord, schedule.id)
        if record is None:
            raise ScheduleNotFoundError(schedule.id)

        # Recurrence fields are fixed once reminders have been generated
        record.notes = schedule.notes
        record.is_active = schedule.is_active
        await self.session.flush()
        return _schedule_from_record(record)

    async def delete(self, schedule_id: int) -> None:
        await self.session.execute(delete(ScheduleRecord).where(ScheduleRecord.id == schedule_id))

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(ScheduleRecord.id)))
        return result.scalar_one()


class OrmMedicineRepository(MedicineRepository):
    """Medicine repository built on SQLAlchemy ORM queries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, medicine: Medicine) -> Medicine:
        record = MedicineRecord(
            name=medicine.name,
            dosage=medicine.dosage,
            description=medicine.description,
            quantity=medicine.quantity,
            unit=medicine.unit,
            form=medicine.form,
            image_uri=medicine.image_uri,
            is_active=medicine.is_active,
            created_at=medicine.created_at,
        )
        self.session.add(record)
        await self.session.flush()
        return _medicine_from_record(record)

    async def find_by_id(self, medicine_id: int) -> Optional[Medicine]:
        record = await self.session.get(MedicineRecord, medicine_id)
        return _medicine_from_record(record) if record else None

    async def find_by_ids(self, medicine_ids: List[int]) -> List[Medicine]:
        if not medicine_ids:
            return []
        result = await self.session.execute(
            select(MedicineRecord).where(MedicineRecord.id.in_(set(medicine_ids)))
        )
        return [_medicine_from_record(record) for record in result.scalars().all()]

    async def find_all(self) -> List[Medicine]:
        result = await self.session.execute(select(MedicineRecord).order_by(MedicineRecord.name, MedicineRecord.id))
        return [_medicine_from_record(record) for record in result.scalars().all()]

    async def delete(self, medicine_id: int) -> None:
        await self.session.execute(delete(MedicineRecord).where(MedicineRecord.id == medicine_id))

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(MedicineRecord.id)))
        return result.scalar_one()
