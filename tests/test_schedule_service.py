from datetime import date, datetime, time, timedelta

import pytest
import pytest_asyncio

from medtrack.domain.errors import (
    InvalidScheduleError,
    MedicineNotFoundError,
    ScheduleNotFoundError,
)
from medtrack.repositories import OrmScheduleRepository, create_reminder_repository
from medtrack.services import MedicineService, ScheduleService

START = date(2025, 5, 1)


@pytest_asyncio.fixture
async def services(database, backend):
    return MedicineService(database, backend), ScheduleService(database, backend)


async def count_rows(database, backend):
    async with database.session() as session:
        return (
            await OrmScheduleRepository(session).count(),
            await create_reminder_repository(session, backend).count(),
        )


@pytest.mark.asyncio
async def test_create_schedule_stores_schedule_and_reminders(database, backend, services, medicine):
    _, schedule_service = services

    schedule, reminders = await schedule_service.create_schedule(
        medicine_id=medicine.id,
        interval_hours=8,
        duration_days=7,
        start_time="08:00",
        notes="after meals",
        start_date=START,
    )

    assert schedule.id is not None
    assert schedule.is_active
    assert schedule.notes == "after meals"
    assert len(reminders) == 14
    assert all(reminder.id is not None for reminder in reminders)
    assert {reminder.schedule_id for reminder in reminders} == {schedule.id}
    assert {reminder.medicine_id for reminder in reminders} == {medicine.id}
    assert reminders[0].scheduled_time == datetime.combine(START, time(8, 0))
    assert reminders[-1].scheduled_time == datetime.combine(START + timedelta(days=6), time(16, 0))

    stored = await schedule_service.get_schedule_reminders(schedule.id)
    assert stored == reminders


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "interval_hours,duration_days,start_time",
    [(0, 3, "08:00"), (25, 3, "08:00"), (8, 0, "08:00"), (8, -1, "08:00"), (8, 3, "not a time"), (8, 3, "")],
)
async def test_invalid_schedule_is_rejected_before_storing(
    database, backend, services, medicine, interval_hours, duration_days, start_time
):
    _, schedule_service = services

    with pytest.raises(InvalidScheduleError):
        await schedule_service.create_schedule(medicine.id, interval_hours, duration_days, start_time)

    assert await count_rows(database, backend) == (0, 0)


@pytest.mark.asyncio
async def test_unknown_medicine_is_rejected(database, backend, services):
    _, schedule_service = services

    with pytest.raises(MedicineNotFoundError):
        await schedule_service.create_schedule(404, 8, 2, "08:00")

    assert await count_rows(database, backend) == (0, 0)


class FailingReminderRepository:
    """Delegates to a real repository but fails on the nth insert."""

    def __init__(self, repository, fail_on):
        self.repository = repository
        self.fail_on = fail_on
        self.calls = 0

    async def create(self, reminder):
        self.calls += 1
        if self.calls == self.fail_on:
            raise RuntimeError("disk full")
        return await self.repository.create(reminder)


class FlakyScheduleService(ScheduleService):
    def reminders(self, session):
        return FailingReminderRepository(super().reminders(session), fail_on=3)


@pytest.mark.asyncio
async def test_failed_reminder_insert_rolls_back_everything(database, backend, medicine):
    service = FlakyScheduleService(database, backend)

    with pytest.raises(RuntimeError, match="disk full"):
        await service.create_schedule(medicine.id, 6, 2, "00:00", start_date=START)

    assert await count_rows(database, backend) == (0, 0)


@pytest.mark.asyncio
async def test_get_schedule(services, medicine):
    _, schedule_service = services
    schedule, _ = await schedule_service.create_schedule(medicine.id, 12, 1, "09:00", start_date=START)

    assert await schedule_service.get_schedule(schedule.id) == schedule
    with pytest.raises(ScheduleNotFoundError):
        await schedule_service.get_schedule(schedule.id + 1)
    with pytest.raises(ScheduleNotFoundError):
        await schedule_service.get_schedule_reminders(schedule.id + 1)


@pytest.mark.asyncio
async def test_deactivate_and_list_active(services, medicine):
    _, schedule_service = services
    first, _ = await schedule_service.create_schedule(medicine.id, 12, 1, "09:00", start_date=START)
    second, _ = await schedule_service.create_schedule(medicine.id, 24, 2, "21:00", start_date=START)

    deactivated = await schedule_service.set_active(first.id, False)

    assert not deactivated.is_active
    assert [schedule.id for schedule in await schedule_service.list_schedules(active_only=True)] == [second.id]
    assert {schedule.id for schedule in await schedule_service.list_schedules(medicine_id=medicine.id)} == {
        first.id,
        second.id,
    }
    assert (await schedule_service.set_active(first.id, True)).is_active
    with pytest.raises(ScheduleNotFoundError):
        await schedule_service.set_active(9999, False)


@pytest.mark.asyncio
async def test_delete_schedule_removes_its_reminders(database, backend, services, medicine):
    _, schedule_service = services
    kept, kept_reminders = await schedule_service.create_schedule(medicine.id, 12, 2, "09:00", start_date=START)
    removed, _ = await schedule_service.create_schedule(medicine.id, 8, 2, "08:00", start_date=START)

    await schedule_service.delete_schedule(removed.id)
    await schedule_service.delete_schedule(removed.id)

    assert await count_rows(database, backend) == (1, len(kept_reminders))
    assert await schedule_service.get_schedule_reminders(kept.id) == kept_reminders


@pytest.mark.asyncio
async def test_delete_medicine_cascades(database, backend, services, medicine):
    medicine_service, schedule_service = services
    await schedule_service.create_schedule(medicine.id, 12, 2, "09:00", start_date=START)
    await schedule_service.create_schedule(medicine.id, 8, 1, "08:00", start_date=START)

    await medicine_service.delete_medicine(medicine.id)

    assert await count_rows(database, backend) == (0, 0)
    assert await medicine_service.list_medicines() == []


@pytest.mark.asyncio
async def test_find_expired(services, medicine):
    _, schedule_service = services
    short, _ = await schedule_service.create_schedule(medicine.id, 12, 1, "09:00", start_date=START)
    long, _ = await schedule_service.create_schedule(medicine.id, 12, 30, "09:00", start_date=START)

    expired = await schedule_service.find_expired(datetime.now() + timedelta(days=2))

    assert [schedule.id for schedule in expired] == [short.id]
