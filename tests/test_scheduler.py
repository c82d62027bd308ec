from datetime import date, datetime, time, timedelta

import pytest

from medtrack.domain.notification import NotificationRequest
from medtrack.scheduler.reminder import ReminderScheduler, job_id
from medtrack.services import ReminderService, ScheduleService

NOW = datetime(2025, 3, 10, 12, 0)


def make_notification(reminder_id=1, scheduled_time=NOW + timedelta(hours=2)):
    return NotificationRequest(
        reminder_id=reminder_id,
        medicine_name="Amoxicillin",
        dosage="500mg",
        scheduled_time=scheduled_time,
    )


@pytest.fixture
def delivered():
    return []


@pytest.fixture
def scheduler(delivered):
    async def notifier(notification, early):
        delivered.append((notification.reminder_id, early))

    return ReminderScheduler(reminder_service=None, notifier=notifier, early_reminder_minutes=15)


def test_schedules_due_and_early_jobs(scheduler):
    added = scheduler.schedule_notification(make_notification(), now=NOW)

    assert added == ["reminder_1", "reminder_1_early"]
    assert scheduler.scheduler.get_job("reminder_1") is not None
    assert scheduler.scheduler.get_job("reminder_1_early") is not None


def test_skips_times_in_the_past(scheduler):
    # Due in 10 minutes, so the 15 minute early warning has already passed
    added = scheduler.schedule_notification(make_notification(scheduled_time=NOW + timedelta(minutes=10)), now=NOW)
    assert added == ["reminder_1"]

    assert scheduler.schedule_notification(make_notification(2, NOW - timedelta(hours=1)), now=NOW) == []


def test_early_reminder_can_be_disabled():
    scheduler = ReminderScheduler(reminder_service=None, early_reminder_minutes=0)

    assert scheduler.schedule_notification(make_notification(), now=NOW) == ["reminder_1"]


def test_cancel_reminder_removes_jobs(scheduler):
    scheduler.schedule_notification(make_notification(), now=NOW)

    scheduler.cancel_reminder(1)
    scheduler.cancel_reminder(1)

    assert scheduler.scheduler.get_job(job_id(1)) is None
    assert scheduler.scheduler.get_job(job_id(1, early=True)) is None


@pytest.mark.asyncio
async def test_send_notification_calls_notifier(scheduler, delivered):
    await scheduler.send_notification(make_notification(7), early=True)

    assert delivered == [(7, True)]


@pytest.mark.asyncio
async def test_notifier_failure_is_logged_not_raised(caplog):
    async def broken(notification, early):
        raise ConnectionError("push service unavailable")

    scheduler = ReminderScheduler(reminder_service=None, notifier=broken)

    await scheduler.send_notification(make_notification(3))

    assert "Error sending notification for reminder 3" in caplog.text


@pytest.mark.asyncio
async def test_schedule_reminders_from_db(database, backend, medicine):
    await ScheduleService(database, backend).create_schedule(medicine.id, 6, 1, "00:00", start_date=date.today())
    noon = datetime.combine(date.today(), time(11, 0))
    scheduler = ReminderScheduler(ReminderService(database, backend), early_reminder_minutes=15)

    count = await scheduler.schedule_reminders_from_db(now=noon)

    # 12:00 and 18:00 are still ahead, each with an early warning
    assert count == 2
    assert len(scheduler.scheduler.get_jobs()) == 4


@pytest.mark.asyncio
async def test_deactivated_schedule_is_not_loaded(database, backend, medicine):
    schedule_service = ScheduleService(database, backend)
    schedule, _ = await schedule_service.create_schedule(medicine.id, 6, 1, "00:00", start_date=date.today())
    await schedule_service.create_schedule(medicine.id, 24, 1, "20:00", start_date=date.today())
    await schedule_service.set_active(schedule.id, False)
    one_am = datetime.combine(date.today(), time(1, 0))
    scheduler = ReminderScheduler(ReminderService(database, backend), early_reminder_minutes=0)

    assert await scheduler.schedule_reminders_from_db(now=one_am) == 1
    assert await scheduler.schedule_reminders_from_db(now=one_am, schedule_id=schedule.id) == 0

    await schedule_service.set_active(schedule.id, True)
    assert await scheduler.schedule_reminders_from_db(now=one_am, schedule_id=schedule.id) == 3
    assert len(scheduler.scheduler.get_jobs()) == 4


@pytest.mark.asyncio
async def test_failed_startup_load_is_logged(caplog):
    class UnreachableReminderService:
        async def get_notification_requests(self, now=None, schedule_id=None):
            raise ConnectionError("db down")

    scheduler = ReminderScheduler(UnreachableReminderService())

    scheduler.start()
    try:
        with pytest.raises(ConnectionError):
            await scheduler.load_task
    finally:
        scheduler.shutdown()

    assert "Error loading reminders from database: db down" in caplog.text
