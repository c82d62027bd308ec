import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from medtrack.domain.notification import NotificationRequest
from medtrack.services.reminder_service import ReminderService

logger = logging.getLogger(__name__)

Notifier = Callable[[NotificationRequest, bool], Awaitable[None]]


async def log_notification(notification: NotificationRequest, early: bool) -> None:
    """Default notifier: delivery is left to an external service, so just log."""
    prefix = "Upcoming dose" if early else "Dose due"
    logger.info(
        f"{prefix}: reminder {notification.reminder_id} "
        f"{notification.body} at {notification.scheduled_time}"
    )


def job_id(reminder_id: int, early: bool = False) -> str:
    return f"reminder_{reminder_id}_early" if early else f"reminder_{reminder_id}"


def _log_load_failure(task: "asyncio.Task") -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Error loading reminders from database: {str(error)}")


class ReminderScheduler:
    """Class to schedule notifications for dose reminders."""

    def __init__(
        self,
        reminder_service: ReminderService,
        notifier: Optional[Notifier] = None,
        early_reminder_minutes: int = 15,
    ):
        """
        Initialize the scheduler.

        Args:
            reminder_service: Source of pending reminders and their medicines
            notifier: Coroutine called with (notification, early) when a job fires
            early_reminder_minutes: Lead time of the early notification, 0 disables it
        """
        self.reminder_service = reminder_service
        self.notifier = notifier or log_notification
        self.early_reminder_minutes = early_reminder_minutes
        self.scheduler = AsyncIOScheduler()
        self.load_task: Optional[asyncio.Task] = None

    async def schedule_reminders_from_db(self, now: Optional[datetime] = None, schedule_id: Optional[int] = None) -> int:
        """Load and schedule every pending reminder of active schedules that is still in the future."""
        notifications = await self.reminder_service.get_notification_requests(now, schedule_id)

        for notification in notifications:
            self.schedule_notification(notification, now)

        logger.info(f"Scheduled notifications for {len(notifications)} pending reminders")
        return len(notifications)

    def schedule_notification(self, notification: NotificationRequest, now: Optional[datetime] = None) -> List[str]:
        """
        Schedule the notification jobs of one reminder.

        Args:
            notification: Reminder data to announce
            now: Current time, times before it are not scheduled

        Returns:
            Ids of the jobs that were added
        """
        now = now or datetime.now()
        added = []

        runs = [(notification.scheduled_time, False)]
        if self.early_reminder_minutes > 0:
            runs.append((notification.scheduled_time - timedelta(minutes=self.early_reminder_minutes), True))

        for run_date, early in runs:
            if run_date <= now:
                logger.debug(f"Skipping {job_id(notification.reminder_id, early)}, {run_date} is in the past")
                continue

            self.scheduler.add_job(
                self.send_notification,
                DateTrigger(run_date=run_date),
                id=job_id(notification.reminder_id, early),
                replace_existing=True,
                kwargs={"notification": notification, "early": early},
            )
            added.append(job_id(notification.reminder_id, early))

        if added:
            logger.info(f"Scheduled reminder {notification.reminder_id} for {notification.scheduled_time}")
        return added

    async def send_notification(self, notification: NotificationRequest, early: bool = False) -> None:
        """Hand a due notification to the notifier."""
        try:
            await self.notifier(notification, early)
        except Exception as e:
            # A failed delivery must not stop the scheduler loop
            logger.error(f"Error sending notification for reminder {notification.reminder_id}: {str(e)}")

    def cancel_reminder(self, reminder_id: int) -> None:
        """Remove the jobs of a reminder that was taken or skipped."""
        for early in (False, True):
            try:
                self.scheduler.remove_job(job_id(reminder_id, early))
                logger.info(f"Cancelled {job_id(reminder_id, early)}")
            except JobLookupError:
                pass

    def start(self):
        """Start the scheduler."""
        self.scheduler.start()

        # Schedule loading of reminders from database
        self.load_task = asyncio.create_task(self.schedule_reminders_from_db())
        self.load_task.add_done_callback(_log_load_failure)

        logger.info("Reminder scheduler started")

    def shutdown(self):
        """Shutdown the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Reminder scheduler shutdown")


def setup_scheduler(
    reminder_service: ReminderService,
    notifier: Optional[Notifier] = None,
    early_reminder_minutes: int = 15,
) -> ReminderScheduler:
    """
    Set up the reminder scheduler.

    Args:
        reminder_service: Service the scheduler reads reminders from
        notifier: Optional delivery coroutine
        early_reminder_minutes: Lead time of the early notification

    Returns:
        Configured ReminderScheduler
    """
    return ReminderScheduler(reminder_service, notifier, early_reminder_minutes)
