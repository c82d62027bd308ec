import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from medtrack.domain.dose_reminder import DoseReminder
from medtrack.domain.schedule import (
    MAX_DOSES_PER_DAY,
    Schedule,
    parse_start_time,
    validate_interval_hours,
    validate_whole_days,
)

logger = logging.getLogger(__name__)


def expand(
    schedule: Schedule,
    start_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> List[DoseReminder]:
    """
    Expand a schedule into every dose reminder of its treatment.

    Each day restarts at the schedule's start time and steps forward by
    ``interval_hours`` until the next step would land on the following
    calendar day, or until MAX_DOSES_PER_DAY doses were produced that day.

    Args:
        schedule: Schedule to expand (may be unsaved, in which case the
            reminders carry no schedule id)
        start_date: First treatment day when start_time is a time of day
            (defaults to today)
        now: Creation timestamp for the generated reminders

    Returns:
        Unsaved reminders in chronological order

    Raises:
        InvalidScheduleError: If the interval or the start time is invalid,
            or the duration is not a whole number of days
    """
    validate_interval_hours(schedule.interval_hours)
    validate_whole_days(schedule.duration_days)
    first_day, start = parse_start_time(schedule.start_time, start_date)

    if schedule.duration_days <= 0:
        logger.warning(f"Schedule {schedule.id} has non-positive duration {schedule.duration_days}, nothing to expand")
        return []

    created_at = now or datetime.now()
    step = timedelta(hours=schedule.interval_hours)
    reminders: List[DoseReminder] = []

    for day in range(schedule.duration_days):
        current_day = datetime.combine(first_day + timedelta(days=day), start)
        current_time = current_day
        doses = 0

        while current_time.date() == current_day.date() and doses < MAX_DOSES_PER_DAY:
            reminders.append(
                DoseReminder.create(
                    schedule_id=schedule.id,
                    medicine_id=schedule.medicine_id,
                    scheduled_time=current_time,
                    created_at=created_at,
                )
            )
            current_time += step
            doses += 1

    logger.debug(f"Expanded schedule {schedule.id} into {len(reminders)} reminders")
    return reminders
