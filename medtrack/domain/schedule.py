import re
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from medtrack.domain.errors import InvalidScheduleError

MIN_INTERVAL_HOURS = 1
MAX_INTERVAL_HOURS = 24
# Guard against runaway generation on misconfigured intervals
MAX_DOSES_PER_DAY = 10

_TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local wall-clock time."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_start_time(start_time: str, start_date: Optional[date] = None) -> Tuple[date, time]:
    """
    Split a schedule start time into the first treatment day and the daily time.

    Args:
        start_time: "HH:MM" / "HH:MM:SS" time of day, or an ISO-8601 timestamp
        start_date: First treatment day for time-of-day values (defaults to today)

    Returns:
        Tuple of (first day, time of day with seconds dropped)

    Raises:
        InvalidScheduleError: If start_time cannot be parsed
    """
    if not isinstance(start_time, str) or not start_time.strip():
        raise InvalidScheduleError("Start time is required")

    value = start_time.strip()
    match = _TIME_OF_DAY.match(value)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise InvalidScheduleError(f"Invalid start time: {start_time}")
        return start_date or date.today(), time(hour, minute)

    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        raise InvalidScheduleError(f"Invalid start time format: {start_time}") from None

    moment = to_local_naive(moment)
    return moment.date(), time(moment.hour, moment.minute)


def validate_interval_hours(interval_hours) -> None:
    if isinstance(interval_hours, bool) or not isinstance(interval_hours, int):
        raise InvalidScheduleError(f"Interval must be a whole number of hours, got {interval_hours!r}")
    if not MIN_INTERVAL_HOURS <= interval_hours <= MAX_INTERVAL_HOURS:
        raise InvalidScheduleError(
            f"Interval must be between {MIN_INTERVAL_HOURS} and {MAX_INTERVAL_HOURS} hours, got {interval_hours}"
        )


def validate_whole_days(duration_days) -> None:
    if isinstance(duration_days, bool) or not isinstance(duration_days, int):
        raise InvalidScheduleError(f"Duration must be a whole number of days, got {duration_days!r}")


def validate_duration_days(duration_days) -> None:
    validate_whole_days(duration_days)
    if duration_days < 1:
        raise InvalidScheduleError(f"Duration must be at least 1 day, got {duration_days}")


@dataclass(frozen=True)
class Schedule:
    """Recurrence definition for one medicine."""

    medicine_id: int
    interval_hours: int
    duration_days: int
    start_time: str
    created_at: datetime
    id: Optional[int] = None
    notes: Optional[str] = None
    is_active: bool = True

    @classmethod
    def create(
        cls,
        medicine_id: int,
        interval_hours: int,
        duration_days: int,
        start_time: str,
        notes: Optional[str] = None,
    ) -> "Schedule":
        return cls(
            medicine_id=medicine_id,
            interval_hours=interval_hours,
            duration_days=duration_days,
            start_time=start_time,
            notes=notes,
            created_at=datetime.now(),
        )

    def validate(self) -> None:
        """Raise InvalidScheduleError unless the schedule can be fully expanded."""
        validate_interval_hours(self.interval_hours)
        validate_duration_days(self.duration_days)
        parse_start_time(self.start_time)

    def activate(self) -> "Schedule":
        return replace(self, is_active=True)

    def deactivate(self) -> "Schedule":
        return replace(self, is_active=False)

    def daily_doses(self) -> int:
        """Number of doses expansion produces on each treatment day."""
        validate_interval_hours(self.interval_hours)
        _, start = parse_start_time(self.start_time)
        minutes_left = 24 * 60 - 1 - (start.hour * 60 + start.minute)
        return min(1 + minutes_left // (self.interval_hours * 60), MAX_DOSES_PER_DAY)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now()
        return now > self.created_at + timedelta(days=self.duration_days)
