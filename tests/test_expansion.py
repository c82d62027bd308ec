from datetime import date, datetime, time, timedelta

import pytest

from medtrack.domain.errors import InvalidScheduleError
from medtrack.domain.schedule import Schedule
from medtrack.services.expansion import expand

START = date(2025, 3, 10)


def make_schedule(interval_hours, duration_days, start_time, schedule_id=7, medicine_id=3):
    return Schedule(
        id=schedule_id,
        medicine_id=medicine_id,
        interval_hours=interval_hours,
        duration_days=duration_days,
        start_time=start_time,
        created_at=datetime(2025, 3, 9, 12, 0),
    )


def times_by_day(reminders):
    days = {}
    for reminder in reminders:
        days.setdefault(reminder.scheduled_time.date(), []).append(reminder.scheduled_time.time())
    return days


def test_every_eight_hours_from_eight_gives_two_doses_a_day():
    reminders = expand(make_schedule(8, 7, "08:00"), start_date=START)

    assert len(reminders) == 14
    days = times_by_day(reminders)
    assert len(days) == 7
    for day_times in days.values():
        assert day_times == [time(8, 0), time(16, 0)]


def test_every_six_hours_from_midnight():
    reminders = expand(make_schedule(6, 1, "00:00"), start_date=START)

    assert [reminder.scheduled_time for reminder in reminders] == [
        datetime(2025, 3, 10, 0, 0),
        datetime(2025, 3, 10, 6, 0),
        datetime(2025, 3, 10, 12, 0),
        datetime(2025, 3, 10, 18, 0),
    ]


def test_each_day_restarts_at_start_time():
    reminders = expand(make_schedule(5, 3, "07:30"), start_date=START)

    days = times_by_day(reminders)
    assert sorted(days) == [START, START + timedelta(days=1), START + timedelta(days=2)]
    for day_times in days.values():
        assert day_times == [time(7, 30), time(12, 30), time(17, 30), time(22, 30)]


def test_daily_cap_truncates_short_intervals():
    reminders = expand(make_schedule(1, 2, "00:00"), start_date=START)

    days = times_by_day(reminders)
    assert len(reminders) == 20
    for day_times in days.values():
        assert len(day_times) == 10
        assert day_times[-1] == time(9, 0)


def test_daily_interval_gives_one_dose_a_day():
    reminders = expand(make_schedule(24, 3, "21:00"), start_date=START)

    assert [reminder.scheduled_time for reminder in reminders] == [
        datetime(2025, 3, 10, 21, 0),
        datetime(2025, 3, 11, 21, 0),
        datetime(2025, 3, 12, 21, 0),
    ]


def test_iso_timestamp_carries_its_own_date():
    reminders = expand(make_schedule(2, 2, "2025-06-01T21:15:00"), start_date=START)

    assert [reminder.scheduled_time for reminder in reminders] == [
        datetime(2025, 6, 1, 21, 15),
        datetime(2025, 6, 1, 23, 15),
        datetime(2025, 6, 2, 21, 15),
        datetime(2025, 6, 2, 23, 15),
    ]


def test_seconds_are_dropped_from_start_time():
    reminders = expand(make_schedule(12, 1, "09:45:30"), start_date=START)

    assert [reminder.scheduled_time for reminder in reminders] == [
        datetime(2025, 3, 10, 9, 45),
        datetime(2025, 3, 10, 21, 45),
    ]


def test_defaults_to_today():
    reminders = expand(make_schedule(12, 1, "10:00"))

    assert reminders[0].scheduled_time.date() == date.today()


def test_reminders_are_unsaved_and_pending():
    created_at = datetime(2025, 3, 9, 18, 0)
    reminders = expand(make_schedule(8, 2, "08:00"), start_date=START, now=created_at)

    for reminder in reminders:
        assert reminder.id is None
        assert reminder.schedule_id == 7
        assert reminder.medicine_id == 3
        assert reminder.taken_at is None
        assert not reminder.is_taken
        assert not reminder.is_skipped
        assert reminder.created_at == created_at


def test_reminders_are_chronological():
    reminders = expand(make_schedule(3, 5, "06:20"), start_date=START)

    scheduled = [reminder.scheduled_time for reminder in reminders]
    assert scheduled == sorted(scheduled)


@pytest.mark.parametrize("duration_days", [0, -3])
def test_non_positive_duration_expands_to_nothing(duration_days):
    assert expand(make_schedule(8, duration_days, "08:00"), start_date=START) == []


@pytest.mark.parametrize("interval_hours", [0, -1, 25, 1.5, "8", True])
def test_invalid_interval_is_rejected(interval_hours):
    with pytest.raises(InvalidScheduleError):
        expand(make_schedule(interval_hours, 3, "08:00"), start_date=START)


@pytest.mark.parametrize("duration_days", [2.5, "3", True, None])
def test_non_integer_duration_is_rejected(duration_days):
    with pytest.raises(InvalidScheduleError):
        expand(make_schedule(8, duration_days, "08:00"), start_date=START)


@pytest.mark.parametrize("start_time", ["", "  ", "24:00", "08:60", "eight", "2025-13-01T08:00", None])
def test_invalid_start_time_is_rejected(start_time):
    with pytest.raises(InvalidScheduleError):
        expand(make_schedule(8, 3, start_time), start_date=START)


@pytest.mark.parametrize(
    "interval_hours,start_time",
    [(8, "08:00"), (6, "00:00"), (5, "07:30"), (1, "00:00"), (24, "23:59"), (7, "23:00"), (3, "13:10")],
)
def test_daily_doses_matches_expansion(interval_hours, start_time):
    schedule = make_schedule(interval_hours, 1, start_time)

    assert schedule.daily_doses() == len(expand(schedule, start_date=START))
