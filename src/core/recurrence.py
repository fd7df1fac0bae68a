"""Recurrence rules — pure schedule validation and trigger derivation.

Turns user-supplied schedule pieces (time strings, frequency, day names,
interval windows) into a RecurrenceRule, and derives the cron-like trigger
that the scheduler adapter binds to.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import re

from src.data.models import (
    CronSpec,
    DailyAt,
    IntervalBetween,
    OnceAt,
    RecurrenceRule,
    WeeklyAt,
)

_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")

_DAYS = {
    "monday": "mon", "mon": "mon",
    "tuesday": "tue", "tue": "tue",
    "wednesday": "wed", "wed": "wed",
    "thursday": "thu", "thu": "thu",
    "friday": "fri", "fri": "fri",
    "saturday": "sat", "sat": "sat",
    "sunday": "sun", "sun": "sun",
}

FREQUENCIES = ("once", "daily", "weekly", "interval")


class InvalidScheduleError(ValueError):
    """Raised when a reminder schedule cannot be parsed or is out of range."""


def parse_time(value: str) -> tuple[int, int]:
    """Parse "HH:MM" (24h) into (hour, minute).

    Raises InvalidScheduleError unless 0 <= HH <= 23 and 0 <= MM <= 59.
    """
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise InvalidScheduleError(
            f"Invalid time {value!r}. Use HH:MM (24-hour format)"
        )
    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidScheduleError(
            f"Invalid time {value!r}. Use HH:MM (24-hour format)"
        )
    return hour, minute


def parse_weekday(value: str | None) -> str:
    """Normalize a full or three-letter day name to "mon".."sun"."""
    if not value:
        raise InvalidScheduleError("Day of week required for weekly reminders")
    day = _DAYS.get(value.strip().lower())
    if day is None:
        raise InvalidScheduleError(f"Invalid day of week: {value!r}")
    return day


def build_rule(
    frequency: str,
    time: str | None = None,
    day: str | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
    interval_hours: int | None = None,
) -> RecurrenceRule:
    """Validate schedule pieces and return the matching RecurrenceRule."""
    frequency = (frequency or "").lower()

    if frequency == "interval":
        if start_time is None or end_time is None:
            raise InvalidScheduleError("Interval reminders need a start and end time")
        if isinstance(interval_hours, bool) or not isinstance(interval_hours, int) \
                or interval_hours < 1:
            raise InvalidScheduleError("Interval must be a whole number of hours (1 or more)")
        # Minutes are dropped: interval reminders fire on the hour.
        start_hour, _ = parse_time(start_time)
        end_hour, _ = parse_time(end_time)
        if start_hour > end_hour:
            raise InvalidScheduleError("Start time must not be after end time")
        return IntervalBetween(start_hour, end_hour, interval_hours)

    if frequency not in FREQUENCIES:
        raise InvalidScheduleError(
            f"Invalid frequency {frequency!r}. Use: once, daily, weekly or interval"
        )

    if time is None:
        raise InvalidScheduleError("A time of day (HH:MM) is required")
    hour, minute = parse_time(time)

    if frequency == "daily":
        return DailyAt(hour, minute)
    if frequency == "weekly":
        return WeeklyAt(hour, minute, parse_weekday(day))
    return OnceAt(hour, minute)


def firing_hours(rule: IntervalBetween) -> list[int]:
    """Hours an interval rule fires at, stepping from start to end inclusive."""
    return list(range(rule.start_hour, rule.end_hour + 1, rule.step_hours))


def derive_trigger(rule: RecurrenceRule) -> CronSpec:
    """Derive the cron-like trigger for a rule.

    One-shot reminders use the daily trigger; the scheduler cancels them
    after the first firing.
    """
    if isinstance(rule, IntervalBetween):
        hours = ",".join(str(h) for h in firing_hours(rule))
        return CronSpec(minute="0", hour=hours)
    if isinstance(rule, WeeklyAt):
        return CronSpec(minute=str(rule.minute), hour=str(rule.hour), day_of_week=rule.day)
    return CronSpec(minute=str(rule.minute), hour=str(rule.hour))


def describe(rule: RecurrenceRule) -> str:
    """Short human label, e.g. "daily" or "weekly on mon"."""
    if isinstance(rule, WeeklyAt):
        return f"weekly on {rule.day}"
    if isinstance(rule, IntervalBetween):
        return f"every {rule.step_hours}h"
    return rule.kind


def display_time(rule: RecurrenceRule) -> str:
    if isinstance(rule, IntervalBetween):
        return f"{rule.start_hour:02d}:00-{rule.end_hour:02d}:00"
    return f"{rule.hour:02d}:{rule.minute:02d}"
