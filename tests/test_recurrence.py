"""Tests for src.core.recurrence — schedule validation and trigger derivation."""

import pytest

from src.core.recurrence import (
    InvalidScheduleError,
    build_rule,
    derive_trigger,
    describe,
    display_time,
    firing_hours,
    parse_time,
    parse_weekday,
)
from src.data.models import CronSpec, DailyAt, IntervalBetween, OnceAt, WeeklyAt


# ---------------------------------------------------------------------------
# parse_time
# ---------------------------------------------------------------------------


class TestParseTime:
    @pytest.mark.parametrize("value,expected", [
        ("00:00", (0, 0)),
        ("9:05", (9, 5)),
        ("14:30", (14, 30)),
        ("23:59", (23, 59)),
    ])
    def test_valid(self, value, expected):
        assert parse_time(value) == expected

    @pytest.mark.parametrize("value", [
        "24:00", "12:60", "1230", "12:3", "noon", "", "12:30pm", "-1:00", "١٢:٣٠",
    ])
    def test_invalid(self, value):
        with pytest.raises(InvalidScheduleError):
            parse_time(value)

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_time("99:99")


class TestParseWeekday:
    def test_full_and_short_names(self):
        assert parse_weekday("Monday") == "mon"
        assert parse_weekday("sun") == "sun"

    def test_missing_day(self):
        with pytest.raises(InvalidScheduleError):
            parse_weekday(None)

    def test_unknown_day(self):
        with pytest.raises(InvalidScheduleError):
            parse_weekday("funday")


# ---------------------------------------------------------------------------
# build_rule
# ---------------------------------------------------------------------------


class TestBuildRule:
    def test_once(self):
        assert build_rule("once", time="14:30") == OnceAt(14, 30)

    def test_daily(self):
        assert build_rule("DAILY", time="07:15") == DailyAt(7, 15)

    def test_weekly(self):
        assert build_rule("weekly", time="18:00", day="Sunday") == WeeklyAt(18, 0, "sun")

    def test_weekly_requires_day(self):
        with pytest.raises(InvalidScheduleError):
            build_rule("weekly", time="18:00")

    def test_interval(self):
        rule = build_rule("interval", start_time="09:00", end_time="17:00", interval_hours=2)
        assert rule == IntervalBetween(9, 17, 2)

    def test_interval_drops_minutes(self):
        rule = build_rule("interval", start_time="09:45", end_time="17:30", interval_hours=3)
        assert rule == IntervalBetween(9, 17, 3)

    @pytest.mark.parametrize("step", [0, -1, None, 1.5, True])
    def test_interval_rejects_bad_step(self, step):
        with pytest.raises(InvalidScheduleError):
            build_rule("interval", start_time="09:00", end_time="17:00", interval_hours=step)

    def test_interval_rejects_inverted_window(self):
        with pytest.raises(InvalidScheduleError):
            build_rule("interval", start_time="18:00", end_time="09:00", interval_hours=1)

    def test_interval_requires_window(self):
        with pytest.raises(InvalidScheduleError):
            build_rule("interval", start_time="09:00", interval_hours=1)

    def test_unknown_frequency(self):
        with pytest.raises(InvalidScheduleError):
            build_rule("monthly", time="09:00")

    def test_missing_time(self):
        with pytest.raises(InvalidScheduleError):
            build_rule("daily")


# ---------------------------------------------------------------------------
# Trigger derivation
# ---------------------------------------------------------------------------


class TestDeriveTrigger:
    def test_interval_hours(self):
        rule = IntervalBetween(9, 17, 2)
        assert firing_hours(rule) == [9, 11, 13, 15, 17]
        assert derive_trigger(rule) == CronSpec(minute="0", hour="9,11,13,15,17")

    def test_interval_end_not_on_step(self):
        assert firing_hours(IntervalBetween(9, 16, 3)) == [9, 12, 15]

    def test_interval_single_hour(self):
        assert firing_hours(IntervalBetween(12, 12, 1)) == [12]

    def test_daily_and_once_share_trigger(self):
        assert derive_trigger(DailyAt(14, 30)) == CronSpec("30", "14")
        assert derive_trigger(OnceAt(14, 30)) == CronSpec("30", "14")

    def test_weekly_sets_day(self):
        trigger = derive_trigger(WeeklyAt(8, 5, "fri"))
        assert trigger == CronSpec("5", "8", "fri")
        assert trigger.expression == "5 8 * * fri"


class TestLabels:
    def test_describe(self):
        assert describe(OnceAt(1, 2)) == "once"
        assert describe(DailyAt(1, 2)) == "daily"
        assert describe(WeeklyAt(1, 2, "mon")) == "weekly on mon"
        assert describe(IntervalBetween(9, 17, 2)) == "every 2h"

    def test_display_time(self):
        assert display_time(OnceAt(9, 5)) == "09:05"
        assert display_time(IntervalBetween(9, 17, 2)) == "09:00-17:00"
