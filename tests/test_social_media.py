"""Tests for src.core.social_media — manual usage tracking."""

import pytest

from src.core.social_media import UsageTracker


class TestUsageTracker:
    def test_log_accumulates_hours(self):
        tracker = UsageTracker()
        tracker.log_usage("instagram", 30)
        assert tracker.log_usage("Instagram", 60) == pytest.approx(1.5)
        assert tracker.total_hours() == pytest.approx(1.5)

    def test_unknown_platform(self):
        with pytest.raises(KeyError):
            UsageTracker().log_usage("myspace", 10)

    def test_over_limit_flags_once_per_day(self):
        tracker = UsageTracker(max_hours_per_day=1)
        tracker.log_usage("tiktok", 90)
        assert tracker.over_limit() == [("tiktok", 1.5)]
        assert tracker.over_limit() == []

    def test_reset_clears_usage_and_flags(self):
        tracker = UsageTracker(max_hours_per_day=1)
        tracker.log_usage("tiktok", 90)
        tracker.over_limit()
        tracker.reset_daily()
        assert tracker.total_hours() == 0
        tracker.log_usage("tiktok", 90)
        assert tracker.over_limit() == [("tiktok", 1.5)]

    def test_at_limit_is_not_over(self):
        tracker = UsageTracker(max_hours_per_day=1)
        tracker.log_usage("youtube", 60)
        assert tracker.over_limit() == []

    def test_summary(self):
        tracker = UsageTracker(max_hours_per_day=2)
        tracker.log_usage("twitter", 45)
        text = tracker.summary()
        assert "Twitter: 0.8h" in text
        assert "Total: 0.8h / 2h limit" in text
