"""Tests for src.data.activity_log — JSON-backed activity storage."""

import json
from datetime import datetime, timedelta

from src.data.activity_log import ActivityLog, summarize
from src.data.models import Activity


def _activity(days_ago=0, description="thing", duration=None, category=None, id=1):
    when = datetime.now() - timedelta(days=days_ago)
    return Activity(
        id=id,
        timestamp=when.isoformat(),
        description=description,
        date=when.date().isoformat(),
        duration=duration,
        category=category,
    )


def _seed(path, activities):
    path.write_text(json.dumps([a.to_dict() for a in activities]))


class TestActivityLog:
    def test_log_persists(self, tmp_path):
        path = tmp_path / "activities.json"
        log = ActivityLog(path=str(path))
        activity = log.log("worked on the report", duration=120, category="work")

        stored = json.loads(path.read_text())
        assert stored[0]["description"] == "worked on the report"
        assert stored[0]["duration"] == 120
        assert ActivityLog(path=str(path)).today() == [activity]

    def test_missing_file_is_empty(self, activity_log):
        assert activity_log.today() == []
        assert activity_log.daily_summary() == "No activities logged"

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "activities.json"
        path.write_text("{not json")
        assert ActivityLog(path=str(path)).today() == []

    def test_today_and_week_windows(self, tmp_path):
        path = tmp_path / "activities.json"
        _seed(path, [_activity(0, "a", id=1), _activity(3, "b", id=2), _activity(10, "c", id=3)])
        log = ActivityLog(path=str(path))
        assert [a.description for a in log.today()] == ["a"]
        assert [a.description for a in log.this_week()] == ["a", "b"]

    def test_clean_old(self, tmp_path):
        path = tmp_path / "activities.json"
        _seed(path, [_activity(1, "recent", id=1), _activity(45, "ancient", id=2)])
        log = ActivityLog(path=str(path))
        assert log.clean_old() == 1
        assert [a["description"] for a in json.loads(path.read_text())] == ["recent"]
        assert log.clean_old() == 0

    def test_weekly_summary_empty(self, activity_log):
        assert activity_log.weekly_summary() == "No activities logged this week"

    def test_weekly_summary(self, tmp_path):
        path = tmp_path / "activities.json"
        _seed(path, [_activity(0, "a", id=1), _activity(1, "b", id=2)])
        text = ActivityLog(path=str(path)).weekly_summary()
        assert "Total activities this week: 2" in text


class TestSummarize:
    def test_groups_by_category(self):
        text = summarize([
            _activity(description="report", duration=90, category="work", id=1),
            _activity(description="standup", duration=15, category="work", id=2),
            _activity(description="laundry", id=3),
        ])
        assert "Total activities: 3" in text
        assert "Total time tracked: 1h 45m" in text
        assert "*work* (2 activities, 1h 45m)" in text
        assert "*Other* (1 activities)" in text
        assert "  • laundry" in text
