"""
Sidekick Assistant — Activity Log.

Activities ("worked on X for 2 hours", "meeting with Dana") persist in a
JSON file that is rewritten wholesale on every change. Entries older than
30 days are purged nightly.
"""

from __future__ import annotations

import json
import logging
import time
from collections import defaultdict
from datetime import date, datetime, timedelta
from pathlib import Path

from src.data.models import Activity

logger = logging.getLogger(__name__)

RETENTION_DAYS = 30


class ActivityLog:
    """JSON-file-backed storage for logged activities."""

    def __init__(self, path: str | None = None) -> None:
        if path is None:
            from src.config import settings
            path = settings.ACTIVITY_LOG_PATH

        self._path = Path(path)

    def _load(self) -> list[Activity]:
        if not self._path.exists():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Error loading activities: %s", exc)
            return []
        return [Activity.from_dict(item) for item in raw]

    def _save(self, activities: list[Activity]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps([a.to_dict() for a in activities], indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.error("Error saving activities: %s", exc)

    def log(
        self,
        description: str,
        duration: int | None = None,
        category: str | None = None,
    ) -> Activity:
        now = datetime.now()
        activity = Activity(
            id=time.time_ns() // 1_000_000,
            timestamp=now.isoformat(),
            description=description,
            date=now.date().isoformat(),
            duration=duration,
            category=category,
        )
        activities = self._load()
        activities.append(activity)
        self._save(activities)
        logger.info("Activity logged: %s", description)
        return activity

    def today(self) -> list[Activity]:
        today = date.today().isoformat()
        return [a for a in self._load() if a.date == today]

    def this_week(self) -> list[Activity]:
        now = datetime.now()
        week_ago = now - timedelta(days=7)
        return [
            a for a in self._load()
            if week_ago <= datetime.fromisoformat(a.timestamp) <= now
        ]

    def clean_old(self, days: int = RETENTION_DAYS) -> int:
        """Drop activities older than `days`. Returns how many were removed."""
        activities = self._load()
        cutoff = datetime.now() - timedelta(days=days)
        kept = [a for a in activities if datetime.fromisoformat(a.timestamp) >= cutoff]
        removed = len(activities) - len(kept)
        if removed:
            self._save(kept)
            logger.info("Cleaned %d old activities", removed)
        return removed

    def daily_summary(self) -> str:
        return summarize(self.today())

    def weekly_summary(self) -> str:
        activities = self.this_week()
        if not activities:
            return "No activities logged this week"

        by_day: dict[str, int] = defaultdict(int)
        for a in activities:
            by_day[a.date] += 1

        lines = ["📅 *Weekly Summary*", "", f"Total activities this week: {len(activities)}", ""]
        for day in sorted(by_day):
            label = date.fromisoformat(day).strftime("%a, %b %d")
            lines.append(f"*{label}*: {by_day[day]} activities")
        return "\n".join(lines) + "\n\n" + summarize(activities)


def _hm(minutes: int) -> str:
    return f"{minutes // 60}h {minutes % 60}m"


def summarize(activities: list[Activity]) -> str:
    """Group activities by category with counts, time and recent entries."""
    if not activities:
        return "No activities logged"

    groups: dict[str, list[Activity]] = defaultdict(list)
    for a in activities:
        groups[a.category or "Other"].append(a)
    total_minutes = sum(a.duration or 0 for a in activities)

    lines = ["📊 *Activity Summary*", "", f"Total activities: {len(activities)}"]
    if total_minutes:
        lines.append(f"Total time tracked: {_hm(total_minutes)}")
    lines.append("")

    for category, items in groups.items():
        minutes = sum(a.duration or 0 for a in items)
        header = f"*{category}* ({len(items)} activities"
        if minutes:
            header += f", {_hm(minutes)}"
        lines.append(header + ")")
        lines += [f"  • {a.description}" for a in items[-3:]]
        lines.append("")
    return "\n".join(lines).rstrip()
