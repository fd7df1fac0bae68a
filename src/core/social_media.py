"""
Sidekick Assistant — Social Media Usage.

Manually logged minutes per platform for the current day, reset at
midnight by the monitoring jobs. The platforms expose no usable
screen-time APIs, so "log instagram 45" is the only input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

logger = logging.getLogger(__name__)

PLATFORMS = ("instagram", "twitter", "tiktok", "youtube")


@dataclass
class PlatformUsage:
    hours: float = 0.0
    last_logged: datetime | None = None


class UsageTracker:
    """Per-day social media hours with a shared daily limit."""

    def __init__(self, max_hours_per_day: float = 2.0) -> None:
        self.max_hours = max_hours_per_day
        self.usage: dict[str, PlatformUsage] = {p: PlatformUsage() for p in PLATFORMS}
        self._alerted: set[str] = set()

    def log_usage(self, platform: str, minutes: int) -> float:
        """Add minutes to a platform and return its total hours today.

        Raises KeyError for an unknown platform.
        """
        entry = self.usage[platform.lower()]
        entry.hours += minutes / 60
        entry.last_logged = datetime.now()
        logger.info("Logged %d minutes on %s", minutes, platform)
        return entry.hours

    def total_hours(self) -> float:
        return sum(u.hours for u in self.usage.values())

    def reset_daily(self) -> None:
        for entry in self.usage.values():
            entry.hours = 0.0
            entry.last_logged = None
        self._alerted.clear()
        logger.info("Daily usage reset")

    def over_limit(self) -> list[tuple[str, float]]:
        """Platforms over the daily limit that have not been flagged today."""
        flagged = []
        for platform, entry in self.usage.items():
            if entry.hours > self.max_hours and platform not in self._alerted:
                self._alerted.add(platform)
                flagged.append((platform, entry.hours))
        return flagged

    def summary(self) -> str:
        lines = ["Social Media Usage Today:", ""]
        for platform, entry in self.usage.items():
            lines.append(f"{platform.capitalize()}: {entry.hours:.1f}h")
        lines += ["", f"Total: {self.total_hours():.1f}h / {self.max_hours:g}h limit"]
        return "\n".join(lines)
