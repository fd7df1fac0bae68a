"""Scheduler port — abstract interface for recurring timers.

Core modules describe *when* with a CronSpec; the adapter decides how.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol

from src.data.models import CronSpec

JobCallback = Callable[[], Awaitable[None]]


class JobHandle(Protocol):
    """A scheduled job that can be cancelled synchronously."""

    def cancel(self) -> None: ...


class SchedulerPort(Protocol):
    """Abstract clock used by the reminder scheduler and periodic jobs."""

    def schedule_recurring(
        self, trigger: CronSpec, callback: JobCallback, name: str
    ) -> JobHandle: ...

    def start(self) -> None: ...

    def shutdown(self) -> None: ...
