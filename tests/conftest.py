"""Shared test fixtures and configuration.

Sets up fake environment variables so src.config doesn't sys.exit(),
and provides in-memory fakes for the ports (scheduler, finance,
messaging, LLM).
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("WHATSAPP_ACCESS_TOKEN", "fake-token-for-tests")
os.environ.setdefault("WHATSAPP_PHONE_NUMBER_ID", "1234567890")
os.environ.setdefault("WHATSAPP_VERIFY_TOKEN", "verify-me")
os.environ.setdefault("WHATSAPP_APP_SECRET", "test-app-secret")
os.environ.setdefault("AUTHORIZED_USER_NUMBER", "15550001111")
os.environ.setdefault("LLM_API_KEY", "fake-llm-key-for-tests")
os.environ.setdefault("LLM_PROVIDER", "gemini")

from unittest.mock import AsyncMock

import pytest

from src.core.dispatcher import NotificationDispatcher
from src.core.loop_guard import LoopGuard
from src.core.personality import Personality
from src.data.models import AccountBalance, Transaction

USER_NUMBER = "15550001111"


# ---------------------------------------------------------------------------
# Port fakes
# ---------------------------------------------------------------------------


class FakeJob:
    def __init__(self, name, trigger, callback):
        self.name = name
        self.trigger = trigger
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """SchedulerPort that records jobs and fires them on demand."""

    def __init__(self):
        self.jobs: dict[str, FakeJob] = {}
        self.started = False
        self.stopped = False

    def schedule_recurring(self, trigger, callback, name):
        job = FakeJob(name, trigger, callback)
        self.jobs[name] = job
        return job

    def start(self):
        self.started = True

    def shutdown(self):
        self.stopped = True

    async def fire(self, name):
        """Run a job the way the real clock would, unless it was cancelled."""
        job = self.jobs[name]
        if not job.cancelled:
            await job.callback()


class FailingScheduler(FakeScheduler):
    def schedule_recurring(self, trigger, callback, name):
        raise ValueError("bad trigger")


class FakeFinance:
    """FinancePort returning canned data; records the day windows asked for."""

    def __init__(self, transactions=None, balances=None):
        self.transactions = list(transactions or [])
        self.balances = list(balances or [])
        self.requested_days: list[int] = []

    async def get_recent_transactions(self, days):
        self.requested_days.append(days)
        return list(self.transactions)

    async def get_account_balances(self):
        return list(self.balances)


def make_transaction(id="t1", amount=25.0, category="Food and Drink", merchant="Cafe", date="2026-01-15"):
    return Transaction(id=id, amount=amount, category=category, merchant=merchant, date=date)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def transport():
    """MessagingPort mock."""
    return AsyncMock()


@pytest.fixture
def loop_guard():
    return LoopGuard()


@pytest.fixture
def dispatcher(transport, loop_guard):
    return NotificationDispatcher(transport, USER_NUMBER, loop_guard)


@pytest.fixture
def finance():
    return FakeFinance(
        transactions=[
            make_transaction("t1", 40.0, "Food and Drink", "Cafe"),
            make_transaction("t2", 60.0, "Shops", "Mall"),
            make_transaction("t3", -500.0, "Transfer", "Payroll"),
        ],
        balances=[AccountBalance("Checking", 1234.5), AccountBalance("Savings", 5000.0)],
    )


@pytest.fixture
def complete():
    """LLM completion mock."""
    return AsyncMock(return_value="sassy reply")


@pytest.fixture
def personality(complete, tmp_path):
    return Personality(complete, style_path=str(tmp_path / "style.json"))


@pytest.fixture
def activity_log(tmp_path):
    from src.data.activity_log import ActivityLog
    return ActivityLog(path=str(tmp_path / "activities.json"))
