"""
Sidekick Assistant — Spending Analysis.

Summaries over recent transactions from the FinancePort, the week-vs-month
trend, and the hourly "unnecessary purchase" alert sweep.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.personality import Personality
    from src.data.models import Transaction
    from src.ports.finance_port import FinancePort

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"day": 1, "week": 7, "month": 30}
ALERTED_HISTORY = 100


@dataclass
class CategoryTotal:
    total: float = 0.0
    count: int = 0


@dataclass
class SpendingSummary:
    period: str
    days: int
    total: float
    transaction_count: int
    categories: dict[str, CategoryTotal] = field(default_factory=dict)

    def top_categories(self, n: int = 3) -> list[tuple[str, CategoryTotal]]:
        return sorted(self.categories.items(), key=lambda kv: kv[1].total, reverse=True)[:n]


@dataclass
class SpendingTrend:
    this_week: float
    weekly_average: float
    trend: str                # "up" | "down"
    percent_change: float


def categorize(transactions: list[Transaction]) -> tuple[dict[str, CategoryTotal], float]:
    """Group outgoing (positive) amounts by category."""
    categories: dict[str, CategoryTotal] = {}
    total = 0.0
    for t in transactions:
        if t.amount <= 0:
            continue
        bucket = categories.setdefault(t.category or "Uncategorized", CategoryTotal())
        bucket.total += t.amount
        bucket.count += 1
        total += t.amount
    return categories, total


def is_unnecessary(transaction: Transaction, unnecessary_categories: list[str]) -> bool:
    if not unnecessary_categories:
        return False
    category = (transaction.category or "").lower()
    return any(cat in category for cat in unnecessary_categories)


def period_from_text(text: str) -> str:
    """Pick the summary period a spending question asks about."""
    lower = text.lower()
    if "today" in lower or "day" in lower:
        return "day"
    if "month" in lower:
        return "month"
    return "week"


class SpendingAnalyzer:
    """Spending summaries and alerting on top of a FinancePort."""

    def __init__(
        self,
        finance: FinancePort,
        alert_threshold: float = 100.0,
        unnecessary_categories: list[str] | None = None,
    ) -> None:
        self._finance = finance
        self._alert_threshold = alert_threshold
        self._unnecessary = unnecessary_categories or []
        self._alerted: list[str] = []

    async def summary(self, period: str = "week") -> SpendingSummary:
        days = PERIOD_DAYS.get(period, 7)
        transactions = await self._finance.get_recent_transactions(days)
        categories, total = categorize(transactions)
        return SpendingSummary(
            period=period,
            days=days,
            total=total,
            transaction_count=len(transactions),
            categories=categories,
        )

    async def trend(self) -> SpendingTrend | None:
        """This week vs. a quarter of the last 30 days. None without a baseline."""
        week = await self.summary("week")
        month = await self.summary("month")
        weekly_average = month.total / 4
        if weekly_average == 0:
            return None
        difference = abs(week.total - weekly_average)
        return SpendingTrend(
            this_week=week.total,
            weekly_average=weekly_average,
            trend="up" if week.total > weekly_average else "down",
            percent_change=round(difference / weekly_average * 100, 1),
        )

    async def digest(self) -> str:
        """Plain-text 7-day digest used as LLM input for the nightly summary."""
        week = await self.summary("week")
        if week.transaction_count == 0:
            return "No transactions found in the last 7 days."
        lines = [f"Total spent in last 7 days: ${week.total:.2f}", ""]
        for name, bucket in week.top_categories(5):
            lines.append(f"{name}: ${bucket.total:.2f} ({bucket.count} transactions)")
        return "\n".join(lines)

    async def find_alerts(self) -> list[Transaction]:
        """Unnecessary purchases over the threshold not alerted on before.

        Returned transactions are remembered so each is alerted only once.
        """
        transactions = await self._finance.get_recent_transactions(1)
        flagged = []
        for t in sorted(transactions, key=lambda t: t.date, reverse=True):
            if t.id in self._alerted:
                continue
            if is_unnecessary(t, self._unnecessary) and t.amount >= self._alert_threshold:
                flagged.append(t)
                self._alerted.append(t.id)
        if len(self._alerted) > ALERTED_HISTORY:
            self._alerted = self._alerted[-ALERTED_HISTORY:]
        return flagged

    async def alert_messages(self, personality: Personality) -> list[str]:
        messages = []
        for t in await self.find_alerts():
            messages.append(await personality.spending_alert(t.amount, t.category, t.merchant))
            logger.info("Spending alert for $%.2f at %s", t.amount, t.merchant)
        return messages


def format_summary(summary: SpendingSummary, trend: SpendingTrend | None) -> str:
    lines = [
        f"💰 Spending Summary ({summary.period}):",
        "",
        f"Total: ${summary.total:.2f}",
        f"Transactions: {summary.transaction_count}",
    ]
    top = summary.top_categories(3)
    if top:
        lines += ["", "Top Categories:"]
        lines += [f"- {name}: ${bucket.total:.2f}" for name, bucket in top]
    if trend is not None:
        arrow = "📈" if trend.trend == "up" else "📉"
        lines += ["", f"📊 Trend: {arrow} {trend.percent_change}% vs avg"]
    return "\n".join(lines)
