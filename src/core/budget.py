"""
Sidekick Assistant — Budget Tracker.

Period budgets (daily / weekly / monthly) and per-category budgets, held
in memory for the life of the process. Status thresholds:

    no budget      -> no_budget_set
    < 80% used     -> good
    80% .. <100%   -> warning
    >= 100% used   -> over_budget
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.core.spending import categorize

if TYPE_CHECKING:
    from src.core.personality import Personality
    from src.ports.finance_port import FinancePort

logger = logging.getLogger(__name__)

PERIODS = ("daily", "weekly", "monthly")
PERIOD_DAYS = {"daily": 1, "weekly": 7, "monthly": 30}

WARNING_PERCENT = 80.0

NO_BUDGET_SET = "no_budget_set"
GOOD = "good"
WARNING = "warning"
OVER_BUDGET = "over_budget"

_STATUS_EMOJI = {OVER_BUDGET: "🔴", WARNING: "🟡", GOOD: "🟢"}


@dataclass
class BudgetStatus:
    period: str                 # "daily" | "weekly" | "monthly" | category name
    budget: float | None
    spent: float
    remaining: float
    percent_used: float
    status: str


def classify(spent: float, budget: float) -> tuple[float, str]:
    """Return (percent_used, status) for spending against a positive budget."""
    percent = spent * 100 / budget
    if percent >= 100:
        return percent, OVER_BUDGET
    if percent >= WARNING_PERCENT:
        return percent, WARNING
    return percent, GOOD


class BudgetTracker:
    """Budget settings plus status checks against a FinancePort."""

    def __init__(self, finance: FinancePort) -> None:
        self._finance = finance
        self.periods: dict[str, float | None] = {p: None for p in PERIODS}
        self.categories: dict[str, float] = {}

    @property
    def has_any(self) -> bool:
        return any(self.periods.values()) or bool(self.categories)

    def set_budget(self, period: str, amount: float) -> None:
        """Set a period budget, or a category budget for any other name."""
        key = period.lower()
        if key in PERIODS:
            self.periods[key] = amount
            logger.info("Set %s budget to $%.2f", key, amount)
        else:
            self.categories[key] = amount
            logger.info("Set %s category budget to $%.2f", key, amount)

    async def check(self, period: str = "daily") -> BudgetStatus:
        budget = self.periods.get(period)
        if not budget:
            return BudgetStatus(period, None, 0.0, 0.0, 0.0, NO_BUDGET_SET)

        transactions = await self._finance.get_recent_transactions(PERIOD_DAYS[period])
        _, spent = categorize(transactions)
        percent, status = classify(spent, budget)
        return BudgetStatus(period, budget, spent, budget - spent, round(percent, 1), status)

    async def check_categories(self) -> list[BudgetStatus]:
        """Status of every category budget over the last 30 days."""
        if not self.categories:
            return []

        transactions = await self._finance.get_recent_transactions(30)
        by_category, _ = categorize(transactions)

        results = []
        for name, amount in self.categories.items():
            spent = next(
                (bucket.total for cat, bucket in by_category.items() if name in cat.lower()),
                0.0,
            )
            percent, status = classify(spent, amount)
            results.append(
                BudgetStatus(name, amount, spent, amount - spent, round(percent, 1), status)
            )
        return results

    async def summary(self) -> str:
        if not self.has_any:
            return 'No budgets set yet. Use "set budget [period] [amount]" to create one.'

        lines = ["💰 Budget Summary:", ""]
        for period in PERIODS:
            if self.periods[period]:
                s = await self.check(period)
                lines.append(
                    f"{_STATUS_EMOJI[s.status]} {period.capitalize()}: "
                    f"${s.spent:.2f} / ${s.budget:.2f} ({s.percent_used}%)"
                )

        categories = await self.check_categories()
        if categories:
            lines += ["", "Category Budgets:"]
            for c in categories:
                lines.append(
                    f"{_STATUS_EMOJI[c.status]} {c.period}: ${c.spent:.2f} / ${c.budget:.2f}"
                )
        return "\n".join(lines)

    async def alert_messages(self, personality: Personality) -> list[str]:
        """Alerts for the daily budget (warning/over) and over-budget categories."""
        messages = []
        if self.periods["daily"]:
            daily = await self.check("daily")
            if daily.status == OVER_BUDGET:
                alert = await personality.generate(
                    f"The user has spent ${daily.spent:.2f} today, which is over their "
                    f"${daily.budget:.2f} daily budget. Roast them for going over budget."
                )
                messages.append(f"💸 {alert}")
            elif daily.status == WARNING:
                alert = await personality.generate(
                    f"The user has spent ${daily.spent:.2f} today ({daily.percent_used}% of "
                    f"their ${daily.budget:.2f} daily budget). Warn them they're getting "
                    "close to their limit."
                )
                messages.append(f"⚠️ {alert}")

        for c in await self.check_categories():
            if c.status == OVER_BUDGET:
                alert = await personality.generate(
                    f"The user has spent ${c.spent:.2f} on {c.period} this month, which is "
                    f"over their ${c.budget:.2f} budget for that category. Call them out on it."
                )
                messages.append(f"💸 {alert}")
        return messages


def format_status(status: BudgetStatus) -> str:
    if status.status == NO_BUDGET_SET:
        return (
            f"No {status.period} budget set. "
            f'Use "set budget {status.period} [amount]" to create one.'
        )
    emoji = _STATUS_EMOJI[status.status]
    line = (
        f"{emoji} {status.period.capitalize()} budget: ${status.spent:.2f} / "
        f"${status.budget:.2f} ({status.percent_used}%)"
    )
    if status.status == OVER_BUDGET:
        return f"{line}\nYou're ${-status.remaining:.2f} over. 😤"
    return f"{line}\n${status.remaining:.2f} left."
