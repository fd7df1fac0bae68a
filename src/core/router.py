"""
Sidekick Assistant — Command Router.

Classifies free text into exactly one Intent. Rules are evaluated in a
fixed order and the first match wins, so more specific or higher-value
commands (help, money questions) beat generic keyword overlaps: a message
mentioning both "budget" and "remind" is a budget command.

Routing is pure: no I/O and no state. Handlers live in command_service.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Callable


class Intent(Enum):
    HELP = "help"
    SPENDING_QUERY = "spending-query"
    BALANCE_QUERY = "balance-query"
    SOCIAL_MEDIA_QUERY = "social-media-query"
    USAGE_LOG = "usage-log"
    BUDGET_SET = "budget-set"
    BUDGET_CHECK = "budget-check"
    BUDGET_SUMMARY = "budget-summary"
    REMINDER_CREATE = "reminder-create"
    REMINDER_LIST = "reminder-list"
    REMINDER_DELETE = "reminder-delete"
    ACTIVITY_LOG = "activity-log"
    SUMMARY_DAILY = "summary-daily"
    SUMMARY_WEEKLY = "summary-weekly"
    EMAIL_CHECK = "email-check"
    STYLE_LEARN = "style-learn"
    CONTEXT_RESET = "context-reset"
    FREEFORM_CHAT = "freeform-chat"


Predicate = Callable[[str], bool]
# A rule's target is either a final Intent or a nested rule list.
Rule = tuple[Predicate, "Intent | tuple[Rule, ...]"]


def _exact(*words: str) -> Predicate:
    return lambda text: text in words


def _contains(*words: str) -> Predicate:
    return lambda text: any(w in text for w in words)


def _prefix(prefix: str) -> Predicate:
    return lambda text: text.startswith(prefix)


def _any(*predicates: Predicate) -> Predicate:
    return lambda text: any(p(text) for p in predicates)


def _always(text: str) -> bool:
    return True


REMINDER_DELETE_RE = re.compile(r"\b(?:delete|remove|cancel)\s+reminder\s+#?(\d+)\b")
_REMINDER_LIST_RE = re.compile(r"\b(?:list|show|my|all)\b.*\breminders\b")

BUDGET_RULES: tuple[Rule, ...] = (
    (_prefix("set budget"), Intent.BUDGET_SET),
    (_contains("check", "status", "daily", "weekly", "monthly"), Intent.BUDGET_CHECK),
    (_always, Intent.BUDGET_SUMMARY),
)

REMINDER_RULES: tuple[Rule, ...] = (
    (lambda text: REMINDER_DELETE_RE.search(text) is not None, Intent.REMINDER_DELETE),
    (
        _any(_exact("reminders"), lambda text: _REMINDER_LIST_RE.search(text) is not None),
        Intent.REMINDER_LIST,
    ),
    (_always, Intent.REMINDER_CREATE),
)

RULES: tuple[Rule, ...] = (
    (_exact("help", "/help"), Intent.HELP),
    (_contains("spending", "spent"), Intent.SPENDING_QUERY),
    (_contains("balance", "money"), Intent.BALANCE_QUERY),
    (_contains("social media", "screen time"), Intent.SOCIAL_MEDIA_QUERY),
    (_contains("worked on", "meeting with", "did "), Intent.ACTIVITY_LOG),
    (_any(_contains("daily summary"), _exact("summary")), Intent.SUMMARY_DAILY),
    (_any(_contains("weekly summary"), _exact("week summary")), Intent.SUMMARY_WEEKLY),
    (_contains("check email", "important email"), Intent.EMAIL_CHECK),
    (_contains("budget"), BUDGET_RULES),
    (_contains("remind", "reminder"), REMINDER_RULES),
    (_prefix("log "), Intent.USAGE_LOG),
    (_exact("reset", "forget"), Intent.CONTEXT_RESET),
    (_exact("learn my style", "analyze style"), Intent.STYLE_LEARN),
)


def _match(rules: tuple[Rule, ...], text: str) -> Intent | None:
    for predicate, target in rules:
        if predicate(text):
            if isinstance(target, Intent):
                return target
            return _match(target, text)
    return None


def route(text: str) -> Intent:
    """Classify a message. Unmatched text is freeform chat."""
    normalized = text.strip().lower()
    return _match(RULES, normalized) or Intent.FREEFORM_CHAT
