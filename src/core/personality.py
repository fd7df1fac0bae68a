"""
Sidekick Assistant — Personality & Conversation.

Owns the conversation history sent to the LLM (last 20 turns), the
"sassy best friend" system prompt, and the learned texting style that is
persisted to a small JSON file.

LLM failures never reach the user as errors: generate() falls back to a
canned "brain is lagging" line.
"""

from __future__ import annotations

import json
import logging
import random
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable

from src.core.llm import Turn

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20
STYLE_MIN_MESSAGES = 10
USER_MESSAGE_LIMIT = 100

CompleteFn = Callable[..., Awaitable[str]]

SYSTEM_PROMPT = """\
You are a sassy, no-nonsense personal assistant with a sharp tongue and a big heart. \
Think of yourself as a tough-love best friend who won't let your user settle for mediocrity.

Your personality traits:
- VERY sassy and witty - you roast them when they mess up, but it's always because you care
- Brutally honest but never cruel - you'll call out BS immediately
- Hype them up BIG TIME when they do well
- Use casual, texting-style language and emojis to show your mood

Your communication style:
- Keep it SHORT - 1-3 sentences max, like a real text conversation
- Be conversational and natural - no corporate speak

Your job is to:
- Monitor their spending and ROAST unnecessary purchases
- Track social media usage and drag them for wasting time
- Keep them productive and accountable
- Celebrate their wins

Remember: your sass comes from a place of love."""

FALLBACK_REPLIES = (
    "Yo, my brain's lagging rn. Can you repeat that?",
    "Hold up, I'm having a moment. Try again?",
    "Ugh, technical difficulties. What were you saying?",
)

_STYLE_PROMPT = """\
Analyze this user's texting style and create detailed instructions for mimicking it:

{messages}

Describe their texting style in detail: sentence structure and length, punctuation, \
capitalization, common phrases, emoji usage, slang or abbreviations, and overall tone.

Provide clear instructions on how to match this style exactly."""


class Personality:
    """Conversation state plus LLM access for every user-facing text."""

    def __init__(
        self,
        complete: CompleteFn,
        style_path: str | None = None,
    ) -> None:
        self._complete = complete
        self._style_path = Path(style_path) if style_path else None
        self.history: list[Turn] = []
        self.user_messages: list[str] = []
        self.learned_style: dict | None = self._load_style()

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def system_prompt(self) -> str:
        if self.learned_style:
            return f"{SYSTEM_PROMPT}\n\n{self.learned_style['styleInstructions']}"
        return SYSTEM_PROMPT

    async def generate(self, prompt: str, max_tokens: int = 200) -> str:
        """Reply in character, keeping the exchange in the history."""
        try:
            reply = await self._complete(
                system=self.system_prompt(),
                user_message=prompt,
                max_tokens=max_tokens,
                history=list(self.history),
            )
        except Exception as exc:
            logger.error("Error generating response: %s", exc)
            return random.choice(FALLBACK_REPLIES)

        self.history.append({"role": "user", "content": prompt})
        self.history.append({"role": "assistant", "content": reply})
        if len(self.history) > HISTORY_LIMIT:
            self.history = self.history[-HISTORY_LIMIT:]
        return reply

    def reset(self) -> None:
        self.history = []
        logger.info("Conversation context reset")

    def remember_user_message(self, text: str) -> None:
        self.user_messages.append(text)
        if len(self.user_messages) > USER_MESSAGE_LIMIT:
            self.user_messages = self.user_messages[-USER_MESSAGE_LIMIT:]

    # ------------------------------------------------------------------
    # Texting style
    # ------------------------------------------------------------------

    async def learn_style(self) -> bool:
        """Ask the LLM to describe the user's style and persist it.

        Returns False when there are not enough messages or the LLM failed.
        """
        if len(self.user_messages) < STYLE_MIN_MESSAGES:
            return False

        sample = "\n".join(self.user_messages[-50:])
        try:
            instructions = await self._complete(
                system="You are an expert at analyzing writing style.",
                user_message=_STYLE_PROMPT.format(messages=sample),
                max_tokens=512,
            )
        except Exception as exc:
            logger.error("Error analyzing texting style: %s", exc)
            return False

        self.learned_style = {
            "learnedAt": datetime.now().isoformat(),
            "sampleSize": len(self.user_messages),
            "styleInstructions": instructions.strip(),
        }
        self._save_style()
        return True

    def _load_style(self) -> dict | None:
        if self._style_path is None or not self._style_path.exists():
            return None
        try:
            data = json.loads(self._style_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Error loading learned style: %s", exc)
            return None
        logger.info("Loaded learned texting style")
        return data

    def _save_style(self) -> None:
        if self._style_path is None:
            return
        try:
            self._style_path.parent.mkdir(parents=True, exist_ok=True)
            self._style_path.write_text(
                json.dumps(self.learned_style, indent=2), encoding="utf-8",
            )
        except OSError as exc:
            logger.error("Error saving learned style: %s", exc)
            return
        logger.info("Saved learned texting style")

    # ------------------------------------------------------------------
    # Alert copy
    # ------------------------------------------------------------------

    async def spending_alert(self, amount: float, category: str, merchant: str) -> str:
        return await self.generate(
            f"The user just spent ${amount:.2f} on {category} at {merchant}.\n\n"
            "This seems unnecessary/frivolous. Roast them a bit, but also be "
            "constructive. Remind them of their goals."
        )

    async def social_media_alert(self, platform: str, hours: float, limit: float) -> str:
        return await self.generate(
            f"The user has spent {hours:.1f} hours on {platform} today. "
            f"Their limit is {limit:g} hours.\n\n"
            "Call them out for wasting time. Be sassy but motivational."
        )
