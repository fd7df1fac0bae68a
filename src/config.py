"""
Sidekick Assistant — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_REQUIRED_KEYS = (
    "WHATSAPP_ACCESS_TOKEN",
    "WHATSAPP_PHONE_NUMBER_ID",
    "AUTHORIZED_USER_NUMBER",
    "LLM_API_KEY",
)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # WhatsApp Cloud API
    WHATSAPP_ACCESS_TOKEN: str
    WHATSAPP_PHONE_NUMBER_ID: str
    WHATSAPP_VERIFY_TOKEN: str = ""
    WHATSAPP_APP_SECRET: str = ""
    WHATSAPP_API_VERSION: str = "v21.0"

    # The single user the assistant talks to (digits only, no "+")
    AUTHORIZED_USER_NUMBER: str

    # "Talk to yourself" mode: treat echoes of our own messages as commands
    SELF_CHAT_MODE: bool = False
    TARGET_CHAT_ID: str = ""

    # LLM — provider-agnostic (gemini, anthropic, openai, cohere)
    LLM_PROVIDER: str = "gemini"
    LLM_MODEL: str = ""          # empty → smart default per provider
    LLM_API_KEY: str

    # Plaid (finance features degrade gracefully when unset)
    PLAID_CLIENT_ID: str = ""
    PLAID_SECRET: str = ""
    PLAID_ENV: str = "sandbox"
    PLAID_ACCESS_TOKEN: str = ""

    # Gmail (readonly)
    GMAIL_CREDENTIALS_PATH: str = "data/gmail-credentials.json"
    GMAIL_TOKEN_PATH: str = "data/gmail-token.json"

    # Local JSON state
    ACTIVITY_LOG_PATH: str = "data/activities.json"
    STYLE_PATH: str = "data/user-style.json"

    # Accountability thresholds
    SPENDING_ALERT_THRESHOLD: float = 100.0
    UNNECESSARY_SPENDING_CATEGORIES: list[str] = []
    MAX_SOCIAL_MEDIA_HOURS_PER_DAY: float = 2.0

    # Scheduling
    TIMEZONE: str = "UTC"

    # HTTP server (webhook + keep-alive)
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    @field_validator("AUTHORIZED_USER_NUMBER", "TARGET_CHAT_ID", mode="before")
    @classmethod
    def strip_number(cls, v: str) -> str:
        return str(v).strip().lstrip("+")

    @field_validator("SELF_CHAT_MODE", mode="before")
    @classmethod
    def parse_flag(cls, v: str | bool) -> bool:
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in {"1", "true", "yes", "on"}

    @field_validator("UNNECESSARY_SPENDING_CATEGORIES", mode="before")
    @classmethod
    def parse_categories(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, list):
            return [c.strip().lower() for c in v if c.strip()]
        if isinstance(v, str) and v.strip():
            return [c.strip().lower() for c in v.split(",") if c.strip()]
        return []

    @field_validator("SPENDING_ALERT_THRESHOLD", "MAX_SOCIAL_MEDIA_HOURS_PER_DAY", mode="before")
    @classmethod
    def parse_float(cls, v: str | float) -> float:
        return float(v)

    @field_validator("PORT", mode="before")
    @classmethod
    def parse_port(cls, v: str | int) -> int:
        return int(v)


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    for key in _REQUIRED_KEYS:
        value = os.getenv(key, "")
        if not value or value.startswith("your-"):
            print(f"ERROR: {key} is missing or not set in .env", file=sys.stderr)
            sys.exit(1)

    return Settings(
        WHATSAPP_ACCESS_TOKEN=os.getenv("WHATSAPP_ACCESS_TOKEN", ""),
        WHATSAPP_PHONE_NUMBER_ID=os.getenv("WHATSAPP_PHONE_NUMBER_ID", ""),
        WHATSAPP_VERIFY_TOKEN=os.getenv("WHATSAPP_VERIFY_TOKEN", ""),
        WHATSAPP_APP_SECRET=os.getenv("WHATSAPP_APP_SECRET", ""),
        WHATSAPP_API_VERSION=os.getenv("WHATSAPP_API_VERSION", "v21.0"),
        AUTHORIZED_USER_NUMBER=os.getenv("AUTHORIZED_USER_NUMBER", ""),
        SELF_CHAT_MODE=os.getenv("SELF_CHAT_MODE", "false"),
        TARGET_CHAT_ID=os.getenv("TARGET_CHAT_ID", ""),
        LLM_PROVIDER=os.getenv("LLM_PROVIDER", "gemini"),
        LLM_MODEL=os.getenv("LLM_MODEL", ""),
        LLM_API_KEY=os.getenv("LLM_API_KEY", ""),
        PLAID_CLIENT_ID=os.getenv("PLAID_CLIENT_ID", ""),
        PLAID_SECRET=os.getenv("PLAID_SECRET", ""),
        PLAID_ENV=os.getenv("PLAID_ENV", "sandbox"),
        PLAID_ACCESS_TOKEN=os.getenv("PLAID_ACCESS_TOKEN", ""),
        GMAIL_CREDENTIALS_PATH=os.getenv("GMAIL_CREDENTIALS_PATH", "data/gmail-credentials.json"),
        GMAIL_TOKEN_PATH=os.getenv("GMAIL_TOKEN_PATH", "data/gmail-token.json"),
        ACTIVITY_LOG_PATH=os.getenv("ACTIVITY_LOG_PATH", "data/activities.json"),
        STYLE_PATH=os.getenv("STYLE_PATH", "data/user-style.json"),
        SPENDING_ALERT_THRESHOLD=os.getenv("SPENDING_ALERT_THRESHOLD", "100"),
        UNNECESSARY_SPENDING_CATEGORIES=os.getenv("UNNECESSARY_SPENDING_CATEGORIES", ""),
        MAX_SOCIAL_MEDIA_HOURS_PER_DAY=os.getenv("MAX_SOCIAL_MEDIA_HOURS_PER_DAY", "2"),
        TIMEZONE=os.getenv("TIMEZONE", "UTC"),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=os.getenv("PORT", "3000"),
    )


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
