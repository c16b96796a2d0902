"""
iReminder — Centralized configuration.

Loads all settings from .env. Every key has a default so the stores and the
recommendation engine import cleanly without a configured bot; the
Telegram entry point checks its own required keys at startup.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from ireminder/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Process settings loaded from environment variables."""

    # Local state (tasks, reminders, wellness, app settings)
    DATABASE_PATH: str = "data/ireminder.db"

    # Telegram front-end
    TELEGRAM_BOT_TOKEN: str = ""
    ALLOWED_USER_IDS: list[int] = []
    REMINDER_CHECK_SECONDS: int = 60

    # Speech (OpenAI text-to-speech)
    OPENAI_API_KEY: str = ""
    TTS_MODEL: str = "tts-1"
    TTS_VOICE: str = "alloy"
    AUDIO_DIR: str = "data/audio"

    @field_validator("ALLOWED_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []

    @field_validator("REMINDER_CHECK_SECONDS", mode="before")
    @classmethod
    def parse_interval(cls, v: str | int) -> int:
        value = int(v)
        if value <= 0:
            raise ValueError("REMINDER_CHECK_SECONDS must be positive")
        return value


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/ireminder.db"),
        TELEGRAM_BOT_TOKEN=os.getenv("TELEGRAM_BOT_TOKEN", ""),
        ALLOWED_USER_IDS=os.getenv("ALLOWED_USER_IDS", ""),
        REMINDER_CHECK_SECONDS=os.getenv("REMINDER_CHECK_SECONDS", "60"),
        OPENAI_API_KEY=os.getenv("OPENAI_API_KEY", ""),
        TTS_MODEL=os.getenv("TTS_MODEL", "tts-1"),
        TTS_VOICE=os.getenv("TTS_VOICE", "alloy"),
        AUDIO_DIR=os.getenv("AUDIO_DIR", "data/audio"),
    )


def require_bot_token() -> str:
    """Return the Telegram token, exiting when it is missing."""
    token = settings.TELEGRAM_BOT_TOKEN
    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)
    return token


# Singleton, imported by all other modules as:
#   from ireminder.config import settings
settings = _load_settings()
