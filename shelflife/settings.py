"""Application settings management for the expiry extraction service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

LOGGER = logging.getLogger(__name__)

DEFAULT_SOON_DAYS = 7
MAX_SOON_DAYS = 14
DEFAULT_MAX_TEXT_LENGTH = 10_000


@dataclass(frozen=True)
class Settings:
    timezone: Optional[str] = None
    soon_threshold_days: int = DEFAULT_SOON_DAYS
    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH

    @staticmethod
    def _int_env(name: str, default: int, *, minimum: int, maximum: Optional[int] = None) -> int:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            value = int(raw.strip())
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {name} must be an integer") from exc
        if value < minimum or (maximum is not None and value > maximum):
            bounds = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
            raise RuntimeError(f"Environment variable {name} must be {bounds}")
        return value

    @classmethod
    def load(cls) -> "Settings":
        _ensure_env_file_loaded()

        timezone = os.getenv("TZ")
        timezone = timezone.strip() if timezone and timezone.strip() else None
        if timezone is not None:
            # POSIX TZ forms (JST-9, :/etc/localtime) fall back to the process local day.
            try:
                ZoneInfo(timezone)
            except (ZoneInfoNotFoundError, ValueError):
                LOGGER.warning("Ignoring TZ=%r: not an IANA timezone, using process local time", timezone)
                timezone = None

        soon_days = cls._int_env("EXPIRY_SOON_DAYS", DEFAULT_SOON_DAYS, minimum=0, maximum=MAX_SOON_DAYS)
        max_length = cls._int_env("MAX_OCR_TEXT_LENGTH", DEFAULT_MAX_TEXT_LENGTH, minimum=1)

        return cls(
            timezone=timezone,
            soon_threshold_days=soon_days,
            max_text_length=max_length,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.load()


def reset_settings_state() -> None:
    """Reset cached settings and environment file state (for tests)."""
    global _ENV_FILE_LOADED
    _ENV_FILE_LOADED = False
    get_settings.cache_clear()


_ENV_FILE_LOADED = False


def _ensure_env_file_loaded() -> None:
    global _ENV_FILE_LOADED
    if _ENV_FILE_LOADED:
        return
    candidates = [Path.cwd() / ".env", Path(__file__).resolve().parent.parent / ".env"]
    loaded = False
    for env_path in candidates:
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)
            loaded = True
    if not loaded:
        load_dotenv(override=False)
    _ENV_FILE_LOADED = True


__all__ = ["Settings", "get_settings", "reset_settings_state"]
