"""Application settings loaded from environment (and .env).

This module provides a small Settings holder backed by environment variables.
Call `get_settings()` from other modules; the CLI loads `.env` before the
first call so values from the file are picked up.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import os

from notion_forge.errors import ConfigurationError


def _get(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v


def _env(name: str, default: str | None = None):
    return field(default_factory=lambda: _get(name, default))


@dataclass
class Settings:
    # Gemini
    GEMINI_API_KEY: str | None = _env("GEMINI_API_KEY")
    GEMINI_MODEL: str = _env("GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_IMAGE_MODEL: str = _env("GEMINI_IMAGE_MODEL", "imagen-4.0-generate-001")

    # Notion
    NOTION_TOKEN: str | None = _env("NOTION_TOKEN")
    # User mentioned in the "created" comment; optional
    NOTION_USER_ID: str | None = _env("NOTION_USER_ID")
    # Database the #modify webhook is allowed to edit
    NOTION_RECIPES_DATABASE_ID: str | None = _env("NOTION_RECIPES_DATABASE_ID")

    # Background workers for generate-and-persist tasks
    WORKER_THREADS: int = field(default_factory=lambda: int(_get("WORKER_THREADS", "4")))

    # Logging configuration
    # LOG_LEVEL can be DEBUG, INFO, WARNING, ERROR, or CRITICAL
    LOG_LEVEL: str = _env("LOG_LEVEL", "INFO")
    # Optional path to write logs to a file; if unset, logs go to stderr
    LOG_FILE: str | None = _env("LOG_FILE")


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next `get_settings()` re-reads the environment."""
    global _settings
    _settings = None


def validate_required(*names: str, settings: Settings | None = None) -> None:
    """Raise ConfigurationError naming every setting in `names` that is unset.

    Checks at call time so callers can load a .env first.
    """
    settings = settings or get_settings()
    missing = [name for name in names if not getattr(settings, name, None)]
    if missing:
        raise ConfigurationError(missing)
