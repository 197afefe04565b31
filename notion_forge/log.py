"""Logging setup shared by the CLI and the HTTP app."""

from __future__ import annotations

import logging

from notion_forge.settings import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

_NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "notion_client", "google_genai")


def configure_logging(settings: Settings) -> None:
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))
    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=handlers, force=True)

    # Quiet noisy third-party loggers while keeping our app logs
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
