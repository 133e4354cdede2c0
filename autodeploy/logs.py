"""Logging setup."""

from __future__ import annotations

import logging

from autodeploy.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> list[logging.Handler]:
    """
    Attach handlers to the root logger and return them.

    Logs always go to stderr; when ``LOG_FILE`` is set they are also appended
    to that file.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, mode="a", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return handlers
