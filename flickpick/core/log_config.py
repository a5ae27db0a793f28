"""
FlickPick — Logging setup.
"""

from __future__ import annotations

import logging
import sys

from flickpick.config import Settings

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s — %(message)s"

_NOISY_LOGGERS = ("passlib", "urllib3", "httpx", "httpcore")


def configure_logging(settings: Settings) -> None:
    """Install a single stdout handler on the root logger. Safe to call twice."""
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout)
    logging.getLogger().setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
