"""Opt-in logging configuration for hosts of the question registry.

The package only creates module loggers under `interrogative.*`. Hosts
that want registry events (declarations, postprocessor failures, registry
creation) on stdout call `configure_logging()` once at startup; the level
defaults to the configured `log_level`.
"""
from __future__ import annotations
import logging
from logging.config import dictConfig
from typing import Optional, Union

from interrogative.config import get_config

PACKAGE_LOGGER = "interrogative"


def _dict_config(level: str) -> dict:
    # Root stays at WARNING so host libraries are not made chatty
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "registry": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "registry",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
        "loggers": {
            PACKAGE_LOGGER: {"level": level, "handlers": ["console"], "propagate": False},
        },
    }


def _level_name(level: Union[str, int]) -> str:
    if isinstance(level, int):
        return logging.getLevelName(level)
    return level.strip().upper()


def configure_logging(level: Optional[Union[str, int]] = None) -> bool:
    """Route `interrogative.*` logs to stdout, once.

    If the root logger already has handlers, return False to prevent
    duplicate output. Returns True when the configuration was applied.
    """
    root = logging.getLogger()
    if root.handlers:
        return False
    dictConfig(_dict_config(_level_name(level if level is not None else get_config().log_level)))
    return True


__all__ = ["configure_logging", "PACKAGE_LOGGER"]
