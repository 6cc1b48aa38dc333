#!/usr/bin/env python3
"""
Logging setup for the reservoir API
"""
from logging.config import dictConfig
from typing import Optional, Union

from config import get_settings

_configured = False


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """Configure application-wide logging (idempotent)."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else get_settings().log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "default",
                }
            },
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True
