from __future__ import annotations

import logging
from typing import Any

from fellowship_chat.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"


def build_log_config(level: str | None = None) -> dict[str, Any]:
    """dictConfig shared by the app and uvicorn."""
    level = (level or settings.LOG_LEVEL).upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "correlation_id": {
                "()": "fellowship_chat.api.middleware.correlation_id.CorrelationIdFilter",
            },
        },
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["correlation_id"],
            },
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": {
            "uvicorn": {"level": level},
            "uvicorn.access": {"level": level},
            "sqlalchemy.engine": {"level": logging.getLevelName(logging.WARNING)},
        },
    }
