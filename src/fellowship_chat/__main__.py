"""Entrypoint: python -m fellowship_chat"""
from __future__ import annotations

import uvicorn

from fellowship_chat.config import settings
from fellowship_chat.logging_config import build_log_config


def main() -> None:
    uvicorn.run(
        "fellowship_chat.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=build_log_config(),
    )


if __name__ == "__main__":
    main()
