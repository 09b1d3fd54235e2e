"""Logging setup shared by the CLI and the layout service."""

import os
import sys

from loguru import logger


LOG_LEVEL = os.environ.get("SEATING_LAYOUT_LOG_LEVEL", "INFO").upper()

log_format = " | ".join(
    (
        "<lk>{time:YYYY-MM-DD HH:mm:ss.SSS}</>",
        "<lvl>{level:<8}</>",
        "<c>{name}::{function}:{line}</>",
        "{message}",
    )
)


def configure_logging(level: str = LOG_LEVEL) -> None:
    logger.remove()  # drop loguru's default stderr handler
    logger.add(sys.stderr, format=log_format, level=level)
