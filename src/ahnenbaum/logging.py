"""Structlog setup for the relationship graph engine.

Events use dotted names per component (`relationship.created`,
`auto_partnership.created`, `family_graph.correction_cap_reached`,
`engine.internal_error`). The level comes from `AHNENBAUM_LOG_LEVEL`;
only the CLI prints to the console.
"""
from __future__ import annotations

from typing import Literal

import logging
import structlog

from .config import CONFIG

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def configure_logging(level: LogLevel = "INFO") -> None:
    numeric = logging.getLevelName(level)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(format="%(message)s", level=numeric)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "ahnenbaum"):
    return structlog.get_logger(name)


# Initialize default config
configure_logging(CONFIG.log_level)
