"""structlog setup for the library and the CLI scripts.

Everything is written to stderr: the scripts print grids and JSON on stdout.
Pass json_output=True (SCHEDULE_LOG_JSON) for machine-readable lines.
"""

import logging
import sys

import structlog

from src.teacher_schedule.config import ScheduleConfig

# Chatty below WARNING unless we are debugging ourselves
_THIRD_PARTY_LOGGERS = ("urllib3", "asyncio")


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        json_output: Render JSON lines instead of the coloured console format.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Unknown names mean INFO.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(sys.stderr)]
    root.setLevel(level)
    third_party_level = level if level <= logging.DEBUG else logging.WARNING
    for name in _THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)


def setup_logging_from_config(config: ScheduleConfig) -> None:
    setup_logging(json_output=config.log_json, log_level=config.log_level)


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a lazy logger that tags every event with logger_name=<name>.

    Safe at import time: configuration is picked up on first use.
    """
    return structlog.get_logger(name, logger_name=name)
