"""
Structured logging setup.

Library modules log through the standard ``logging`` module with
``extra`` fields. The hosting process calls ``configure_logging`` once at
startup to render those records through structlog.
"""

import logging
from typing import Optional

import structlog

from .config import get_settings

HANDLER_NAME = "redis_facade"


def configure_logging(
    level: Optional[str] = None, json_logs: Optional[bool] = None
) -> None:
    """
    Route stdlib logging through structlog processors.

    Args:
        level: Log level name, defaults to LOG_LEVEL from settings
        json_logs: Render JSON instead of console output, defaults to LOG_JSON
    """
    if level is None or json_logs is None:
        settings = get_settings()
        level = level or settings.LOG_LEVEL
        json_logs = settings.LOG_JSON if json_logs is None else json_logs

    shared_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *shared_processors],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.set_name(HANDLER_NAME)

    root_logger = logging.getLogger()
    # Replace a handler from an earlier call, leave foreign handlers alone
    for existing in list(root_logger.handlers):
        if existing.get_name() == HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())
