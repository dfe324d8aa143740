import logging
import os
import sys

import structlog

_LOGGER_NAME = "elasto"


def configure_logging(
    log_level: str | None = None,
    json_logs: bool | None = None,
) -> None:
    """Configure structlog output for applications embedding elasto.

    Args:
        log_level:
            Minimum level. Falls back to ELASTO_LOG_LEVEL, then INFO.
        json_logs:
            Render JSON lines instead of the console format.
            Falls back to ELASTO_LOG_FORMAT=json.
    """
    level_name = (
        log_level or os.environ.get("ELASTO_LOG_LEVEL") or "INFO"
    ).upper()
    level = getattr(logging, level_name, logging.INFO)
    if json_logs is None:
        json_logs = os.environ.get("ELASTO_LOG_FORMAT", "").lower() == "json"

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    if name:
        return structlog.get_logger(f"{_LOGGER_NAME}.{name}")
    return structlog.get_logger(_LOGGER_NAME)
