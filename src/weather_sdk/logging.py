"""Logging configuration."""

import logging

import structlog

from weather_sdk.config import Settings

# Map log level names to logging module constants
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Parent of every SDK module logger
SDK_LOGGER_NAME = "weather_sdk"


def configure_logging(settings: Settings) -> None:
    """Route structlog events through the standard library logging tree.

    Events are rendered into the message of a record on the module's stdlib
    logger (``weather_sdk.sdk``, ``weather_sdk.services.cache``, ...), so the
    host application's handlers decide where they go. Only the level of the
    ``weather_sdk`` logger is set here; no handlers are installed.
    """
    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    log_level = LOG_LEVELS.get(settings.log_level.upper(), logging.INFO)
    logging.getLogger(SDK_LOGGER_NAME).setLevel(log_level)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def mask_api_key(api_key: str | None) -> str:
    """Mask an API key for logging, keeping the first and last 4 characters."""
    if api_key is None or len(api_key) < 8:
        return "***"
    return f"{api_key[:4]}****{api_key[-4:]}"
