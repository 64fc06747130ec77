"""Structured logging configuration using structlog."""

import logging
import re
import sys

import structlog

# Google API keys: "AIza" followed by 35 URL-safe characters
_GOOGLE_KEY_PATTERN = re.compile(r"AIza[0-9A-Za-z_-]{35}")
# Telegram bot tokens: <bot_id>:<token>
_BOT_TOKEN_PATTERN = re.compile(r"(\d{8,12}:[A-Za-z0-9_-]{35})")


def redact_secrets(value: str) -> str:
    """Replace API keys and bot tokens in a string with placeholders."""
    value = _GOOGLE_KEY_PATTERN.sub("<API_KEY_REDACTED>", value)
    return _BOT_TOKEN_PATTERN.sub("<BOT_TOKEN_REDACTED>", value)


class SecretRedactingFilter(logging.Filter):
    """Filter that redacts API keys and bot tokens from log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact secrets from log message and arguments."""
        if record.msg and isinstance(record.msg, str):
            record.msg = redact_secrets(record.msg)
        if record.args:
            record.args = tuple(
                redact_secrets(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


def _redact_secrets(
    logger: logging.Logger, method_name: str, event_dict: dict
) -> dict:
    """Structlog processor to redact secrets from event dictionaries."""
    for key, value in list(event_dict.items()):
        if isinstance(value, str):
            event_dict[key] = redact_secrets(value)
    return event_dict


def setup_logging(log_level: str = "INFO") -> None:
    """Configure structured logging for the application."""
    secret_filter = SecretRedactingFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    root_logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, log_level.upper()))
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(secret_filter)
    root_logger.addHandler(handler)

    # httpx logs full request URLs, including the geocoder's key= parameter
    for logger_name in ("httpx", "httpcore", "telegram", "uvicorn.access"):
        lib_logger = logging.getLogger(logger_name)
        lib_logger.addFilter(secret_filter)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
