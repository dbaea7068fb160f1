"""structlog setup shared by the API server and the CLI."""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

import structlog

# Provider credentials that can end up inside logged URLs, headers or error text
_SECRET_PATTERNS = (
    re.compile(r"(?i)(ApiKey=)[^&\s]+"),
    re.compile(r"(?i)(sso-key\s+)\S+"),
    re.compile(r"(Bearer\s+)\S+"),
    re.compile(r"\b((?:sk|rk|whsec)_(?:live_|test_)?)\w+"),
)

_QUIET_LOGGERS = {"httpx": logging.WARNING, "httpcore": logging.WARNING, "uvicorn.access": logging.WARNING}


def _redact(value: str) -> str:
    for pattern in _SECRET_PATTERNS:
        value = pattern.sub(r"\1[redacted]", value)
    return value


def redact_secrets(
    _logger: Any, _method: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Mask registrar, hosting and Stripe credentials in string values."""
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = _redact(value)
    return event_dict


def configure_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """Configure structlog, and stdlib logging for httpx and uvicorn.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR.
        log_format: "console" for a terminal, "json" for log collectors.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_secrets,
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*shared, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *shared, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs full request URLs at INFO, and Namecheap puts its API key in the query
    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, quiet_level))
