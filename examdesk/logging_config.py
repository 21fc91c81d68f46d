"""
Logging configuration.

Two handler filters shape what reaches the stream:
- health probes are dropped from the uvicorn access log;
- customer access and recovery tokens are masked in every line, since
  recovery tokens travel in request paths (/customer-recover/<token>).
"""

import logging
import logging.config
import re
from typing import Any, Dict, List

HEALTH_PATHS = ("/health", "/healthz")

TOKEN_PATTERN = re.compile(r"\b(cust_|recover_)[0-9a-f]{6,}")
MASK = "********"


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for GET health probes."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        # uvicorn passes (client, method, path, http_version, status)
        args = record.args
        if isinstance(args, tuple) and len(args) >= 3:
            method, path = args[1], str(args[2]).split("?", 1)[0]
            return not (method == "GET" and path in HEALTH_PATHS)
        message = record.getMessage()
        return not ("GET" in message and any(f"{p} " in message for p in HEALTH_PATHS))


class TokenRedactionFilter(logging.Filter):
    """Mask cust_ and recover_ tokens in the rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = TOKEN_PATTERN.sub(lambda m: m.group(1) + MASK, message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _handler(formatter: str, filters: List[str]) -> Dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "formatter": formatter,
        "stream": "ext://sys.stdout",
        "filters": filters,
    }


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Build the dictConfig mapping for the API process and the CLI."""
    level = level.upper()
    loggers = {
        name: {"handlers": ["default"], "level": "INFO", "propagate": False}
        for name in ("uvicorn", "uvicorn.error")
    }
    loggers["uvicorn.access"] = {"handlers": ["access"], "level": "INFO", "propagate": False}
    loggers["examdesk"] = {"handlers": ["default"], "level": level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check": {"()": HealthCheckFilter},
            "token_redaction": {"()": TokenRedactionFilter},
        },
        "formatters": {
            "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": _handler("default", ["token_redaction"]),
            # health filter reads record.args, so it must run before redaction
            "access": _handler("access", ["health_check", "token_redaction"]),
        },
        "loggers": loggers,
        "root": {"level": level, "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(get_logging_config(level))
