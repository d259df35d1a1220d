"""
Logging setup for the auth service.

Records carry the request's correlation id (bound by CorrelationIdMiddleware)
and whatever structured fields the call passed via ``extra=``. Production
emits one JSON object per line; development emits a short text line.

Credential material never reaches a handler: extra fields named in
SENSITIVE_FIELDS are replaced with a marker by the formatters.

Usage:
    from auth_manager.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("User registered", extra={"user_id": str(uid), "role": role})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

AUDIT_LOGGER_NAME = "auth_manager.audit"
REDACTED = "[redacted]"
SENSITIVE_FIELDS = frozenset({"password", "password_hash", "token", "signing_key"})

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Attributes every LogRecord has; anything else came in through extra=
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "correlation_id"}


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


class CorrelationIdFilter(logging.Filter):
    """Stamp each record with the current correlation id, or "-" outside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"  # type: ignore[attr-defined]
        return True


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Structured fields passed via extra=, with secrets masked."""
    fields: Dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_ATTRS or value is None:
            continue
        fields[key] = REDACTED if key in SENSITIVE_FIELDS else value
    return fields


class JsonFormatter(logging.Formatter):
    """One JSON object per record for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.name == AUDIT_LOGGER_NAME:
            log_obj["audit"] = True

        corr_id = getattr(record, "correlation_id", "-")
        if corr_id != "-":
            log_obj["correlation_id"] = corr_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in extra_fields(record).items():
            log_obj[key] = value

        return json.dumps(log_obj, default=str)


class DevFormatter(logging.Formatter):
    """Readable single line with extra fields appended as key=value."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s %(levelname)-5s [%(name)s] corr=%(correlation_id)s %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = extra_fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in sorted(fields.items()))
        return line


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure application-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: 'production' selects JSON output
        debug: If True, use DEBUG level regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(JsonFormatter() if environment == "production" else DevFormatter())
    root.addHandler(handler)

    # Login outcomes are kept even when the app runs quieter than INFO
    logging.getLogger(AUDIT_LOGGER_NAME).setLevel(min(level, logging.INFO))

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; use extra={} for structured fields."""
    return logging.getLogger(name)
