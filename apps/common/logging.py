"""
Logging utilities for the storefront service.

- RequestIDFilter: request correlation for every log record
- StorefrontJSONFormatter: structured JSON output for prod/staging
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import UTC, datetime

# Thread-local storage for request context
_request_context = threading.local()


# =============================================================================
# REQUEST CONTEXT FUNCTIONS
# =============================================================================


def set_request_id(request_id: str) -> None:
    """Set the current request ID in thread-local storage."""
    _request_context.request_id = request_id


def get_request_id() -> str | None:
    """Get the current request ID from thread-local storage."""
    return getattr(_request_context, "request_id", None)


def set_request_user(user_id: str | None) -> None:
    _request_context.user_id = user_id


def clear_request_context() -> None:
    """Clear request context for the current thread"""
    for attr in ["request_id", "user_id"]:
        if hasattr(_request_context, attr):
            delattr(_request_context, attr)


# =============================================================================
# FILTERS AND FORMATTERS
# =============================================================================


class RequestIDFilter(logging.Filter):
    """
    Add request ID and user context to log records.

    Injects the request ID from thread-local storage into every record,
    enabling request tracing across logs.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = getattr(_request_context, "request_id", "-")  # type: ignore[attr-defined]
        if not hasattr(record, "user_id"):
            record.user_id = getattr(_request_context, "user_id", None)  # type: ignore[attr-defined]
        return True


class ServiceNameFilter(logging.Filter):
    """Inject a fixed service tag into every log record."""

    def __init__(self, service_name: str = "SHOP") -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        setattr(record, "service_name", self.service_name)  # noqa: B010
        return True


class StorefrontJSONFormatter(logging.Formatter):
    """Structured JSON log formatter for prod/staging environments."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-" * 36),
            "user_id": getattr(record, "user_id", None),
            "service": "storefront",
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)
