"""Request ID logging for booking commands.

Each AppointmentService command runs inside ``request_scope()``, which
gives it a fresh ``REQ-xxxxxx`` id. Engine loggers and the root handlers
carry a RequestIdFilter, so every line written while the command runs
shows the same id, and the id is handed back on the BookingOutcome.

Usage:
    from clinic_scheduler.logging_context import get_request_logger, request_scope

    logger = get_request_logger(__name__)
    with request_scope() as request_id:
        logger.info("Validating booking")  # ... [REQ-1a2b3c] INFO: Validating booking
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

NO_REQUEST_ID = "-"

REQUEST_LOG_FORMAT = "%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)


def get_request_id() -> str:
    return _request_id.get()


@contextmanager
def request_scope() -> Iterator[str]:
    """Run a block under a fresh request id, restoring the outer id afterwards."""
    token = _request_id.set(f"REQ-{uuid.uuid4().hex[:6]}")
    try:
        yield _request_id.get()
    finally:
        _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    """Stamps ``request_id`` on records that do not carry one yet."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def install_request_id_filter(handler: logging.Handler) -> None:
    """Let ``handler`` format REQUEST_LOG_FORMAT for records from any logger."""
    if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
        handler.addFilter(RequestIdFilter())


def get_request_logger(name: str) -> logging.Logger:
    """``logging.getLogger(name)`` with a RequestIdFilter attached.

    Records from this logger carry ``request_id`` before they reach any
    handler, including ones (such as pytest's caplog) that never went
    through ``install_request_id_filter``.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
