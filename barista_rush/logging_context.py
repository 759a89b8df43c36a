"""Correlation ID logging context for tracing one customer across modules.

Provides a customer-aware logger that attaches the active customer's
instance id to every log record, making it easy to follow a single
customer through activation, capture, choice and handoff.

Usage:
    from barista_rush.logging_context import get_session_logger, set_customer_id

    set_customer_id("customer-2")
    logger = get_session_logger(__name__)
    logger.info("Opening prompt sent")  # record.customer_id == "customer-2"
"""

import logging
from contextvars import ContextVar

NO_CUSTOMER = "NO_CUSTOMER"

_customer_id: ContextVar[str] = ContextVar("customer_id", default=NO_CUSTOMER)


def set_customer_id(customer_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _customer_id.set(customer_id)


def clear_customer_id() -> None:
    """Reset the correlation ID once no customer is active."""
    _customer_id.set(NO_CUSTOMER)


def get_customer_id() -> str:
    """Retrieve the current correlation ID."""
    return _customer_id.get()


class CustomerIdFilter(logging.Filter):
    """Injects customer_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.customer_id = _customer_id.get()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """Return a logger with the CustomerIdFilter attached.

    The filter adds ``customer_id`` to each record so formatters can
    include ``%(customer_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CustomerIdFilter) for f in logger.filters):
        logger.addFilter(CustomerIdFilter())
    return logger
