"""Request-scoped logging context.

Attaches a request ID and the tenant being served to every log record so
an availability check or a checkout attempt can be traced across the
resolver, the idempotency service and the key store.

Usage:
    from storefront.logging_context import get_request_logger, set_request_id

    set_request_id("req-abc123")
    set_tenant_id("tenant_123")
    logger = get_request_logger(__name__)
    logger.info("Checking availability")
"""

import logging
from contextvars import ContextVar

_request_id: ContextVar[str] = ContextVar("request_id", default="NO_REQUEST_ID")
_tenant_id: ContextVar[str] = ContextVar("tenant_id", default="NO_TENANT")


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


def set_tenant_id(tenant_id: str) -> None:
    """Set the tenant served by the current context."""
    _tenant_id.set(tenant_id)


def get_tenant_id() -> str:
    return _tenant_id.get()


class RequestContextFilter(logging.Filter):
    """Injects request_id and tenant_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        record.tenant_id = _tenant_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestContextFilter attached.

    The filter adds ``request_id`` and ``tenant_id`` to each record so
    formatters can include ``%(request_id)s`` and ``%(tenant_id)s``.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestContextFilter) for f in logger.filters):
        logger.addFilter(RequestContextFilter())
    return logger
