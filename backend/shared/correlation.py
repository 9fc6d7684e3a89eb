"""Correlation IDs for request tracing and log records."""

import logging
import uuid
from contextvars import ContextVar

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s [%(correlation_id)s] %(message)s"


def generate_correlation_id() -> str:
    return f"corr_{uuid.uuid4().hex[:16]}"


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> None:
    correlation_id_var.set(cid)


class CorrelationIdFilter(logging.Filter):
    """Stamps the current correlation id onto every record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            handler.addFilter(CorrelationIdFilter())
