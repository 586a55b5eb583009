"""Logging setup with a per-request correlation id."""

import contextvars
import logging
from typing import Optional
from uuid import uuid4

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [req:%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Inject request_id into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get("-")
        return True


def set_request_id(value: Optional[str] = None) -> str:
    """Set (or generate) the current request id for logging."""
    request_id = value or uuid4().hex
    _request_id.set(request_id)
    return request_id


def get_request_id() -> str:
    return _request_id.get("-")


def configure_logging(level: str = "INFO") -> None:
    """Attach the request id filter and format to the root and uvicorn handlers."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig()
    root.setLevel(level.upper())

    formatter = logging.Formatter(LOG_FORMAT)
    for name in (None, "uvicorn", "uvicorn.error"):
        for handler in logging.getLogger(name).handlers:
            handler.addFilter(RequestIdFilter())
            handler.setFormatter(formatter)

    # access lines keep uvicorn's format (client address, request line)
    for handler in logging.getLogger("uvicorn.access").handlers:
        handler.addFilter(RequestIdFilter())
