"""
Per-request context used to tag log records and error details.
"""

from contextvars import ContextVar
from uuid import uuid4

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return _request_id.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID, reusing an incoming one or generating a new one."""
    if not request_id:
        request_id = uuid4().hex[:12]
    _request_id.set(request_id)
    return request_id


def with_request_id(message: str) -> str:
    """Prefix a message with the current request ID when one is set."""
    request_id = get_request_id()
    if request_id:
        return f"[Request ID: {request_id}] {message}"
    return message
