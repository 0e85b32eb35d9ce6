"""
Ids of the invocation being served.

Held in ContextVars so log records pick them up without threading them
through every call (see CustomJsonFormatter).
"""

import uuid
from contextvars import ContextVar
from typing import Optional

from .trace import TraceId

_trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)
_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_trace_id() -> Optional[str]:
    return _trace_id_var.get()


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def set_trace_id(header_value: str) -> str:
    """Store an X-Amzn-Trace-Id value in canonical form and return it."""
    canonical = str(TraceId.parse(header_value))
    _trace_id_var.set(canonical)
    return canonical


def set_request_id(request_id: str) -> str:
    """Store the request id, e.g. the Lambda context's aws_request_id."""
    _request_id_var.set(request_id)
    return request_id


def generate_request_id() -> str:
    """Store and return a fresh UUID4 request id (local gateway requests)."""
    return set_request_id(str(uuid.uuid4()))


def clear_trace_id() -> None:
    """Forget both ids once the invocation is over."""
    _trace_id_var.set(None)
    _request_id_var.set(None)
