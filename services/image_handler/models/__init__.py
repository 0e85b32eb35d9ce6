"""
Data model definitions package.

Aggregates Pydantic models for use in other modules.
"""

from .context import InputContext
from .events import FrontDoor, InboundEvent
from .request import ResolvedRequest
from .result import ErrorKind, HttpResponse, OperationalError, StepResult

__all__ = [
    "InputContext",
    "FrontDoor",
    "InboundEvent",
    "ResolvedRequest",
    "ErrorKind",
    "HttpResponse",
    "OperationalError",
    "StepResult",
]
