"""
Result models.

Components hand results to each other by return value: a StepResult carries
either a value or an OperationalError, and HttpResponse is the single
output of an invocation.
"""

from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")

INTERNAL_ERROR_MESSAGE = "Internal error. Please contact the system administrator."
INTERNAL_ERROR_CODE = "InternalError"


class ErrorKind(str, Enum):
    RESOLUTION = "resolution"
    PROCESSING = "processing"
    FALLBACK = "fallback"
    UNCLASSIFIED = "unclassified"


class OperationalError(BaseModel):
    """
    A tagged failure.

    `status` is the HTTP status to answer with; None marks an internal,
    unclassified failure that is reported as a generic 500.
    """

    kind: ErrorKind
    status: Optional[int] = None
    code: Optional[str] = None
    message: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def is_classified(self) -> bool:
        return self.status is not None

    def to_body(self) -> Dict[str, Any]:
        """Client-facing JSON body. The kind tag stays internal."""
        return self.model_dump(include={"status", "code", "message"}, exclude_none=True)


class StepResult(BaseModel, Generic[T]):
    """Outcome of one pipeline step: exactly one of value or error is set."""

    value: Optional[T] = None
    error: Optional[OperationalError] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.value is None) == (self.error is None):
            raise ValueError("StepResult needs exactly one of value or error")
        return self

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, value: T) -> "StepResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: OperationalError) -> "StepResult[T]":
        return cls(error=error)


class HttpResponse(BaseModel):
    """
    Lambda proxy response, understood by both API Gateway and ALB.
    """

    statusCode: int
    isBase64Encoded: bool = False
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""

    def to_lambda(self) -> Dict[str, Any]:
        return self.model_dump()
