"""
Custom exception classes.

Raised inside collaborators and converted to OperationalError at the step
boundary; they never reach the orchestrator as exceptions.
"""

from typing import Optional

from services.image_handler.models.result import ErrorKind, OperationalError


class ImageHandlerError(Exception):
    """Base exception class for image handling."""

    kind = ErrorKind.UNCLASSIFIED

    def __init__(self, status: Optional[int], code: str, message: str):
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")

    def to_operational_error(self) -> OperationalError:
        return OperationalError(
            kind=self.kind, status=self.status, code=self.code, message=self.message
        )


class RequestResolutionError(ImageHandlerError):
    """Raised when the request descriptor cannot be decoded or its image located."""

    kind = ErrorKind.RESOLUTION


class ImageProcessingError(ImageHandlerError):
    """Raised when the image cannot be transformed or returned."""

    kind = ErrorKind.PROCESSING


def unclassified_error(
    exc: BaseException, kind: ErrorKind = ErrorKind.UNCLASSIFIED
) -> OperationalError:
    """Wrap an unexpected exception. No status is attached, so it maps to a generic 500."""
    return OperationalError(kind=kind, status=None, code=type(exc).__name__, message=str(exc))
