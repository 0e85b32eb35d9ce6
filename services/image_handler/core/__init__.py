"""
Core logic package.

Provides header policy, the exception hierarchy and local event builders.
"""

from .event_builder import EventBuilder, LoadBalancerEventBuilder, V1ProxyEventBuilder
from .exceptions import ImageHandlerError, ImageProcessingError, RequestResolutionError
from .headers import build_headers, merge_headers

__all__ = [
    "EventBuilder",
    "LoadBalancerEventBuilder",
    "V1ProxyEventBuilder",
    "ImageHandlerError",
    "ImageProcessingError",
    "RequestResolutionError",
    "build_headers",
    "merge_headers",
]
