"""
Services package.

Provides the request pipeline steps and their orchestration.
"""

from .fallback import FallbackImageResolver
from .orchestrator import ImageRequestOrchestrator
from .processor import ImageProcessor
from .request_resolver import ImageRequestResolver

__all__ = [
    "FallbackImageResolver",
    "ImageRequestOrchestrator",
    "ImageProcessor",
    "ImageRequestResolver",
]
