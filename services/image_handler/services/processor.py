"""
Image processing step.

Returns the requested image as base64. Pixel editing is delegated to an
injected editor; without one only unedited originals can be served.
"""

import base64
import logging
from typing import Any, Callable, Mapping, Optional

from services.image_handler.core.exceptions import ImageProcessingError
from services.image_handler.models.request import ResolvedRequest
from services.image_handler.models.result import StepResult

logger = logging.getLogger("image_handler.processor")

# (image bytes, edits, output format) -> edited image bytes
ImageEditor = Callable[[bytes, Mapping[str, Any], Optional[str]], bytes]

# Lambda caps synchronous response payloads at 6 MB.
MAX_RESPONSE_SIZE = 6 * 1024 * 1024


class ImageProcessor:
    def __init__(self, editor: Optional[ImageEditor] = None, max_size: int = MAX_RESPONSE_SIZE):
        self.editor = editor
        self.max_size = max_size

    def process(self, request: ResolvedRequest) -> StepResult[str]:
        try:
            image = self._apply_edits(request)
            encoded = base64.b64encode(image).decode("utf-8")
            if len(encoded) > self.max_size:
                raise ImageProcessingError(
                    413, "TooLargeImageException", "The converted image is too large to return."
                )
        except ImageProcessingError as e:
            logger.info(f"Image processing failed: {e}", extra={"status": e.status})
            return StepResult.fail(e.to_operational_error())

        return StepResult.ok(encoded)

    def _apply_edits(self, request: ResolvedRequest) -> bytes:
        if not request.requires_editing:
            return request.original_image

        if self.editor is None:
            raise ImageProcessingError(
                400,
                "ImageEdits::UnsupportedEdits",
                "This deployment serves original images only; edits and outputFormat are "
                "not supported.",
            )

        try:
            return self.editor(request.original_image, request.edits, request.output_format)
        except Exception as e:
            logger.exception(f"Image editor failed for s3://{request.bucket}/{request.key}")
            raise ImageProcessingError(
                500, "ImageEdits::ProcessingFailure", "The requested edits could not be applied."
            ) from e
