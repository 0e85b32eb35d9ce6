"""
Image request resolution.

Decodes the base64 JSON request descriptor carried in the request path,
checks the source bucket against the allowlist, and loads the original image
with the metadata its response headers are built from.

Descriptor format (before base64):
    {"bucket": "my-images", "key": "photos/cat.jpg", "edits": {...},
     "outputFormat": "webp", "headers": {"Vary": "Accept"}}
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, Optional

from botocore.exceptions import ClientError

from services.common.core.storage import ObjectStore, StoredObject, format_http_date
from services.image_handler.config import ImageHandlerConfig
from services.image_handler.core.exceptions import RequestResolutionError
from services.image_handler.models.events import InboundEvent
from services.image_handler.models.request import ResolvedRequest
from services.image_handler.models.result import StepResult

logger = logging.getLogger("image_handler.request_resolver")

DEFAULT_CACHE_CONTROL = "max-age=31536000,public"
GENERIC_CONTENT_TYPES = {"binary/octet-stream", "application/octet-stream"}

# (offset, signature, content type)
_MAGIC_NUMBERS = (
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"\x89PNG\r\n\x1a\n", "image/png"),
    (0, b"GIF87a", "image/gif"),
    (0, b"GIF89a", "image/gif"),
    (8, b"WEBP", "image/webp"),
    (0, b"II*\x00", "image/tiff"),
    (0, b"MM\x00*", "image/tiff"),
)


def infer_content_type(image: bytes) -> Optional[str]:
    """Guess an image content type from its leading bytes."""
    for offset, signature, content_type in _MAGIC_NUMBERS:
        if image[offset : offset + len(signature)] == signature:
            if content_type == "image/webp" and not image.startswith(b"RIFF"):
                continue
            return content_type
    return None


def decode_descriptor(encoded: Optional[str]) -> Dict[str, Any]:
    """
    Decode a base64 (standard or URL-safe, padding optional) JSON descriptor.

    Raises:
        RequestResolutionError: 400 when the path is missing or not a JSON object
    """
    if not encoded:
        raise RequestResolutionError(
            400,
            "DecodeRequest::CannotReadPath",
            "The URL path you provided could not be read. Please ensure that it is "
            "properly formed according to the solution documentation.",
        )

    normalized = encoded.strip().replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        descriptor = json.loads(base64.b64decode(normalized).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        descriptor = None

    if not isinstance(descriptor, dict):
        raise RequestResolutionError(
            400,
            "DecodeRequest::CannotDecodeRequest",
            "The image request you provided could not be decoded. Please check that your "
            "request is base64 encoded properly and refer to the documentation for "
            "additional guidance.",
        )
    return descriptor


def _valid_header_overrides(headers: Any) -> bool:
    if not isinstance(headers, dict):
        return False
    return all(
        value is None or (isinstance(value, (str, int, float)) and not isinstance(value, bool))
        for value in headers.values()
    )


def _header_overrides(headers: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """String header values; null stays None so the header is left out of the response."""
    return {str(k): None if v is None else str(v) for k, v in headers.items()}


class ImageRequestResolver:
    """
    Turns an inbound event into a ResolvedRequest.
    """

    def __init__(self, store: ObjectStore, config: ImageHandlerConfig):
        self.store = store
        self.config = config

    def setup(self, event: InboundEvent) -> StepResult[ResolvedRequest]:
        try:
            descriptor = decode_descriptor(event.proxy_path)
            self._check_shape(descriptor)
            bucket = self._resolve_bucket(descriptor)
            key = self._resolve_key(descriptor)
            original = self._fetch_original(bucket, key)
            request = self._build_request(descriptor, bucket, key, original)
        except RequestResolutionError as e:
            logger.info(f"Request resolution failed: {e}", extra={"status": e.status})
            return StepResult.fail(e.to_operational_error())

        logger.info(
            f"Resolved image request s3://{bucket}/{key}",
            extra={"edits": request.edits, "output_format": request.output_format},
        )
        return StepResult.ok(request)

    def _check_shape(self, descriptor: Dict[str, Any]) -> None:
        edits = descriptor.get("edits")
        headers = descriptor.get("headers")
        output_format = descriptor.get("outputFormat")
        if (
            (edits is not None and not isinstance(edits, dict))
            or (headers is not None and not _valid_header_overrides(headers))
            or (output_format is not None and not isinstance(output_format, str))
        ):
            raise RequestResolutionError(
                400,
                "DecodeRequest::CannotDecodeRequest",
                "The image request you provided could not be decoded. edits and headers "
                "must be JSON objects, header values strings, numbers or null, and "
                "outputFormat a string.",
            )

    def _resolve_bucket(self, descriptor: Dict[str, Any]) -> str:
        allowed = self.config.source_buckets
        bucket = descriptor.get("bucket") or (allowed[0] if allowed else None)
        if not isinstance(bucket, str) or bucket not in allowed:
            raise RequestResolutionError(
                403,
                "ImageBucket::CannotAccessBucket",
                "The bucket you specified could not be accessed. Please check that the "
                "bucket is specified in your SOURCE_BUCKETS.",
            )
        return bucket

    def _resolve_key(self, descriptor: Dict[str, Any]) -> str:
        key = descriptor.get("key")
        if not isinstance(key, str) or not key.strip():
            raise RequestResolutionError(
                404,
                "ImageEdits::CannotFindImage",
                "The image you specified could not be found. Please check your request "
                "syntax as well as the bucket you specified to ensure it exists.",
            )
        return key

    def _fetch_original(self, bucket: str, key: str) -> StoredObject:
        try:
            return self.store.get_object(bucket, key)
        except ClientError as e:
            error = e.response.get("Error", {})
            code = error.get("Code", "UnknownError")
            raise RequestResolutionError(
                404 if code in ("NoSuchKey", "404") else 500,
                code,
                error.get("Message") or str(e),
            ) from e

    def _content_type(self, descriptor: Dict[str, Any], original: StoredObject) -> Optional[str]:
        output_format = descriptor.get("outputFormat")
        if output_format:
            return f"image/{output_format}"
        if original.content_type and original.content_type not in GENERIC_CONTENT_TYPES:
            return original.content_type
        return infer_content_type(original.body) or original.content_type

    def _build_request(
        self, descriptor: Dict[str, Any], bucket: str, key: str, original: StoredObject
    ) -> ResolvedRequest:
        headers = descriptor.get("headers")
        return ResolvedRequest(
            bucket=bucket,
            key=key,
            edits=descriptor.get("edits") or {},
            output_format=descriptor.get("outputFormat"),
            original_image=original.body,
            content_type=self._content_type(descriptor, original),
            expires=format_http_date(original.expires),
            last_modified=format_http_date(original.last_modified),
            cache_control=original.cache_control or DEFAULT_CACHE_CONTROL,
            headers=_header_overrides(headers) if headers else None,
        )
