"""
Default fallback image.

Serves a statically configured image when the primary pipeline fails, so
clients get a picture instead of a broken-image icon.
"""

import base64
import logging
from typing import Optional

from services.common.core.storage import ObjectStore, format_http_date
from services.image_handler.config import ImageHandlerConfig
from services.image_handler.core.headers import build_headers, merge_headers
from services.image_handler.models.result import HttpResponse, OperationalError

logger = logging.getLogger("image_handler.fallback")

# The fallback image is immutable regardless of the failed request's cache policy.
FALLBACK_CACHE_CONTROL = "max-age=31536000,public"


class FallbackImageResolver:
    """
    Builds the degraded response from DEFAULT_FALLBACK_IMAGE_BUCKET/KEY.

    Callers check `config.fallback_enabled` before calling try_fallback.
    """

    def __init__(self, store: ObjectStore, config: ImageHandlerConfig):
        self.store = store
        self.config = config

    def try_fallback(
        self, is_load_balancer: bool, primary_error: OperationalError
    ) -> Optional[HttpResponse]:
        """
        Fetch the fallback image and wrap it in a response.

        Returns:
            The response (status of the primary error, or 500), or None when
            the fallback image could not be served. Never raises.
        """
        bucket = self.config.DEFAULT_FALLBACK_IMAGE_BUCKET
        key = self.config.DEFAULT_FALLBACK_IMAGE_KEY
        try:
            fallback = self.store.get_object(bucket, key)
            body = base64.b64encode(fallback.body).decode("utf-8")
            headers = merge_headers(
                build_headers(self.config, is_error=False, is_load_balancer=is_load_balancer),
                {
                    "Content-Type": fallback.content_type,
                    "Last-Modified": format_http_date(fallback.last_modified),
                    "Cache-Control": FALLBACK_CACHE_CONTROL,
                },
            )
        except Exception as e:
            logger.error(
                f"Error occurred while getting the default fallback image. {e}",
                exc_info=True,
                extra={"bucket": bucket, "key": key},
            )
            return None

        logger.info(
            f"Serving default fallback image s3://{bucket}/{key}",
            extra={"primary_error": primary_error.to_body()},
        )
        return HttpResponse(
            statusCode=primary_error.status or 500,
            isBase64Encoded=True,
            headers=headers,
            body=body,
        )
