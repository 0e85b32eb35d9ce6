"""
Image handler Lambda entry point.

Serves images behind API Gateway (REST proxy) or an Application Load Balancer.
"""

import functools
import logging
import os
from typing import Optional

from services.common.core.lambda_logging import robust_lambda_logger
from services.common.core.logging_config import setup_logging
from services.common.core.storage import ObjectStore, init_storage
from services.image_handler.config import ImageHandlerConfig, load_config
from services.image_handler.services import (
    FallbackImageResolver,
    ImageProcessor,
    ImageRequestOrchestrator,
    ImageRequestResolver,
)
from services.image_handler.services.processor import ImageEditor

BUNDLED_LOG_CONFIG = os.path.join(os.path.dirname(__file__), "logging.yml")

logger = logging.getLogger("image_handler.lambda")


def build_orchestrator(
    config: ImageHandlerConfig, editor: Optional[ImageEditor] = None
) -> ImageRequestOrchestrator:
    """Wire the pipeline against S3."""
    store = ObjectStore(init_storage(config.AWS_REGION, config.S3_ENDPOINT))
    return ImageRequestOrchestrator(
        config=config,
        resolver=ImageRequestResolver(store, config),
        processor=ImageProcessor(editor),
        fallback=FallbackImageResolver(store, config),
    )


@functools.lru_cache(maxsize=None)
def get_orchestrator() -> ImageRequestOrchestrator:
    """Build the orchestrator once per Lambda execution environment."""
    config = load_config()
    setup_logging(config.LOG_CONFIG_PATH or BUNDLED_LOG_CONFIG)
    logger.info(
        "Image handler initialized",
        extra={
            "cors_enabled": config.cors_enabled,
            "fallback_enabled": config.fallback_enabled,
            "source_buckets": config.source_buckets,
        },
    )
    return build_orchestrator(config)


@robust_lambda_logger(service_name="image-handler")
def lambda_handler(event, context):
    return get_orchestrator().handle_event(event).to_lambda()
