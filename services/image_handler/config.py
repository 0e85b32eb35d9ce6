"""
Image handler configuration definition.

Loads configuration from environment variables into an immutable Pydantic model.
The instance is built once per process and passed to every component.
"""

import sys
from typing import List, Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from services.common.core.config import BaseAppConfig

FLAG_ENABLED = "Yes"


def _is_blank(value: str) -> bool:
    return not value or not value.strip()


class ImageHandlerConfig(BaseAppConfig):
    """
    Configuration for the image handler.
    """

    # CORS
    CORS_ENABLED: str = Field(default="No", description="'Yes' emits Access-Control-Allow-Origin")
    CORS_ORIGIN: str = Field(default="*", description="Value of Access-Control-Allow-Origin")

    # Default fallback image
    ENABLE_DEFAULT_FALLBACK_IMAGE: str = Field(
        default="No", description="'Yes' serves the fallback image when processing fails"
    )
    DEFAULT_FALLBACK_IMAGE_BUCKET: str = Field(default="", description="Fallback image bucket")
    DEFAULT_FALLBACK_IMAGE_KEY: str = Field(default="", description="Fallback image object key")

    # Source images
    SOURCE_BUCKETS: str = Field(
        default="", description="Comma-separated buckets that requests may read from"
    )

    LOG_CONFIG_PATH: str = Field(default="", description="YAML logging config (bundled if empty)")

    # Local development gateway
    LOCAL_FRONT_DOOR: Literal["api_gateway", "load_balancer"] = Field(
        default="api_gateway", description="Event shape emitted by the local gateway"
    )
    LOCAL_BIND_HOST: str = Field(default="127.0.0.1", description="Local gateway listen host")
    LOCAL_BIND_PORT: int = Field(default=8000, description="Local gateway listen port")

    model_config = SettingsConfigDict(frozen=True)

    @property
    def cors_enabled(self) -> bool:
        return self.CORS_ENABLED == FLAG_ENABLED

    @property
    def fallback_enabled(self) -> bool:
        """True when the fallback flag is on and both bucket and key are non-blank."""
        return (
            self.ENABLE_DEFAULT_FALLBACK_IMAGE == FLAG_ENABLED
            and not _is_blank(self.DEFAULT_FALLBACK_IMAGE_BUCKET)
            and not _is_blank(self.DEFAULT_FALLBACK_IMAGE_KEY)
        )

    @property
    def source_buckets(self) -> List[str]:
        return [b.strip() for b in self.SOURCE_BUCKETS.split(",") if b.strip()]


def load_config() -> ImageHandlerConfig:
    """Read the configuration from the environment, failing fast on invalid values."""
    try:
        return ImageHandlerConfig()
    except Exception as e:
        sys.stderr.write(f"Failed to load configuration: {e}\n")
        raise
