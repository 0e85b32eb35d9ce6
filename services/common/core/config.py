"""
Common Configuration
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class BaseAppConfig(BaseSettings):
    """
    Common application settings.
    """

    LOG_LEVEL: str = Field(default="INFO", description="Log level")

    # ===== AWS Defaults =====
    AWS_REGION: str = Field(default="us-east-1", description="Region used for AWS clients")
    S3_ENDPOINT: Optional[str] = Field(
        default=None, description="Endpoint override for S3-compatible storage"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )
