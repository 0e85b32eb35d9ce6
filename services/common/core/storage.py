"""
S3 object storage utilities.

Wraps a boto3 S3 client and returns typed objects instead of raw responses.
"""

import logging
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any, Dict, Optional, Union

import boto3
import botocore.config
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("common.storage")


class StoredObject(BaseModel):
    """An object fetched from storage together with its HTTP-relevant metadata."""

    model_config = ConfigDict(frozen=True)

    body: bytes = Field(repr=False)
    content_type: Optional[str] = None
    last_modified: Optional[datetime] = None
    expires: Optional[datetime] = None
    cache_control: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)


def init_storage(region_name: str, endpoint_url: Optional[str] = None):
    """
    Create an S3 client.

    Args:
        region_name: AWS region of the client
        endpoint_url: Optional endpoint for S3-compatible storage (path addressing is used)

    Returns:
        boto3.client: S3 client
    """
    s3_options = {"addressing_style": "path"} if endpoint_url else None
    client_config = botocore.config.Config(signature_version="s3v4", s3=s3_options)

    s3_client = boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        region_name=region_name,
        config=client_config,
    )

    logger.info(f"S3 client initialized (region={region_name}, endpoint={endpoint_url or 'aws'})")
    return s3_client


def format_http_date(value: Union[datetime, str, None]) -> Optional[str]:
    """Render a timestamp as an RFC 7231 HTTP-date. Strings are passed through."""
    if value is None or isinstance(value, str):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def _parse_expires(response: Dict[str, Any]) -> Optional[datetime]:
    expires = response.get("Expires")
    if isinstance(expires, datetime):
        return expires
    # Newer botocore releases only expose the raw header.
    raw = response.get("ExpiresString") or expires
    if not raw:
        return None
    try:
        return parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring unparsable Expires value: {raw!r}")
        return None


class ObjectStore:
    """Read access to objects in S3 (or an S3-compatible store)."""

    def __init__(self, client):
        self.client = client

    def get_object(self, bucket: str, key: str) -> StoredObject:
        """
        Fetch an object.

        Raises:
            botocore.exceptions.ClientError: when the object cannot be read
        """
        response = self.client.get_object(Bucket=bucket, Key=key)
        return StoredObject(
            body=response["Body"].read(),
            content_type=response.get("ContentType"),
            last_modified=response.get("LastModified"),
            expires=_parse_expires(response),
            cache_control=response.get("CacheControl"),
            metadata=response.get("Metadata") or {},
        )
