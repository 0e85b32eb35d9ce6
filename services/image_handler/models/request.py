"""
Resolved image request model.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResolvedRequest(BaseModel):
    """
    Validated, decoded form of an image request, ready for processing.

    The response-facing attributes keep the names of the headers they feed
    (ContentType, Expires, LastModified, CacheControl) as aliases.
    """

    bucket: str
    key: str
    edits: Dict[str, Any] = Field(default_factory=dict)
    output_format: Optional[str] = Field(None, alias="outputFormat")
    original_image: bytes = Field(default=b"", repr=False)

    content_type: Optional[str] = Field(None, alias="ContentType")
    expires: Optional[str] = Field(None, alias="Expires")
    last_modified: Optional[str] = Field(None, alias="LastModified")
    cache_control: Optional[str] = Field(None, alias="CacheControl")

    # Extra response headers; applied last and win over every other header. None drops one.
    headers: Optional[Dict[str, Optional[str]]] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def requires_editing(self) -> bool:
        return bool(self.edits) or bool(self.output_format)

    def response_headers(self) -> Dict[str, Optional[str]]:
        """Header values derived from the request, in the order they are applied."""
        return {
            "Content-Type": self.content_type,
            "Expires": self.expires,
            "Last-Modified": self.last_modified,
            "Cache-Control": self.cache_control,
        }
