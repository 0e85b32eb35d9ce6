"""
Input context model for the local development gateway.
"""

from typing import Dict, List

from pydantic import BaseModel, Field


class InputContext(BaseModel):
    """
    An HTTP request received by the local gateway, independent of FastAPI's Request.
    """

    method: str
    path: str
    headers: Dict[str, str] = Field(default_factory=dict)
    multi_headers: Dict[str, List[str]] = Field(default_factory=dict)
    query_params: Dict[str, str] = Field(default_factory=dict)
    multi_query_params: Dict[str, List[str]] = Field(default_factory=dict)
    source_ip: str = "127.0.0.1"
