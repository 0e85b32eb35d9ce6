"""
Response header policy.

CORS and content headers for image responses. Load balancer targets must not
send Access-Control-Allow-Credentials, API Gateway responses always do.
"""

from typing import Dict, Mapping, Optional

from services.image_handler.config import ImageHandlerConfig

JSON_CONTENT_TYPE = "application/json"


def build_headers(
    config: ImageHandlerConfig, is_error: bool = False, is_load_balancer: bool = False
) -> Dict[str, str]:
    """
    Build the base header set of a response.

    Args:
        config: CORS settings snapshot
        is_error: Whether the response carries a JSON error body
        is_load_balancer: Whether the request came through an ALB

    Returns:
        A new header dict
    """
    headers = {
        "Access-Control-Allow-Methods": "GET",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
    }
    if not is_load_balancer:
        headers["Access-Control-Allow-Credentials"] = "true"
    if config.cors_enabled:
        headers["Access-Control-Allow-Origin"] = config.CORS_ORIGIN
    if is_error:
        headers["Content-Type"] = JSON_CONTENT_TYPE
    return headers


def merge_headers(*layers: Optional[Mapping[str, Optional[str]]]) -> Dict[str, str]:
    """
    Merge header mappings in order; later layers win.

    A None value removes the header, so unset attributes produce no header.
    """
    merged: Dict[str, str] = {}
    for layer in layers:
        for name, value in (layer or {}).items():
            if value is None:
                merged.pop(name, None)
            else:
                merged[name] = str(value)
    return merged
