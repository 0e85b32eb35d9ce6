"""
Per-invocation logging for Lambda handlers.

Every record of an invocation carries its X-Ray trace id and aws_request_id,
and buffered handlers are flushed before the execution environment freezes.
"""

import functools
import logging
import os
from collections.abc import Mapping
from typing import Any

from .logging_config import CustomJsonFormatter, VictoriaLogsHandler
from .request_context import clear_trace_id, set_request_id, set_trace_id
from .trace import TraceId

logger = logging.getLogger("common.lambda_logging")


def _bind_invocation(event: Any, context: Any) -> None:
    """Bind the trace id (event header, else a fresh one) and the Lambda request id."""
    headers = event.get("headers") if isinstance(event, Mapping) else None
    trace = TraceId.from_headers(headers if isinstance(headers, Mapping) else None)
    if trace is None or not trace.root:
        trace = TraceId.generate()
    set_trace_id(str(trace))

    request_id = getattr(context, "aws_request_id", None)
    if isinstance(request_id, str) and request_id:
        set_request_id(request_id)


def _ensure_victorialogs(root: logging.Logger, url: str, service_name: str) -> None:
    if any(isinstance(h, VictoriaLogsHandler) for h in root.handlers):
        return
    handler = VictoriaLogsHandler(
        url=url, stream_fields={"container_name": service_name, "job": "lambda"}
    )
    handler.setFormatter(CustomJsonFormatter())
    root.addHandler(handler)
    if root.getEffectiveLevel() > logging.INFO:
        root.setLevel(logging.INFO)


def robust_lambda_logger(service_name: str = "lambda"):
    """
    Decorator for Lambda handlers.

    - Binds X-Amzn-Trace-Id and aws_request_id for the duration of the call
    - Ships records to VictoriaLogs when VICTORIALOGS_URL is set
    - Flushes every root handler in finally

    Usage:
        @robust_lambda_logger(service_name="image-handler")
        def lambda_handler(event, context):
            ...
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(event, context):
            root = logging.getLogger()
            try:
                try:
                    _bind_invocation(event, context)
                except Exception:
                    logger.exception("Could not bind trace context for invocation")

                vl_url = os.getenv("VICTORIALOGS_URL")
                if vl_url:
                    _ensure_victorialogs(root, vl_url, service_name)

                return func(event, context)
            finally:
                for h in root.handlers:
                    h.flush()
                clear_trace_id()

        return wrapper

    return decorator
