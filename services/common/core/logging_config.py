"""
Logging Configuration
JSON logging for the image handler, optimized for VictoriaLogs ingestion.

Provides:
- CustomJsonFormatter: JSON line formatter carrying trace/request ids
- setup_logging: YAML dictConfig loader with ${VAR} substitution
- VictoriaLogsHandler: Direct HTTP logging with stderr fallback
"""

import json
import logging
import logging.config
import os
import string
import sys
import urllib.error
import urllib.parse
import urllib.request
from datetime import datetime, timezone

import yaml

from .request_context import get_request_id, get_trace_id

# Attributes every LogRecord carries; anything else came in through `extra=`.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
    | {"message", "asctime", "taskName"}
)


class CustomJsonFormatter(logging.Formatter):
    """
    VictoriaLogs optimized JSON Formatter.

    Fields:
      - _time: ISO8601 timestamp (millisecond precision)
      - level: Log level
      - logger: Logger name (e.g. image_handler.orchestrator)
      - message: Log message
      - trace_id: X-Amzn-Trace-Id of the invocation
      - aws_request_id: Lambda request id of the invocation
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "_time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        trace_id = getattr(record, "trace_id", None) or get_trace_id()
        if trace_id:
            log_data["trace_id"] = trace_id
        request_id = getattr(record, "aws_request_id", None) or get_request_id()
        if request_id:
            log_data["aws_request_id"] = request_id

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extras may hold datetimes or models.
        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(config_path: str = "logging.yml"):
    """
    Load the YAML config, substitute environment variables, and initialize logging.
    """
    if not os.path.exists(config_path):
        logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
        return

    with open(config_path, "r", encoding="utf-8") as f:
        # Supports ${LOG_LEVEL} format.
        template = string.Template(f.read())

    mapping = os.environ.copy()
    mapping.setdefault("LOG_LEVEL", "INFO")

    config = yaml.safe_load(template.safe_substitute(mapping))
    logging.config.dictConfig(config)


class VictoriaLogsHandler(logging.Handler):
    """
    Handler that sends logs directly to VictoriaLogs over HTTP.
    On failure, falls back to stderr so CloudWatch still receives the line.
    """

    def __init__(self, url: str, stream_fields: dict = None, timeout: float = 0.5):
        super().__init__()
        self.url = url
        self.stream_fields = stream_fields or {}
        self.timeout = timeout

    def _build_url(self) -> str:
        params = [
            ("_stream_fields", ",".join(self.stream_fields.keys())),
            ("_msg_field", "message"),
            ("_time_field", "_time"),
        ]
        params.extend((k, str(v)) for k, v in self.stream_fields.items())
        return f"{self.url}?{urllib.parse.urlencode(params)}"

    def emit(self, record: logging.LogRecord):
        try:
            msg = self.formatter.format(record) if self.formatter else record.getMessage()

            try:
                log_entry = json.loads(msg)
            except json.JSONDecodeError:
                log_entry = {"message": msg, "level": record.levelname}

            # Stream fields go into the body as well as the URL params.
            for k, v in self.stream_fields.items():
                log_entry.setdefault(k, v)

            data = json.dumps(log_entry, ensure_ascii=False, default=str).encode("utf-8")
            req = urllib.request.Request(
                self._build_url(),
                data=data,
                headers={"Content-Type": "application/json"},
                method="POST",
            )

            try:
                with urllib.request.urlopen(req, timeout=self.timeout) as res:
                    res.read()
            except (OSError, urllib.error.URLError) as e:
                fallback_msg = json.dumps(
                    {
                        "fallback": "victorialogs_failed",
                        "error": str(e),
                        "original_log": log_entry,
                    },
                    ensure_ascii=False,
                    default=str,
                )
                # The process stderr, which CloudWatch collects even if sys.stderr was swapped.
                stream = getattr(sys, "__stderr__", None) or sys.stderr
                stream.write(fallback_msg + "\n")

        except Exception:
            self.handleError(record)

    def flush(self):
        pass
