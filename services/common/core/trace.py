"""
X-Ray trace header handling.

    X-Amzn-Trace-Id: Root=1-<epoch hex>-<24 hex>;Parent=<16 hex>;Sampled=<0|1>
"""

import secrets
import time
from collections.abc import Mapping
from typing import Any, Dict, Optional

TRACE_HEADER = "X-Amzn-Trace-Id"


def _fields(header: str) -> Dict[str, str]:
    fields = {}
    for part in header.split(";"):
        name, sep, value = part.partition("=")
        if sep:
            fields[name.strip()] = value.strip()
    return fields


class TraceId:
    """One trace header value, split into root, parent and sampling decision."""

    def __init__(self, root: str, parent: Optional[str] = None, sampled: str = "1"):
        self.root = root
        self.parent = parent
        self.sampled = sampled

    @classmethod
    def generate(cls) -> "TraceId":
        return cls(root=f"1-{int(time.time()):08x}-{secrets.token_hex(12)}")

    @classmethod
    def parse(cls, header: str) -> "TraceId":
        """Parse a header value; a bare `1-...-...` root is accepted as well."""
        fields = _fields(header)
        root = fields.get("Root", "")
        if not fields and "-" in header:
            root = header.strip()
        return cls(root=root, parent=fields.get("Parent"), sampled=fields.get("Sampled", "1"))

    @classmethod
    def from_headers(cls, headers: Any) -> Optional["TraceId"]:
        """
        Look up the trace header case-insensitively.

        Returns None unless `headers` is a mapping holding a non-empty string value.
        """
        if not isinstance(headers, Mapping):
            return None
        wanted = TRACE_HEADER.lower()
        for name, value in headers.items():
            if isinstance(name, str) and name.lower() == wanted:
                return cls.parse(value) if isinstance(value, str) and value else None
        return None

    def __str__(self) -> str:
        parts = [f"Root={self.root}"]
        if self.parent:
            parts.append(f"Parent={self.parent}")
        if self.sampled:
            parts.append(f"Sampled={self.sampled}")
        return ";".join(parts)
