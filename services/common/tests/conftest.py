import urllib.request

import pytest


class _AcceptedResponse:
    """Minimal urlopen response: VictoriaLogs accepted the line."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def read(self):
        return b""


@pytest.fixture(autouse=True)
def _no_log_shipping(monkeypatch):
    """Keep VictoriaLogsHandler off the network; tests that inspect requests patch urlopen again."""
    monkeypatch.setattr(urllib.request, "urlopen", lambda *args, **kwargs: _AcceptedResponse())
