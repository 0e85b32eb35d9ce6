"""
Where: services/image_handler/tests/test_main.py
What: Local gateway routing, trace propagation and response translation.
Why: The local gateway must hand the orchestrator the same events AWS would.
"""

import base64
import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from services.image_handler.core.event_builder import LoadBalancerEventBuilder, V1ProxyEventBuilder
from services.image_handler.main import create_app
from services.image_handler.models.result import HttpResponse
from services.image_handler.tests.fakes import JPEG_BYTES

TRACE_ID = "Root=1-60a7e834-4f95d48e078d6239767e2ca6;Sampled=1"


@pytest.fixture
def orchestrator():
    mock = MagicMock()
    mock.handle_event.return_value = HttpResponse(
        statusCode=200,
        isBase64Encoded=True,
        headers={"Content-Type": "image/jpeg", "Cache-Control": "max-age=60"},
        body=base64.b64encode(JPEG_BYTES).decode(),
    )
    return mock


def _client(orchestrator, builder=None) -> TestClient:
    app = create_app(lambda: orchestrator, builder or V1ProxyEventBuilder())
    return TestClient(app, raise_server_exceptions=False)


def test_health(orchestrator):
    response = _client(orchestrator).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    orchestrator.handle_event.assert_not_called()


def test_image_is_decoded_and_headers_forwarded(orchestrator):
    response = _client(orchestrator).get("/eyJrZXkiOiJhLmpwZyJ9?v=1")

    assert response.status_code == 200
    assert response.content == JPEG_BYTES
    assert response.headers["cache-control"] == "max-age=60"

    event = orchestrator.handle_event.call_args.args[0]
    assert event["pathParameters"] == {"proxy": "eyJrZXkiOiJhLmpwZyJ9"}
    assert event["queryStringParameters"] == {"v": "1"}


def test_load_balancer_events(orchestrator):
    _client(orchestrator, LoadBalancerEventBuilder()).get("/eyJrZXkiOiJhLmpwZyJ9")

    event = orchestrator.handle_event.call_args.args[0]
    assert "elb" in event["requestContext"]


def test_error_body_is_returned_as_is(orchestrator):
    body = json.dumps({"status": 403, "code": "ImageBucket::CannotAccessBucket", "message": "no"})
    orchestrator.handle_event.return_value = HttpResponse(
        statusCode=403, headers={"Content-Type": "application/json"}, body=body
    )

    response = _client(orchestrator).get("/abc")

    assert response.status_code == 403
    assert response.json()["code"] == "ImageBucket::CannotAccessBucket"


def test_trace_id_is_propagated(orchestrator):
    response = _client(orchestrator).get("/abc", headers={"X-Amzn-Trace-Id": TRACE_ID})

    assert response.headers["X-Amzn-Trace-Id"] == TRACE_ID
    assert response.headers["x-amzn-RequestId"]


def test_trace_id_is_generated_when_missing(orchestrator):
    response = _client(orchestrator).get("/abc")

    assert response.headers["X-Amzn-Trace-Id"].startswith("Root=1-")


def test_unexpected_failure_uses_internal_error_body(orchestrator):
    orchestrator.handle_event.side_effect = RuntimeError("boom")

    response = _client(orchestrator).get("/abc")

    assert response.status_code == 500
    assert response.json() == {
        "message": "Internal error. Please contact the system administrator.",
        "code": "InternalError",
        "status": 500,
    }
