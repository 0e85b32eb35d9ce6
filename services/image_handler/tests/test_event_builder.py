from unittest.mock import patch

from services.image_handler.core.event_builder import (
    LoadBalancerEventBuilder,
    V1ProxyEventBuilder,
    event_builder_for,
)
from services.image_handler.models.context import InputContext
from services.image_handler.models.events import FrontDoor, InboundEvent


def _context(**overrides) -> InputContext:
    values = {
        "method": "GET",
        "path": "/eyJrZXkiOiJhLmpwZyJ9",
        "headers": {"user-agent": "test-agent", "accept": "image/*"},
        "multi_headers": {"user-agent": ["test-agent"], "accept": ["image/*"]},
        "query_params": {"v": "1"},
        "multi_query_params": {"v": ["1"]},
        "source_ip": "10.0.0.5",
    }
    values.update(overrides)
    return InputContext(**values)


def test_v1_event_builder_build():
    """V1ProxyEventBuilder emits a REST proxy event the handler can parse."""
    builder = V1ProxyEventBuilder(stage="image")

    with patch(
        "services.image_handler.core.event_builder.get_request_id", return_value="test-req-id"
    ):
        event = builder.build(_context())

    assert event["resource"] == "/{proxy+}"
    assert event["path"] == "/eyJrZXkiOiJhLmpwZyJ9"
    assert event["httpMethod"] == "GET"
    assert event["pathParameters"] == {"proxy": "eyJrZXkiOiJhLmpwZyJ9"}
    assert event["queryStringParameters"] == {"v": "1"}
    assert event["multiValueHeaders"]["accept"] == ["image/*"]

    context = event["requestContext"]
    assert context["requestId"] == "test-req-id"
    assert context["stage"] == "image"
    assert context["path"] == "/image/eyJrZXkiOiJhLmpwZyJ9"
    assert context["identity"] == {"sourceIp": "10.0.0.5", "userAgent": "test-agent"}

    parsed = InboundEvent.model_validate(event)
    assert parsed.front_door is FrontDoor.API_GATEWAY
    assert parsed.proxy_path == "eyJrZXkiOiJhLmpwZyJ9"


def test_v1_event_builder_empty_query_and_root_path():
    event = V1ProxyEventBuilder().build(_context(path="/", query_params={}, multi_query_params={}))

    assert event["queryStringParameters"] is None
    assert event["multiValueQueryStringParameters"] is None
    assert event["pathParameters"] is None


def test_load_balancer_event_builder_build():
    builder = LoadBalancerEventBuilder(target_group_arn="arn:aws:elasticloadbalancing:tg/test")

    event = builder.build(_context())

    assert event["requestContext"] == {"elb": {"targetGroupArn": "arn:aws:elasticloadbalancing:tg/test"}}
    assert "pathParameters" not in event

    parsed = InboundEvent.model_validate(event)
    assert parsed.is_load_balancer is True
    assert parsed.proxy_path == "eyJrZXkiOiJhLmpwZyJ9"


def test_event_builder_for():
    assert isinstance(event_builder_for("load_balancer"), LoadBalancerEventBuilder)
    assert isinstance(event_builder_for("api_gateway"), V1ProxyEventBuilder)
