import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict

from services.common.core.request_context import get_request_id
from services.image_handler.models.context import InputContext

PROXY_RESOURCE = "/{proxy+}"
LOCAL_TARGET_GROUP_ARN = (
    "arn:aws:elasticloadbalancing:us-east-1:000000000000:targetgroup/local-image-handler/0"
)


class EventBuilder(ABC):
    @abstractmethod
    def build(self, context: InputContext) -> Dict[str, Any]:
        """
        Build a Lambda event dictionary from an InputContext.
        """
        pass


class V1ProxyEventBuilder(EventBuilder):
    """API Gateway V1 (REST API) proxy integration event builder."""

    def __init__(self, stage: str = "image"):
        self.stage = stage

    def build(self, context: InputContext) -> Dict[str, Any]:
        proxy = context.path.lstrip("/")
        request_id = get_request_id() or str(uuid.uuid4())

        return {
            "resource": PROXY_RESOURCE,
            "path": context.path,
            "httpMethod": context.method,
            "headers": context.headers,
            "multiValueHeaders": context.multi_headers,
            "queryStringParameters": context.query_params or None,
            "multiValueQueryStringParameters": context.multi_query_params or None,
            "pathParameters": {"proxy": proxy} if proxy else None,
            "stageVariables": None,
            "requestContext": {
                "resourcePath": PROXY_RESOURCE,
                "httpMethod": context.method,
                "path": f"/{self.stage}{context.path}",
                "protocol": "HTTP/1.1",
                "stage": self.stage,
                "requestId": request_id,
                "identity": {
                    "sourceIp": context.source_ip,
                    "userAgent": context.headers.get("user-agent"),
                },
            },
            "body": None,
            "isBase64Encoded": False,
        }


class LoadBalancerEventBuilder(EventBuilder):
    """Application Load Balancer target event builder."""

    def __init__(self, target_group_arn: str = LOCAL_TARGET_GROUP_ARN):
        self.target_group_arn = target_group_arn

    def build(self, context: InputContext) -> Dict[str, Any]:
        # ALB delivers single-valued maps unless multi-value headers are enabled.
        return {
            "requestContext": {"elb": {"targetGroupArn": self.target_group_arn}},
            "httpMethod": context.method,
            "path": context.path,
            "queryStringParameters": context.query_params,
            "headers": context.headers,
            "body": "",
            "isBase64Encoded": False,
        }


def event_builder_for(front_door: str) -> EventBuilder:
    """Pick the builder matching a LOCAL_FRONT_DOOR setting."""
    if front_door == "load_balancer":
        return LoadBalancerEventBuilder()
    return V1ProxyEventBuilder()
