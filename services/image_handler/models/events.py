# services/image_handler/models/events.py

"""
Pydantic models for the Lambda events the image handler accepts.

Two front doors invoke the handler:
- API Gateway REST proxy integration (v1 payload)
  https://docs.aws.amazon.com/apigateway/latest/developerguide/set-up-lambda-proxy-integrations.html
- Application Load Balancer target
  https://docs.aws.amazon.com/elasticloadbalancing/latest/application/lambda-functions.html

Both share one top-level shape; they differ in `requestContext`, which is
modeled as a discriminated union keyed on the presence of `elb`.
"""

from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Tag


class FrontDoor(str, Enum):
    """Routing layer that invoked the handler."""

    API_GATEWAY = "api_gateway"
    LOAD_BALANCER = "load_balancer"

    @classmethod
    def detect(cls, request_context: Any) -> "FrontDoor":
        """Classify a raw or parsed request context."""
        if isinstance(request_context, LoadBalancerRequestContext):
            return cls.LOAD_BALANCER
        if isinstance(request_context, dict) and "elb" in request_context:
            return cls.LOAD_BALANCER
        return cls.API_GATEWAY


class ApiGatewayIdentity(BaseModel):
    """API Gateway Identity object."""

    sourceIp: Optional[str] = None
    userAgent: Optional[str] = None

    model_config = ConfigDict(extra="allow", frozen=True)


class ApiGatewayRequestContext(BaseModel):
    """API Gateway Request Context object."""

    front_door: ClassVar[FrontDoor] = FrontDoor.API_GATEWAY

    requestId: Optional[str] = None
    stage: Optional[str] = None
    path: Optional[str] = None
    httpMethod: Optional[str] = None
    identity: Optional[ApiGatewayIdentity] = None

    model_config = ConfigDict(extra="allow", frozen=True)


class LoadBalancerTarget(BaseModel):
    """ALB target group reference."""

    targetGroupArn: Optional[str] = None

    model_config = ConfigDict(extra="allow", frozen=True)


class LoadBalancerRequestContext(BaseModel):
    """ALB Request Context object."""

    front_door: ClassVar[FrontDoor] = FrontDoor.LOAD_BALANCER

    # Presence of the key alone marks an ALB invocation.
    elb: Optional[LoadBalancerTarget] = None

    model_config = ConfigDict(extra="allow", frozen=True)


def _front_door_tag(value: Any) -> str:
    return FrontDoor.detect(value).value


RoutingContext = Annotated[
    Union[
        Annotated[ApiGatewayRequestContext, Tag(FrontDoor.API_GATEWAY.value)],
        Annotated[LoadBalancerRequestContext, Tag(FrontDoor.LOAD_BALANCER.value)],
    ],
    Discriminator(_front_door_tag),
]


class InboundEvent(BaseModel):
    """
    Raw invocation payload of one image request.

    Created once per invocation and never mutated. Unmodeled fields are kept.
    """

    resource: Optional[str] = None
    path: Optional[str] = None
    httpMethod: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    multiValueHeaders: Optional[Dict[str, List[str]]] = None
    queryStringParameters: Optional[Dict[str, str]] = None
    multiValueQueryStringParameters: Optional[Dict[str, List[str]]] = None
    pathParameters: Optional[Dict[str, str]] = None
    stageVariables: Optional[Dict[str, str]] = None
    requestContext: Optional[RoutingContext] = None
    body: Optional[str] = None
    isBase64Encoded: bool = False

    model_config = ConfigDict(extra="allow", frozen=True)

    @property
    def front_door(self) -> FrontDoor:
        if self.requestContext is None:
            return FrontDoor.API_GATEWAY
        return self.requestContext.front_door

    @property
    def is_load_balancer(self) -> bool:
        return self.front_door is FrontDoor.LOAD_BALANCER

    @property
    def proxy_path(self) -> Optional[str]:
        """Encoded request descriptor: the proxy path parameter, else the path itself."""
        proxy = (self.pathParameters or {}).get("proxy")
        if proxy:
            return proxy
        if self.path:
            return self.path[1:] if self.path.startswith("/") else self.path
        return None

    def summary(self) -> Dict[str, Any]:
        """Compact view for logging."""
        return {
            "httpMethod": self.httpMethod,
            "path": self.path,
            "front_door": self.front_door.value,
            "headers": self.headers,
            "queryStringParameters": self.queryStringParameters,
        }


__all__ = [
    "FrontDoor",
    "ApiGatewayIdentity",
    "ApiGatewayRequestContext",
    "LoadBalancerTarget",
    "LoadBalancerRequestContext",
    "RoutingContext",
    "InboundEvent",
]
