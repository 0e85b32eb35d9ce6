"""
Image Request Orchestrator - Service Layer

Standardizes the flow: InboundEvent -> ResolvedRequest -> payload -> HttpResponse.
This is the single recovery boundary of an invocation: every failure ends in
a fallback image or a structured JSON error response.
"""

import json
import logging
from typing import Any, Callable, Mapping, Optional, Protocol, TypeVar

from pydantic import ValidationError

from services.image_handler.config import ImageHandlerConfig
from services.image_handler.core.exceptions import unclassified_error
from services.image_handler.core.headers import build_headers, merge_headers
from services.image_handler.models.events import FrontDoor, InboundEvent
from services.image_handler.models.request import ResolvedRequest
from services.image_handler.models.result import (
    INTERNAL_ERROR_CODE,
    INTERNAL_ERROR_MESSAGE,
    ErrorKind,
    HttpResponse,
    OperationalError,
    StepResult,
)
from services.image_handler.services.fallback import FallbackImageResolver

logger = logging.getLogger("image_handler.orchestrator")

T = TypeVar("T")


class RequestResolver(Protocol):
    def setup(self, event: InboundEvent) -> StepResult[ResolvedRequest]: ...


class Processor(Protocol):
    def process(self, request: ResolvedRequest) -> StepResult[str]: ...


class ImageRequestOrchestrator:
    """
    Orchestrates one image request from event to response.

    Acts as the Service Layer (Application Service); collaborators are injected.
    """

    def __init__(
        self,
        config: ImageHandlerConfig,
        resolver: RequestResolver,
        processor: Processor,
        fallback: Optional[FallbackImageResolver] = None,
    ):
        self.config = config
        self.resolver = resolver
        self.processor = processor
        self.fallback = fallback

    def handle_event(self, raw_event: Mapping[str, Any]) -> HttpResponse:
        """
        Validate a raw Lambda payload, then handle it. Never raises.
        """
        try:
            event = InboundEvent.model_validate(raw_event)
        except ValidationError as e:
            logger.warning(f"Rejected malformed event: {e.error_count()} validation error(s)")
            request_context = (
                raw_event.get("requestContext") if isinstance(raw_event, Mapping) else None
            )
            error = OperationalError(
                kind=ErrorKind.RESOLUTION,
                status=400,
                code="RequestTypeError",
                message="The request event could not be parsed.",
            )
            return self._recover(FrontDoor.detect(request_context), error)

        return self.handle(event)

    def handle(self, event: InboundEvent) -> HttpResponse:
        """
        Process an inbound event into an HttpResponse. Never raises.
        """
        try:
            return self._handle(event)
        except Exception as e:
            logger.exception(f"Unexpected failure while handling request: {e}")
            return self._error_response(event.is_load_balancer, unclassified_error(e))

    def _handle(self, event: InboundEvent) -> HttpResponse:
        front_door = event.front_door
        logger.info(
            f"Handling {event.httpMethod} {event.path} via {front_door.value}",
            extra={"event": event.summary()},
        )

        # 1. Resolve the request
        resolved = self._run_step(self.resolver.setup, event, ErrorKind.RESOLUTION)
        if not resolved.success:
            return self._recover(front_door, resolved.error)
        request = resolved.value
        logger.info(
            "Resolved request",
            extra={"request": request.model_dump(exclude={"original_image"}, by_alias=True)},
        )

        # 2. Process the image
        processed = self._run_step(self.processor.process, request, ErrorKind.PROCESSING)
        if not processed.success:
            return self._recover(front_door, processed.error)

        # 3. Assemble the response
        headers = merge_headers(
            build_headers(
                self.config,
                is_error=False,
                is_load_balancer=front_door is FrontDoor.LOAD_BALANCER,
            ),
            request.response_headers(),
            request.headers,
        )
        response = HttpResponse(
            statusCode=200, isBase64Encoded=True, headers=headers, body=processed.value
        )
        logger.info(
            f"Returning image s3://{request.bucket}/{request.key}",
            extra={"status": response.statusCode, "headers": response.headers},
        )
        return response

    def _run_step(
        self, step: Callable[[Any], StepResult[T]], argument: Any, kind: ErrorKind
    ) -> StepResult[T]:
        try:
            return step(argument)
        except Exception as e:
            # Collaborators report failures as results; anything raised is unexpected.
            logger.exception(f"Unexpected {kind.value} failure: {e}")
            return StepResult.fail(unclassified_error(e, kind))

    def _recover(self, front_door: FrontDoor, error: OperationalError) -> HttpResponse:
        is_load_balancer = front_door is FrontDoor.LOAD_BALANCER
        logger.error(
            f"Request failed ({error.kind.value}): {error.code}",
            extra={"error": error.model_dump(mode="json")},
        )

        if self.fallback is not None and self.config.fallback_enabled:
            response = self.fallback.try_fallback(is_load_balancer, error)
            if response is not None:
                return response

        return self._error_response(is_load_balancer, error)

    def _error_response(self, is_load_balancer: bool, error: OperationalError) -> HttpResponse:
        headers = build_headers(self.config, is_error=True, is_load_balancer=is_load_balancer)
        if error.is_classified:
            return HttpResponse(
                statusCode=error.status,
                isBase64Encoded=False,
                headers=headers,
                body=json.dumps(error.to_body()),
            )

        return HttpResponse(
            statusCode=500,
            isBase64Encoded=False,
            headers=headers,
            body=json.dumps(
                {"message": INTERNAL_ERROR_MESSAGE, "code": INTERNAL_ERROR_CODE, "status": 500}
            ),
        )
