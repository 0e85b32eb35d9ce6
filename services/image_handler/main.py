"""
Local image gateway - API Gateway / ALB emulation for development

Converts plain HTTP requests into the Lambda events the image handler
receives in AWS and runs the orchestrator in process.

    uvicorn --factory services.image_handler.main:create_default_app --port 8000
"""

import base64
import logging
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import Response

from services.common.core.logging_config import setup_logging
from services.common.core.request_context import (
    clear_trace_id,
    generate_request_id,
    set_trace_id,
)
from services.common.core.trace import TRACE_HEADER, TraceId

from .config import ImageHandlerConfig, load_config
from .core.event_builder import EventBuilder, event_builder_for
from .exceptions import register_exception_handlers
from .lambda_function import BUNDLED_LOG_CONFIG, build_orchestrator
from .models.context import InputContext
from .models.result import HttpResponse
from .services.orchestrator import ImageRequestOrchestrator

logger = logging.getLogger("image_handler.gateway")


def to_input_context(request: Request) -> InputContext:
    headers = request.headers
    query = request.query_params
    return InputContext(
        method=request.method,
        path=request.url.path,
        headers=dict(headers),
        multi_headers={k: headers.getlist(k) for k in headers.keys()},
        query_params=dict(query),
        multi_query_params={k: query.getlist(k) for k in query.keys()},
        source_ip=request.client.host if request.client else "127.0.0.1",
    )


def to_fastapi_response(result: HttpResponse) -> Response:
    content = base64.b64decode(result.body) if result.isBase64Encoded else result.body.encode()
    return Response(content=content, status_code=result.statusCode, headers=result.headers)


def create_app(
    orchestrator_factory: Callable[[], ImageRequestOrchestrator],
    event_builder: EventBuilder,
) -> FastAPI:
    app = FastAPI(title="Local Image Gateway", version="1.0.0")
    register_exception_handlers(app)

    @app.middleware("http")
    async def trace_propagation_middleware(request: Request, call_next):
        """
        Middleware for Trace ID propagation and structured access logging.
        """
        start_time = time.perf_counter()

        trace = TraceId.from_headers(request.headers)
        if trace is None or not trace.root:
            trace = TraceId.generate()
        trace_id_str = set_trace_id(str(trace))
        req_id = generate_request_id()

        try:
            response = await call_next(request)
            response.headers[TRACE_HEADER] = trace_id_str
            response.headers["x-amzn-RequestId"] = req_id

            logger.info(
                f"{request.method} {request.url.path} {response.status_code}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
                    "user_agent": request.headers.get("user-agent"),
                },
            )
            return response
        finally:
            clear_trace_id()

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.get("/{proxy:path}")
    def serve_image(proxy: str, request: Request):
        event = event_builder.build(to_input_context(request))
        return to_fastapi_response(orchestrator_factory().handle_event(event))

    return app


def create_default_app(config: Optional[ImageHandlerConfig] = None) -> FastAPI:
    config = config or load_config()
    setup_logging(config.LOG_CONFIG_PATH or BUNDLED_LOG_CONFIG)
    orchestrator = build_orchestrator(config)
    logger.info(f"Local gateway emulating {config.LOCAL_FRONT_DOOR}")
    return create_app(lambda: orchestrator, event_builder_for(config.LOCAL_FRONT_DOOR))


def run() -> None:
    import uvicorn

    config = load_config()
    uvicorn.run(
        create_default_app(config), host=config.LOCAL_BIND_HOST, port=config.LOCAL_BIND_PORT
    )


if __name__ == "__main__":
    run()
