"""
Where: services/image_handler/exceptions.py
What: Local gateway exception handler registration.
Why: Errors outside the orchestrator still answer with the handler's JSON error shape.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .models.result import INTERNAL_ERROR_CODE, INTERNAL_ERROR_MESSAGE

logger = logging.getLogger("image_handler.gateway")


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    """
    logger.error(
        f"Global exception handler caught: {exc}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE, "code": INTERNAL_ERROR_CODE, "status": 500},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Exception, global_exception_handler)
