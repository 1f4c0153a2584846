"""
Fallback handler for unexpected exceptions.

Anything that is not an ``IntentRouterError`` ends up here: it is logged with
the request context under a short error reference, and the client receives a
500 carrying that reference.
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from intent_router.agent_core.errors import IntentRouterError
from intent_router.core.logging_config import get_logger
from intent_router.core.monitoring import log_error

from .domain_handlers import intent_router_exception_handler

logger = get_logger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error_id = uuid4().hex[:12]
    error_type = type(exc).__name__
    context = {
        "error_id": error_id,
        "method": request.method,
        "path": request.url.path,
        "path_params": dict(request.path_params),
    }

    logger.error(f"Unhandled {error_type} [{error_id}] in {request.method} {request.url.path}: {exc}", exc_info=True, extra=context)
    log_error(error_type, str(exc), context)

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_id": error_id, "error_type": error_type},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the domain error handler, then the catch-all fallback."""
    app.add_exception_handler(IntentRouterError, intent_router_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
