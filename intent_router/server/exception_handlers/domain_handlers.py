"""
Domain Exception Handlers.

Maps the ``IntentRouterError`` hierarchy to HTTP status codes:

- not found → 404
- forbidden operation on a system capability → 403
- duplicate capability → 409
- tool provider failure → 502
- persistence failure → 503
- other structural errors → 400
"""

from typing import Dict, Type

from fastapi import Request
from fastapi.responses import JSONResponse

from intent_router.agent_core.errors import (
    CapabilityForbiddenError,
    CapabilityNotFoundError,
    DuplicateCapabilityError,
    IntentRouterError,
    PersistenceError,
    PlanNotFoundError,
    StructuralError,
    ToolProviderError,
)
from intent_router.core.logging_config import get_logger
from intent_router.core.monitoring import log_error

logger = get_logger(__name__)

STATUS_BY_ERROR: Dict[Type[IntentRouterError], int] = {
    CapabilityNotFoundError: 404,
    PlanNotFoundError: 404,
    CapabilityForbiddenError: 403,
    DuplicateCapabilityError: 409,
    ToolProviderError: 502,
    PersistenceError: 503,
    StructuralError: 400,
}


def status_for(exc: IntentRouterError) -> int:
    for err_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(exc, err_type):
            return status_code
    return 500


async def intent_router_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translate a domain error into a JSON error response."""
    status_code = status_for(exc) if isinstance(exc, IntentRouterError) else 500
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc}")
        log_error(type(exc).__name__, str(exc), {"path": request.url.path, "method": request.method})
    else:
        logger.info(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )
