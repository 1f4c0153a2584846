"""
Health, readiness and version endpoints.

``/health`` only says the process answers. ``/ready`` additionally reports
whether the capability registry has been bootstrapped, since no prompt can be
approved before the system capabilities are loaded.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from intent_router.agent_core.capabilities import system_capabilities
from intent_router.server.core import constant
from intent_router.server.services.deps import OrchestratorDep

router = APIRouter()


@router.get("/health", response_description="Liveness status.")
async def health_check():
    return {"status": "ok"}


@router.get("/ready", response_description="Readiness status with registry counts.")
async def readiness(orchestrator: OrchestratorDep):
    """
    Readiness check.

    Returns 503 until every system capability is present in the registry.
    """
    capabilities = orchestrator.list_capabilities()
    registered = {c.id for c in capabilities}
    bootstrapped = all(c.id in registered for c in system_capabilities())
    body = {
        "status": "ready" if bootstrapped else "starting",
        "capabilities": len(capabilities),
        "operations": len(orchestrator.list_operations()),
        "tool_providers": len(orchestrator.list_tool_providers()),
    }
    return JSONResponse(status_code=200 if bootstrapped else 503, content=body)


@router.get("/version", response_description="API and schema version.")
async def version():
    return {"version": constant.API_VERSION, "schema_version": constant.SCHEMA_VERSION}
