"""
Operation API Endpoints.

Lists the operation names a plan step may use, the tool capabilities each
requires and whether an executor tool is registered for it.
"""

from typing import List

from fastapi import APIRouter

from intent_router.agent_core.schemas.domain import OperationInfo
from intent_router.server.services.deps import OrchestratorDep

router = APIRouter()


@router.get(
    "",
    response_model=List[OperationInfo],
    summary="List Operations",
)
async def list_operations(orchestrator: OrchestratorDep):
    return orchestrator.list_operations()
