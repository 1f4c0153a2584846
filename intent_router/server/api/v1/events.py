"""
Event API Endpoints.

Read access to the append-only execution event log.
"""

from typing import List, Optional

from fastapi import APIRouter, Query

from intent_router.agent_core.schemas.domain import Event
from intent_router.server.services.deps import OrchestratorDep

router = APIRouter()


@router.get(
    "",
    response_model=List[Event],
    summary="List Events",
    description=(
        "List execution events. With `plan_id` the events of that plan are returned in execution "
        "order, otherwise the most recent events across all plans."
    ),
)
async def list_events(
    orchestrator: OrchestratorDep,
    plan_id: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=1000),
):
    return await orchestrator.list_events(plan_id=plan_id, limit=limit)
