"""
Plan API Endpoints.

Lists and retrieves stored plans, executes them and exposes their event log
and data lineage.
"""

from typing import List, Optional

from fastapi import APIRouter, Query

from intent_router.agent_core.errors import PlanNotFoundError
from intent_router.agent_core.schemas.domain import Event, Plan, PlanExecutionResult, PlanLineage, PlanStatus
from intent_router.core.logging_config import get_logger
from intent_router.server.services.deps import OrchestratorDep

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "",
    response_model=List[Plan],
    summary="List Plans",
    description="List stored plans, newest first, optionally filtered by status.",
)
async def list_plans(
    orchestrator: OrchestratorDep,
    status: Optional[PlanStatus] = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
):
    return await orchestrator.list_plans(status=status, limit=limit, offset=offset)


@router.get(
    "/{plan_id}",
    response_model=Plan,
    summary="Get Plan",
    description="Retrieve a stored plan by id.",
)
async def get_plan(plan_id: str, orchestrator: OrchestratorDep):
    plan = await orchestrator.get_plan(plan_id)
    if plan is None:
        raise PlanNotFoundError(plan_id)
    return plan


@router.post(
    "/{plan_id}/execute",
    response_model=PlanExecutionResult,
    summary="Execute Plan",
    description=(
        "Execute a pending plan in dependency order. Each step is re-checked against the capability "
        "policy immediately before it runs. Executing an executing or completed plan is a no-op."
    ),
    response_description="The execution outcome and the events recorded during this call.",
)
async def execute_plan(plan_id: str, orchestrator: OrchestratorDep):
    """
    Execute a plan.

    - **completed**: every step ran.
    - **failed**: execution stopped at the first failing step; see `error`.
    - **already_executing** / **already_completed**: nothing was run.
    """
    logger.info(f"Executing plan {plan_id}")
    return await orchestrator.execute_plan(plan_id)


@router.get(
    "/{plan_id}/events",
    response_model=List[Event],
    summary="List Plan Events",
    description="List the events recorded for a plan in execution order.",
)
async def list_plan_events(plan_id: str, orchestrator: OrchestratorDep, limit: int = Query(default=100, ge=1, le=1000)):
    if await orchestrator.get_plan(plan_id) is None:
        raise PlanNotFoundError(plan_id)
    return await orchestrator.list_events(plan_id=plan_id, limit=limit)


@router.get(
    "/{plan_id}/lineage",
    response_model=PlanLineage,
    summary="Get Plan Lineage",
    description="Replay the event log into the produces/consumes graph of the plan.",
)
async def get_plan_lineage(plan_id: str, orchestrator: OrchestratorDep):
    return await orchestrator.get_plan_lineage(plan_id)
