"""
Prompt API Endpoints.

Submitting a prompt stores it, asks the planner for a plan and validates the
plan against the capability policy. Approved plans are persisted and can be
executed through the plans endpoints.
"""

from fastapi import APIRouter, HTTPException

from intent_router.agent_core.schemas.domain import Prompt, PromptSubmission
from intent_router.core.logging_config import get_logger
from intent_router.server.schemas import PromptCreate
from intent_router.server.services.deps import OrchestratorDep

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=PromptSubmission,
    summary="Submit Prompt",
    description=(
        "Store a prompt, plan it and validate the plan. Policy violations and planner failures are "
        "reported in the response body rather than as HTTP errors."
    ),
    response_description="The submission outcome, including the plan id when approved.",
)
async def submit_prompt(prompt_in: PromptCreate, orchestrator: OrchestratorDep):
    """
    Submit a prompt.

    - **approved**: the plan is stored and `plan_id` is set.
    - **policy_violation**: the plan is not stored; `violations` and `approval` describe why.
    - **planning_failed**: the planner output could not be turned into steps.
    """
    logger.info(f"Submitting prompt ({len(prompt_in.content)} chars)")
    return await orchestrator.submit_prompt(prompt_in.content, metadata=prompt_in.metadata, context=prompt_in.context)


@router.get(
    "/{prompt_id}",
    response_model=Prompt,
    summary="Get Prompt",
    description="Retrieve a stored prompt by id.",
)
async def get_prompt(prompt_id: str, orchestrator: OrchestratorDep):
    prompt = await orchestrator.get_prompt(prompt_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail=f"Prompt not found: {prompt_id}")
    return prompt
