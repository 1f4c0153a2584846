"""LangGraph plan execution engine.

``PlanExecutionEngine`` executes a persisted plan whose steps have passed the
policy gate at submission time.

Execution model
---------------

- The engine runs a LangGraph state machine over a mutable ``_GraphState``:
  ``start`` orders the steps, ``execute`` runs one step per iteration and
  ``finish`` persists the final plan status.
- Steps run strictly one at a time in topological order.

Per step
--------

1. Build the step context from the results of its declared dependencies only.
2. Re-run the single-step policy check against the live entity store. A
   violation fails the whole plan.
3. Call the executor collaborator under a timeout. A timeout is a failure.
4. On success, persist produced entities with inherited tags, append a success
   event and remember the result for dependents.
5. On failure, append a failure event and stop. Later steps never run.

Plan status
-----------

``pending → executing → completed | failed``. The move to ``executing`` is an
atomic claim in the plan repository, so duplicate execute calls return
``already_executing`` / ``already_completed`` instead of running twice.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Tuple
from uuid import uuid4

from langgraph.graph import END, StateGraph
from pydantic import ValidationError

from ..errors import PlanNotFoundError, StructuralError
from ..policy import PolicyEngine, is_entity_id
from ..schemas.domain import (
    Entity,
    Event,
    ExecutionStatus,
    Plan,
    PlanExecutionResult,
    PlanStatus,
    Step,
)
from ..tools import ExecutorRequest, ExecutorResponse
from .context import (
    build_step_context,
    consumed_entity_ids,
    inherited_capabilities,
    produced_capabilities,
)
from .models import EngineDeps, _GraphState
from .ordering import topological_order

logger = logging.getLogger(__name__)


class PlanExecutionEngine:
    """Execute a stored plan with per-step policy enforcement and an event log.

    The engine is orchestration-oriented: it delegates authorization to
    ``PolicyEngine`` and the actual work to the ``StepExecutor`` in
    ``EngineDeps.executor``.
    """

    def __init__(self, *, policy: PolicyEngine, deps: EngineDeps, step_timeout: float = 30.0) -> None:
        """
        Initialize the engine.

        Args:
            policy: The policy engine used for the pre-execution re-check.
            deps: The runtime dependencies (repositories and executor).
            step_timeout: Seconds to wait for the executor on each step.
        """
        self._policy = policy
        self._deps = deps
        self._step_timeout = step_timeout
        self._graph = self._build_graph()

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("start", self._node_start)
        g.add_node("execute", self._node_execute_next)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("start")
        g.add_conditional_edges("start", self._route, {"finish": "finish", "continue": "execute"})
        g.add_conditional_edges("execute", self._route, {"finish": "finish", "continue": "execute"})
        g.add_edge("finish", END)
        return g.compile()

    async def execute(self, plan_id: str) -> PlanExecutionResult:
        """Execute a plan.

        Raises
        ------
        PlanNotFoundError
            If the plan does not exist.
        PersistenceError
            If the store fails outside best-effort bookkeeping. The plan is
            marked ``failed`` on a best-effort basis first.
        """
        plan = await self._deps.plans.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)

        guarded = self._entry_guard(plan)
        if guarded is not None:
            return guarded

        if not await self._deps.plans.claim_for_execution(plan_id):
            current = await self._deps.plans.get(plan_id)
            guarded = self._entry_guard(current) if current is not None else None
            return guarded or self._noop(plan, ExecutionStatus.already_executing, "Plan is already executing")

        logger.info(f"Executing plan {plan_id} ({len(plan.steps)} step(s))")
        state: _GraphState = {
            "plan_id": plan_id,
            "steps": list(plan.steps),
            "order": [],
            "cursor": 0,
            "results": {},
            "events": [],
            "executed": 0,
            "failed": 0,
            "error": None,
            "finished": False,
        }
        try:
            final = await self._graph.ainvoke(state, config={"recursion_limit": len(plan.steps) + 10})
        except Exception as e:
            logger.error(f"Plan {plan_id} aborted: {e}", exc_info=True)
            await self._set_final_status(plan_id, PlanStatus.failed)
            raise

        failed = bool(final["failed"] or final["error"])
        return PlanExecutionResult(
            plan_id=plan_id,
            status=ExecutionStatus.failed if failed else ExecutionStatus.completed,
            total_steps=len(plan.steps),
            executed_steps=final["executed"],
            failed_steps=final["failed"],
            events=list(final["events"]),
            error=final["error"],
        )

    def _entry_guard(self, plan: Plan) -> Optional[PlanExecutionResult]:
        if plan.status == PlanStatus.executing:
            return self._noop(plan, ExecutionStatus.already_executing, "Plan is already executing")
        if plan.status == PlanStatus.completed:
            return self._noop(plan, ExecutionStatus.already_completed, "Plan has already completed")
        if plan.status == PlanStatus.failed:
            return self._noop(plan, ExecutionStatus.failed, "Plan already failed; resubmit the prompt to retry")
        return None

    @staticmethod
    def _noop(plan: Plan, status: ExecutionStatus, message: str) -> PlanExecutionResult:
        return PlanExecutionResult(plan_id=plan.id, status=status, total_steps=len(plan.steps), error=message)

    async def _node_start(self, state: _GraphState) -> _GraphState:
        """Order the steps; a structural error ends the run before any step."""
        try:
            state["order"] = topological_order(state["steps"])
        except StructuralError as e:
            logger.warning(f"Plan {state['plan_id']} has an invalid dependency graph: {e}")
            state["error"] = str(e)
            state["finished"] = True
            return state
        if not state["order"]:
            state["finished"] = True
        return state

    async def _node_execute_next(self, state: _GraphState) -> _GraphState:
        """Execute the step at ``order[cursor]``."""
        plan_id = state["plan_id"]
        idx = state["order"][state["cursor"]]
        step = state["steps"][idx]
        context = build_step_context(step, state["results"])
        consumed_ids = consumed_entity_ids(step, context)
        consumed = await self._deps.entities.get_many(consumed_ids)

        check = self._policy.check_step_execution(step, consumed, step_index=idx, context=context)
        if not check.allowed:
            logger.warning(f"Plan {plan_id} step {idx} blocked by policy: {check.reason}")
            return await self._record_failure(state, idx, check.reason)

        response, error = await self._call_executor(plan_id, idx, step, context)
        if error is not None:
            return await self._record_failure(state, idx, error)

        inherited = inherited_capabilities(consumed)
        to_store = [self._inherit(entity, inherited, step.data_caps) for entity in response.entities]
        proposed = [e.id for e in to_store]
        taken = sorted({e.id for e in await self._deps.entities.get_many(proposed)})
        repeated = sorted({i for i in proposed if proposed.count(i) > 1})
        if taken or repeated:
            return await self._record_failure(
                state, idx, f"Executor returned entity ids that are already in use: {', '.join(taken or repeated)}"
            )

        produced: List[str] = []
        for stored in to_store:
            await self._deps.entities.create(stored)
            produced.append(stored.id)

        event = Event(
            plan_id=plan_id,
            step_index=idx,
            sequence=len(state["events"]),
            op=step.op,
            produces=produced,
            consumes=consumed_ids,
            result=response.result,
        )
        await self._deps.events.append(event)
        state["events"].append(event)
        state["results"][idx] = response.result
        state["executed"] += 1
        state["cursor"] += 1
        if state["cursor"] >= len(state["order"]):
            state["finished"] = True
        return state

    async def _call_executor(
        self, plan_id: str, idx: int, step: Step, context: dict[str, Any]
    ) -> Tuple[ExecutorResponse, Optional[str]]:
        """Invoke the executor under the step timeout.

        Returns ``(response, error)``; collaborator exceptions, timeouts, error
        responses and malformed output all become ``error``.
        """
        request = ExecutorRequest(step=step, step_index=idx, plan_id=plan_id, context=context)
        try:
            raw = await asyncio.wait_for(self._deps.executor.execute_step(request), timeout=self._step_timeout)
        except asyncio.TimeoutError:
            return ExecutorResponse(), f"Step execution timed out after {self._step_timeout}s"
        except Exception as e:
            logger.warning(f"Executor raised for plan {plan_id} step {idx}: {e}", exc_info=True)
            return ExecutorResponse(), f"Executor failed: {e}"

        if isinstance(raw, ExecutorResponse):
            response = raw
        else:
            try:
                response = ExecutorResponse.model_validate(raw)
            except ValidationError as e:
                return ExecutorResponse(), f"Malformed executor output: {e.error_count()} validation error(s)"
        if response.error:
            return response, response.error
        return response, None

    async def _node_finish(self, state: _GraphState) -> _GraphState:
        """Persist the final plan status."""
        status = PlanStatus.failed if state["failed"] or state["error"] else PlanStatus.completed
        await self._set_final_status(state["plan_id"], status)
        logger.info(
            f"Plan {state['plan_id']} finished: status={status.value} executed={state['executed']} failed={state['failed']}"
        )
        return state

    def _route(self, state: _GraphState) -> str:
        return "finish" if state["finished"] else "continue"

    async def _record_failure(self, state: _GraphState, idx: int, message: str) -> _GraphState:
        event = Event(
            plan_id=state["plan_id"],
            step_index=idx,
            sequence=len(state["events"]),
            op=state["steps"][idx].op,
            produces=[],
            consumes=[],
            result=None,
            error=message,
        )
        await self._deps.events.append(event)
        state["events"].append(event)
        state["failed"] += 1
        state["error"] = message
        state["finished"] = True
        return state

    @staticmethod
    def _inherit(entity: Entity, inherited: List[str], declared: List[str]) -> Entity:
        update: dict[str, Any] = {"capabilities": produced_capabilities(inherited, entity.capabilities, declared)}
        if not is_entity_id(entity.id):
            update["id"] = str(uuid4())
        return entity.model_copy(update=update)

    async def _set_final_status(self, plan_id: str, status: PlanStatus) -> None:
        try:
            await self._deps.plans.update_status(plan_id, status=status)
        except Exception as e:
            logger.error(f"Could not persist status '{status.value}' for plan {plan_id}: {e}", exc_info=True)
