"""Runtime dependency bundle and LangGraph state types.

The execution engine is dependency-injected.

- ``EngineDeps`` collects the repositories and the executor collaborator.
- ``_GraphState`` is the mutable state passed between LangGraph nodes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Required, TypedDict

from ..repos import EntityRepository, EventRepository, PlanRepository
from ..schemas.domain import Event, Step
from ..tools import StepExecutor


@dataclass(frozen=True)
class EngineDeps:
    """Dependency bundle for ``PlanExecutionEngine``.

    This object is typically constructed by application wiring code. It holds:

    - persistence repositories (plans, entities, events)
    - the executor collaborator that performs authorized steps.
    """

    plans: PlanRepository
    entities: EntityRepository
    events: EventRepository
    executor: StepExecutor


class _GraphState(TypedDict):
    """Mutable LangGraph state for a single plan execution.

    - ``plan_id`` / ``steps``: the plan being executed.
    - ``order``: step indices in topological order; ``cursor`` points into it.
    - ``results``: result of each executed step keyed by step index.
    - ``events``: events appended during this execution.
    - ``executed`` / ``failed``: step counters.
    - ``error``: terminating error, if any.
    - ``finished``: set to end the execute loop.
    """

    plan_id: Required[str]
    steps: Required[List[Step]]
    order: Required[List[int]]
    cursor: Required[int]
    results: Required[Dict[int, Any]]
    events: Required[List[Event]]
    executed: Required[int]
    failed: Required[int]
    error: Required[Optional[str]]
    finished: Required[bool]
