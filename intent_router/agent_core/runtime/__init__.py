"""Plan execution runtime.

- ``PlanExecutionEngine``: LangGraph state machine executing a stored plan.
- ``EngineDeps``: repositories and executor injected into the engine.
- ``topological_order``: dependency-respecting step order with cycle detection.
- ``replay_lineage``: re-derives the produces/consumes graph from events.
"""

from .engine import PlanExecutionEngine
from .lineage import replay_lineage
from .models import EngineDeps
from .ordering import topological_order

__all__ = [
    "EngineDeps",
    "PlanExecutionEngine",
    "replay_lineage",
    "topological_order",
]
