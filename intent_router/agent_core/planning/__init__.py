"""Planning subsystem.

Exports the planner collaborator and the boundary validation applied to its
output:

- ``StructuredPlanner``: deterministic or pydantic-ai backed planner.
- ``PlannerRequest`` / ``PlannerResult``: planner input and output.
- ``normalize_plan`` / ``plan_confidence``: untrusted output handling.
"""

from .planner import PlannerRequest, PlannerResult, StructuredPlanner
from .steps import PlannerStep, normalize_plan, plan_confidence

__all__ = [
    "PlannerRequest",
    "PlannerResult",
    "PlannerStep",
    "StructuredPlanner",
    "normalize_plan",
    "plan_confidence",
]
