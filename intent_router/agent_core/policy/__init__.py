"""Capability policy subsystem.

The policy layer decides whether a plan, or a single step about to run, is
authorized. It is separate from planning so that planner output, which is
untrusted, always passes through it before anything executes.

Components
----------

- ``PolicyEngine``: tool, data and dependency checks producing
  ``PolicyViolation`` lists.
- ``PolicyCheckResult``: the allow/deny outcome of a pre-execution check.
- ``extract_entity_references``: the recursive entity id scanner shared by the
  policy engine and the execution engine.
- ``create_approval_context``: summarizes violations for a human reviewer.
"""

from .engine import PolicyEngine, create_approval_context
from .models import PolicyCheckResult
from .references import extract_entity_references, is_entity_id

__all__ = [
    "PolicyCheckResult",
    "PolicyEngine",
    "create_approval_context",
    "extract_entity_references",
    "is_entity_id",
]
