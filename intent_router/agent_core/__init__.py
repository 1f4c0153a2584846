"""Capability-checked planning and execution core.

This package contains the "engine room" of the router.

Design overview
---------------

- Planning produces a list of ``Step`` objects. Planner output is untrusted and
  is normalized at the boundary by ``planning.steps.normalize_plan``.
- ``policy.PolicyEngine`` validates steps against the ``CapabilityRegistry`` and
  the ``OperationRequirementMap``. Violations are returned as data.
- Execution is performed by ``runtime.PlanExecutionEngine`` using LangGraph. The
  engine persists an append-only event log via repository interfaces.

Typical usage
-------------

Most applications should use ``agent_core.service.IntentRouterService`` which
wires the registry, policy engine, planner, executor and repositories together.
"""

from .capabilities import CapabilityRegistry, OperationRequirementMap
from .errors import (
    CapabilityError,
    CapabilityForbiddenError,
    CapabilityNotFoundError,
    CircularDependencyError,
    DuplicateCapabilityError,
    IntentRouterError,
    InvalidDependencyError,
    MalformedPlanError,
    PersistenceError,
    PlanNotFoundError,
    StructuralError,
    ToolProviderError,
    UnknownOperationError,
)
from .policy import PolicyEngine
from .schemas.domain import (
    Capability,
    CapabilityKind,
    Entity,
    Event,
    ExecutionStatus,
    Plan,
    PlanExecutionResult,
    PlanStatus,
    PolicyViolation,
    Prompt,
    Step,
    ViolationKind,
)

__all__ = [
    "Capability",
    "CapabilityError",
    "CapabilityForbiddenError",
    "CapabilityKind",
    "CapabilityNotFoundError",
    "CapabilityRegistry",
    "CircularDependencyError",
    "DuplicateCapabilityError",
    "Entity",
    "Event",
    "ExecutionStatus",
    "IntentRouterError",
    "InvalidDependencyError",
    "MalformedPlanError",
    "OperationRequirementMap",
    "PersistenceError",
    "Plan",
    "PlanExecutionResult",
    "PlanNotFoundError",
    "PlanStatus",
    "PolicyEngine",
    "PolicyViolation",
    "Prompt",
    "Step",
    "StructuralError",
    "ToolProviderError",
    "UnknownOperationError",
    "ViolationKind",
]
