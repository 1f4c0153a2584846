"""Error types for the agent core.

Policy violations are *not* exceptions; they are returned as
``PolicyViolation`` data. The exceptions below cover the remaining failure
families:

- capability registry misuse (duplicate ids, mutating system capabilities),
- structural problems with a plan or collaborator output,
- tool provider registration failures,
- persistence failures.
"""

from __future__ import annotations

from typing import Sequence


class IntentRouterError(Exception):
    """Base error for all intent router exceptions."""


class CapabilityError(IntentRouterError):
    """Base error for capability registry operations."""


class DuplicateCapabilityError(CapabilityError):
    """Raised when adding a capability whose id is already registered."""

    def __init__(self, capability_id: str) -> None:
        self.capability_id = capability_id
        super().__init__(f"Capability '{capability_id}' already exists")


class CapabilityForbiddenError(CapabilityError):
    """Raised when attempting to mutate or delete a system capability."""

    def __init__(self, capability_id: str, action: str) -> None:
        self.capability_id = capability_id
        self.action = action
        super().__init__(f"Cannot {action} system capability '{capability_id}'")


class CapabilityNotFoundError(CapabilityError):
    def __init__(self, capability_id: str) -> None:
        self.capability_id = capability_id
        super().__init__(f"Capability '{capability_id}' not found")


class StructuralError(IntentRouterError):
    """A malformed plan or collaborator output.

    Fatal to the current operation only; reported as the failure reason.
    """


class CircularDependencyError(StructuralError):
    def __init__(self, step_index: int, path: Sequence[int] = ()) -> None:
        self.step_index = step_index
        self.path = list(path)
        cycle = " -> ".join(str(i) for i in [*self.path, step_index]) if self.path else str(step_index)
        super().__init__(f"Circular dependency detected at step {step_index} ({cycle})")


class InvalidDependencyError(StructuralError):
    def __init__(self, step_index: int, dependency: int, total: int) -> None:
        self.step_index = step_index
        self.dependency = dependency
        self.total = total
        super().__init__(f"Step {step_index} has invalid dependency: {dependency} (plan has {total} steps)")


class UnknownOperationError(StructuralError):
    def __init__(self, op: str) -> None:
        self.op = op
        super().__init__(f"Unknown operation: {op}")


class MalformedPlanError(StructuralError):
    """Raised when planner output fails boundary validation."""


class ToolProviderError(IntentRouterError):
    """Raised when a tool provider cannot be registered, probed or removed."""


class PlanNotFoundError(IntentRouterError):
    def __init__(self, plan_id: str) -> None:
        self.plan_id = plan_id
        super().__init__(f"Plan '{plan_id}' not found")


class PersistenceError(IntentRouterError):
    """Raised when the durable store is unreachable or rejects a write."""
