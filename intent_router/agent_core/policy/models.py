"""Policy result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..schemas.domain import PolicyViolation, ViolationKind


@dataclass(frozen=True)
class PolicyCheckResult:
    """
    Result of a pre-execution policy check for a single step.

    Attributes:
        allowed: True when the step may be handed to the executor.
        violations: The violations that block the step, if any.
    """

    allowed: bool
    violations: List[PolicyViolation] = field(default_factory=list)

    @property
    def reason(self) -> str:
        return "; ".join(v.message for v in self.violations)


APPROVABLE_KINDS = frozenset({ViolationKind.missing_tool_cap, ViolationKind.missing_data_cap})
