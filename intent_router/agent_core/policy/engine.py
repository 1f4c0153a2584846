"""Capability policy engine.

The engine implements the dual-channel capability model:

- **Tool channel**: an operation's required tool capabilities (from the
  ``OperationRequirementMap``) must all be declared by the step, and every
  declared tool capability must be a registered ``ToolCap``.
- **Data channel**: every entity referenced by the step's arguments carries data
  capability tags; the step must declare all of them. Every declared data
  capability must be a registered ``DataCap``.
- **Dependencies**: a step may only depend on strictly earlier steps.

Violations are returned as data and never raised. Checks are independent so a
single step can be re-validated immediately before it runs.

Referenced ids that do not resolve to a known entity are ignored. Ids of
entities a step is about to create cannot be resolved before that step runs.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from ..capabilities import CapabilityRegistry, OperationRequirementMap
from ..schemas.domain import (
    ApprovalContext,
    CapabilityKind,
    Entity,
    PolicyViolation,
    Step,
    ViolationKind,
)
from .models import APPROVABLE_KINDS, PolicyCheckResult
from .references import extract_entity_references

logger = logging.getLogger(__name__)

EntitySource = Union[Mapping[str, Entity], Iterable[Entity]]


def _index_entities(entities: EntitySource) -> Mapping[str, Entity]:
    if isinstance(entities, Mapping):
        return entities
    return {e.id: e for e in entities}


class PolicyEngine:
    """Validate plans and steps against the capability registry.

    The registry and the operation map are consulted on every call, so
    administrative changes take effect on the next validation.
    """

    def __init__(self, registry: CapabilityRegistry, operations: OperationRequirementMap) -> None:
        """
        Initialize the engine.

        Args:
            registry: The capability registry, the single source of truth for
                which capability ids exist and of which kind.
            operations: Maps operation names to required tool capabilities.
        """
        self._registry = registry
        self._operations = operations

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    @property
    def operations(self) -> OperationRequirementMap:
        return self._operations

    def validate_plan(self, steps: Sequence[Step], entities: EntitySource = ()) -> List[PolicyViolation]:
        """
        Validate every step of a plan.

        Violations are ordered by step index, then tool → data → dependency.

        Args:
            steps: The plan steps in plan order.
            entities: Known entities the plan may touch.

        Returns:
            All violations; an empty list means the plan is green-lit.
        """
        index = _index_entities(entities)
        tool_ids = self._registry.valid_ids(CapabilityKind.tool)
        data_ids = self._registry.valid_ids(CapabilityKind.data)
        violations: List[PolicyViolation] = []
        for i, step in enumerate(steps):
            violations.extend(self._check_tool_caps(step, i, tool_ids))
            violations.extend(self._check_data_caps(step, i, index, data_ids))
            violations.extend(self.validate_dependencies(step, i, len(steps)))
        if violations:
            logger.debug(f"Plan validation produced {len(violations)} violation(s)")
        return violations

    def validate_step(
        self, step: Step, entities: EntitySource = (), *, step_index: int = 0
    ) -> List[PolicyViolation]:
        """Run the tool and data checks for one step in isolation."""
        index = _index_entities(entities)
        tool_ids = self._registry.valid_ids(CapabilityKind.tool)
        data_ids = self._registry.valid_ids(CapabilityKind.data)
        return [
            *self._check_tool_caps(step, step_index, tool_ids),
            *self._check_data_caps(step, step_index, index, data_ids),
        ]

    def check_step_execution(
        self,
        step: Step,
        entities: EntitySource = (),
        *,
        step_index: int = 0,
        context: Optional[Mapping[str, Any]] = None,
    ) -> PolicyCheckResult:
        """Decide whether a step may be handed to the executor right now.

        When ``context`` is given, entities referenced by dependency results are
        data-checked as well as those referenced by the arguments.
        """
        index = _index_entities(entities)
        tool_ids = self._registry.valid_ids(CapabilityKind.tool)
        data_ids = self._registry.valid_ids(CapabilityKind.data)
        extra = extract_entity_references(dict(context)) if context else []
        violations = [
            *self._check_tool_caps(step, step_index, tool_ids),
            *self._check_data_caps(step, step_index, index, data_ids, extra),
        ]
        return PolicyCheckResult(allowed=not violations, violations=violations)

    def validate_dependencies(self, step: Step, step_index: int, total: int) -> List[PolicyViolation]:
        """A dependency ``d`` of step ``i`` is valid only when ``0 <= d < i``."""
        out: List[PolicyViolation] = []
        for d in step.deps:
            if d < 0 or d >= total:
                message = f"Step {step_index} has invalid dependency: {d} (valid range: 0-{total - 1})"
            elif d >= step_index:
                message = f"Step {step_index} cannot depend on step {d} (circular or forward dependency)"
            else:
                continue
            out.append(
                PolicyViolation(
                    step_index=step_index,
                    violation_type=ViolationKind.invalid_dependency,
                    required=[],
                    available=[str(d)],
                    message=message,
                )
            )
        return out

    def _check_tool_caps(self, step: Step, step_index: int, tool_ids: frozenset[str]) -> List[PolicyViolation]:
        out: List[PolicyViolation] = []
        required = self._operations.required_tool_caps(step.op)
        declared = set(step.tool_caps)
        missing = sorted(required - declared)
        if missing:
            out.append(
                PolicyViolation(
                    step_index=step_index,
                    violation_type=ViolationKind.missing_tool_cap,
                    required=sorted(required),
                    available=list(step.tool_caps),
                    message=f"Step {step_index} ({step.op}) missing required tool capabilities: {', '.join(missing)}",
                )
            )
        invalid = [cid for cid in step.tool_caps if cid not in tool_ids]
        if invalid:
            out.append(
                PolicyViolation(
                    step_index=step_index,
                    violation_type=ViolationKind.missing_tool_cap,
                    required=invalid,
                    available=sorted(tool_ids),
                    message=f"Step {step_index} declares invalid tool capabilities: {', '.join(invalid)}",
                )
            )
        return out

    def _check_data_caps(
        self,
        step: Step,
        step_index: int,
        entities: Mapping[str, Entity],
        data_ids: frozenset[str],
        extra_refs: Sequence[str] = (),
    ) -> List[PolicyViolation]:
        out: List[PolicyViolation] = []
        declared = set(step.data_caps)
        refs = extract_entity_references(step.args)
        for ref in extra_refs:
            if ref not in refs:
                refs.append(ref)
        for entity_id in refs:
            entity = entities.get(entity_id)
            if entity is None:
                continue
            entity_caps = [c for c in entity.capabilities if c in data_ids]
            missing = sorted(set(entity_caps) - declared)
            if missing:
                out.append(
                    PolicyViolation(
                        step_index=step_index,
                        violation_type=ViolationKind.missing_data_cap,
                        required=sorted(set(entity_caps)),
                        available=list(step.data_caps),
                        message=f"Step {step_index} missing data capabilities for entity {entity_id}: {', '.join(missing)}",
                    )
                )
        invalid = [cid for cid in step.data_caps if cid not in data_ids]
        if invalid:
            out.append(
                PolicyViolation(
                    step_index=step_index,
                    violation_type=ViolationKind.missing_data_cap,
                    required=invalid,
                    available=sorted(data_ids),
                    message=f"Step {step_index} declares invalid data capabilities: {', '.join(invalid)}",
                )
            )
        return out


def create_approval_context(violations: Sequence[PolicyViolation]) -> ApprovalContext:
    """
    Summarize violations for a human reviewer.

    Tool and data violations can be approved by a human. Dependency violations
    mean the plan is malformed and block it regardless of approval.
    """
    if not violations:
        return ApprovalContext(summary="No policy violations detected", details=[], requires_approval=False)

    tool = [v for v in violations if v.violation_type == ViolationKind.missing_tool_cap]
    data = [v for v in violations if v.violation_type == ViolationKind.missing_data_cap]
    deps = [v for v in violations if v.violation_type == ViolationKind.invalid_dependency]

    parts: List[str] = []
    if tool:
        parts.append(f"{len(tool)} tool capability violation(s)")
    if data:
        parts.append(f"{len(data)} data capability violation(s)")
    if deps:
        parts.append(f"{len(deps)} dependency violation(s)")

    return ApprovalContext(
        summary=f"Plan requires approval: {', '.join(parts)}",
        details=[v.message for v in violations],
        requires_approval=any(v.violation_type in APPROVABLE_KINDS for v in violations),
        blocked=bool(deps),
    )
