"""Boundary validation for planner output.

Planner output is untrusted. ``normalize_plan`` parses it into strict ``Step``
objects before anything reaches the policy engine:

- missing ``args``/``tool_caps``/``data_caps``/``deps`` become empty,
- a missing or non-string ``op`` is rejected,
- wrongly typed containers or members are rejected.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from pydantic import Field

from ..errors import MalformedPlanError
from ..schemas.base import BaseSchema
from ..schemas.domain import Step


class PlannerStep(BaseSchema):
    """Step shape requested from LLM planners."""

    op: str = Field(description="Operation name, e.g. create_document")
    args: Dict[str, Any] = Field(default_factory=dict)
    tool_caps: List[str] = Field(default_factory=list, description="Tool capability ids the step needs")
    data_caps: List[str] = Field(default_factory=list, description="Data capability ids the step needs")
    deps: List[int] = Field(default_factory=list, description="Indices of earlier steps this step reads")


def _string_list(raw: Mapping[str, Any], key: str, idx: int) -> List[str]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise MalformedPlanError(f"step {idx}: '{key}' must be a list")
    for item in value:
        if not isinstance(item, str):
            raise MalformedPlanError(f"step {idx}: '{key}' entries must be strings")
    return list(value)


def _deps(raw: Mapping[str, Any], idx: int) -> List[int]:
    value = raw.get("deps")
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise MalformedPlanError(f"step {idx}: 'deps' must be a list")
    out: List[int] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int):
            raise MalformedPlanError(f"step {idx}: 'deps' entries must be integers")
        out.append(item)
    return out


def normalize_plan(plan: Any) -> List[Step]:
    if not isinstance(plan, (list, tuple)):
        raise MalformedPlanError("planner output must be a list of steps")
    out: List[Step] = []
    for idx, raw in enumerate(plan):
        if not isinstance(raw, Mapping):
            raise MalformedPlanError(f"step {idx}: expected an object, got {type(raw).__name__}")
        op = raw.get("op")
        if not isinstance(op, str) or not op.strip():
            raise MalformedPlanError(f"step {idx}: 'op' must be a non-empty string")
        args = raw.get("args")
        if args is None:
            args = {}
        if not isinstance(args, Mapping):
            raise MalformedPlanError(f"step {idx}: 'args' must be an object")
        out.append(
            Step(
                op=op.strip(),
                args=dict(args),
                tool_caps=_string_list(raw, "tool_caps", idx),
                data_caps=_string_list(raw, "data_caps", idx),
                deps=_deps(raw, idx),
            )
        )
    return out


def plan_confidence(plan: Sequence[Any]) -> float:
    """
    Score raw planner output.

    Starts at 0.7 and adds 0.1 for a non-empty plan, 0.1 when every step is
    well formed and 0.1 when every dependency index is in range.
    """
    score = 0.7
    steps = list(plan)
    if steps:
        score += 0.1

    def _well_formed(s: Any) -> bool:
        return (
            isinstance(s, Mapping)
            and isinstance(s.get("op"), str)
            and isinstance(s.get("tool_caps", []), list)
            and isinstance(s.get("data_caps", []), list)
            and isinstance(s.get("deps", []), list)
        )

    if all(_well_formed(s) for s in steps):
        score += 0.1
        total = len(steps)
        if all(isinstance(d, int) and 0 <= d < total for s in steps for d in s.get("deps") or []):
            score += 0.1
    return round(max(0.0, min(1.0, score)), 4)
