from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import Field

from .base import BaseSchema, FrozenSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


class CapabilityKind(str, Enum):
    tool = "ToolCap"
    data = "DataCap"


class PlanStatus(str, Enum):
    pending = "pending"
    executing = "executing"
    completed = "completed"
    failed = "failed"


class ViolationKind(str, Enum):
    missing_tool_cap = "missing_tool_cap"
    missing_data_cap = "missing_data_cap"
    invalid_dependency = "invalid_dependency"


class ExecutionStatus(str, Enum):
    completed = "completed"
    failed = "failed"
    already_executing = "already_executing"
    already_completed = "already_completed"


class SubmitStatus(str, Enum):
    approved = "approved"
    policy_violation = "policy_violation"
    planning_failed = "planning_failed"


class Capability(BaseSchema):
    """A tool or data capability known to the registry.

    ``is_system`` marks capabilities seeded at bootstrap. Those can never be
    updated or removed.
    """

    id: str
    kind: CapabilityKind
    scope: str
    description: str = ""
    is_system: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class Step(BaseSchema):
    """One operation of a plan.

    ``deps`` holds indices of earlier steps in the same plan whose results this
    step may read.
    """

    op: str
    args: Dict[str, Any] = Field(default_factory=dict)
    tool_caps: List[str] = Field(default_factory=list)
    data_caps: List[str] = Field(default_factory=list)
    deps: List[int] = Field(default_factory=list)


class Prompt(FrozenSchema):
    id: str = Field(default_factory=_new_id)
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utc_now)


class Plan(BaseSchema):
    id: str = Field(default_factory=_new_id)
    prompt_id: str
    steps: List[Step] = Field(default_factory=list)
    status: PlanStatus = PlanStatus.pending
    confidence: Optional[float] = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class Entity(BaseSchema):
    """A content item carrying data capability tags."""

    id: str = Field(default_factory=_new_id)
    content: str
    capabilities: List[str] = Field(default_factory=list)
    embedding: Optional[List[float]] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utc_now)


class Event(FrozenSchema):
    """Append-only record of one step execution attempt."""

    id: str = Field(default_factory=_new_id)
    plan_id: str
    step_index: int
    sequence: int = 0
    op: str
    produces: List[str] = Field(default_factory=list)
    consumes: List[str] = Field(default_factory=list)
    result: Any = None
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=_utc_now)


class PolicyViolation(BaseSchema):
    step_index: int
    violation_type: ViolationKind
    required: List[str] = Field(default_factory=list)
    available: List[str] = Field(default_factory=list)
    message: str


class ApprovalContext(BaseSchema):
    """Human-facing summary of a set of violations."""

    summary: str
    details: List[str] = Field(default_factory=list)
    requires_approval: bool = False
    blocked: bool = False


class ContextItem(BaseSchema):
    content: str
    priority: int = 0


class PlanExecutionResult(BaseSchema):
    plan_id: str
    status: ExecutionStatus
    total_steps: int = 0
    executed_steps: int = 0
    failed_steps: int = 0
    events: List[Event] = Field(default_factory=list)
    error: Optional[str] = None


class PromptSubmission(BaseSchema):
    prompt_id: str
    plan_id: Optional[str] = None
    status: SubmitStatus
    confidence: Optional[float] = None
    step_count: int = 0
    steps: List[Step] = Field(default_factory=list)
    violations: List[PolicyViolation] = Field(default_factory=list)
    requires_approval: bool = False
    approval: Optional[ApprovalContext] = None
    error: Optional[str] = None


class LineageEdge(BaseSchema):
    entity_id: str
    from_step: Optional[int] = None
    to_step: int


class PlanLineage(BaseSchema):
    """Produces/consumes graph re-derived from a plan's event log."""

    plan_id: str
    producers: Dict[str, int] = Field(default_factory=dict)
    consumers: Dict[str, List[int]] = Field(default_factory=dict)
    edges: List[LineageEdge] = Field(default_factory=list)
    failed_step: Optional[int] = None


class OperationInfo(BaseSchema):
    """An operation a step may name, with its requirements."""

    name: str
    required_tool_caps: List[str] = Field(default_factory=list)
    description: str = ""
    executable: bool = False
