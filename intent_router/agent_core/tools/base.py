"""Executor collaborator contract and tool protocol.

The plan execution engine hands one authorized step at a time to a
``StepExecutor``. The default executor, ``ToolExecutor``, dispatches the step's
operation to a named ``Tool``.

Tools should:

- return structured, JSON-serializable outputs in ``ToolResult.output``,
- propose produced entities through ``ToolResult.entities``,
- avoid performing policy decisions themselves (policy is enforced by the
  engine before invocation and again on the produced entities' tags).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence

from pydantic import Field

from ..schemas.base import BaseSchema
from ..schemas.domain import Entity, Step


class ExecutorRequest(BaseSchema):
    step: Step
    step_index: int
    plan_id: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class ExecutorResponse(BaseSchema):
    """Executor output, validated at the boundary before the engine uses it."""

    result: Any = None
    entities: List[Entity] = Field(default_factory=list)
    error: Optional[str] = None


class StepExecutor(Protocol):
    """Protocol for the external execution collaborator."""

    async def execute_step(self, request: ExecutorRequest) -> ExecutorResponse: ...


@dataclass(frozen=True)
class ToolDeps:
    """Optional backends the default tools delegate to."""

    get_entity: Optional[Callable[[str], Awaitable[Optional[Entity]]]] = None
    search_entities: Optional[Callable[[str, int], Awaitable[Sequence[Entity]]]] = None
    send_message: Optional[Callable[..., Awaitable[Any]]] = None


@dataclass(frozen=True)
class ToolContext:
    """Execution context passed to tool implementations.

    Attributes
    ----------
    step:
        The authorized step being executed.
    step_index:
        Position of the step in its plan.
    context:
        Results of the step's declared dependencies keyed ``step_{n}_result``.
    deps:
        Backends bundled in ``ToolDeps``.
    """

    step: Step
    step_index: int
    context: Dict[str, Any]
    deps: Any


@dataclass(frozen=True)
class ToolResult:
    """Structured tool execution result."""

    ok: bool
    output: Dict[str, Any]
    entities: List[Entity] = field(default_factory=list)


class Tool(Protocol):
    """Protocol for tool implementations."""

    name: str
    description: str
    required_capabilities: tuple[str, ...]

    async def run(self, ctx: ToolContext, *, args: Dict[str, Any]) -> ToolResult: ...
