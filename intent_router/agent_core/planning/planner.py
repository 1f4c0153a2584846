"""Planner collaborator.

``StructuredPlanner`` turns a prompt into candidate plan steps.

Responsibilities
----------------

- Convert a ``PlannerRequest`` (prompt text plus prioritized context items)
  into a list of ``Step`` objects and a confidence score.
- Run every LLM answer through ``normalize_plan`` so malformed output is
  rejected at the boundary.

The planner is intentionally constrained:

- It does not execute anything.
- It does not decide whether a plan is authorized; the policy engine does.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from pydantic_ai import Agent

from ..capabilities import CapabilityRegistry, OperationRequirementMap
from ..schemas.domain import CapabilityKind, ContextItem, Step
from .steps import PlannerStep, normalize_plan, plan_confidence

logger = logging.getLogger(__name__)

KEYWORD_PLANNER_CONFIDENCE = 0.85

_SYSTEM_PROMPT = (
    "You are a planning agent. Break the user request into a minimal sequence of steps. "
    "Each step names one operation, its arguments, the tool capabilities and data capabilities it needs, "
    "and the indices of earlier steps whose results it uses. A step may only depend on earlier steps. "
    "Only use the listed operations and capability ids."
)


@dataclass(frozen=True)
class PlannerRequest:
    prompt: str
    context: Sequence[ContextItem] = ()


@dataclass(frozen=True)
class PlannerResult:
    steps: List[Step]
    confidence: float
    raw: List[Any] = field(default_factory=list)


def _keyword_steps(prompt: str) -> List[dict[str, Any]]:
    text = prompt.lower()
    if any(k in text for k in ("greeting", "hello", "welcome")):
        return [
            {
                "op": "create_document",
                "args": {"title": "User Greeting", "content": "Hello! Welcome to our platform.", "format": "text"},
                "tool_caps": ["WRITE_FILE"],
                "data_caps": ["share_with:public"],
                "deps": [],
            }
        ]
    if any(k in text for k in ("email", "send", "message")):
        return [
            {
                "op": "create_document",
                "args": {"title": "Message Draft", "content": prompt, "format": "text"},
                "tool_caps": ["WRITE_FILE"],
                "data_caps": ["share_with:team"],
                "deps": [],
            },
            {
                "op": "send_message",
                "args": {"channel": "email", "to": "user@example.com", "subject": "Message"},
                "tool_caps": ["SEND_EMAIL"],
                "data_caps": ["share_with:team"],
                "deps": [0],
            },
        ]
    if any(k in text for k in ("search", "find")):
        return [
            {
                "op": "search_entities",
                "args": {"query": prompt, "limit": 10},
                "tool_caps": ["READ_DATABASE"],
                "data_caps": [],
                "deps": [],
            }
        ]
    if any(k in text for k in ("analyze", "process")):
        return [
            {
                "op": "analyze_content",
                "args": {"content": prompt, "analysis_type": "general"},
                "tool_caps": [],
                "data_caps": [],
                "deps": [],
            }
        ]
    return [
        {
            "op": "create_document",
            "args": {"title": "Response to Request", "content": f"Response to: {prompt}", "format": "text"},
            "tool_caps": ["WRITE_FILE"],
            "data_caps": ["share_with:team"],
            "deps": [],
        }
    ]


class StructuredPlanner:
    """Planner that produces validated ``Step`` lists.

    The planner supports two modes:

    - ``model=None``: deterministic keyword planner. Useful for tests and for
      deployments that want to avoid LLM calls.
    - ``model!=None``: uses Pydantic AI to produce a list of ``PlannerStep``
      objects which are then normalized like any other untrusted payload.
    """

    def __init__(
        self,
        *,
        model: Any | None = None,
        registry: Optional[CapabilityRegistry] = None,
        operations: Optional[OperationRequirementMap] = None,
        context_budget: int = 4000,
    ) -> None:
        """
        Initialize the planner.

        Args:
            model: A pydantic-ai model instance or model string. If None, the
                planner operates in deterministic keyword mode.
            registry: Used to list capability ids in the LLM prompt.
            operations: Used to list operations in the LLM prompt.
            context_budget: Maximum characters of context items to include.
        """
        self._model = model
        self._registry = registry
        self._operations = operations
        self._context_budget = context_budget

    @property
    def uses_model(self) -> bool:
        return self._model is not None

    async def plan(self, request: PlannerRequest) -> PlannerResult:
        """Generate candidate steps for a prompt.

        Raises
        ------
        MalformedPlanError
            If the model output fails boundary validation.
        """
        if self._model is None:
            raw = _keyword_steps(request.prompt)
            return PlannerResult(steps=normalize_plan(raw), confidence=KEYWORD_PLANNER_CONFIDENCE, raw=raw)

        agent: Agent = Agent(
            self._model,
            output_type=List[PlannerStep],
            system_prompt=_SYSTEM_PROMPT,
        )
        result = await agent.run(self._build_prompt(request))
        raw = [s.model_dump() for s in result.output]
        steps = normalize_plan(raw)
        confidence = plan_confidence(raw)
        logger.debug(f"Planner produced {len(steps)} step(s) with confidence {confidence}")
        return PlannerResult(steps=steps, confidence=confidence, raw=raw)

    def _build_prompt(self, request: PlannerRequest) -> str:
        lines: List[str] = []
        if self._operations is not None:
            lines.append("Available operations (operation: required tool capabilities):")
            for op, caps in self._operations.as_dict().items():
                lines.append(f"- {op}: {', '.join(caps) if caps else 'none'}")
        if self._registry is not None:
            tool_ids = sorted(self._registry.valid_ids(CapabilityKind.tool))
            data_ids = sorted(self._registry.valid_ids(CapabilityKind.data))
            lines.append(f"Tool capabilities: {', '.join(tool_ids)}")
            lines.append(f"Data capabilities: {', '.join(data_ids)}")

        context = self._select_context(request.context)
        if context:
            lines.append("Context:")
            lines.extend(f"- {c}" for c in context)

        lines.append("")
        lines.append(f"Request: {request.prompt}")
        return "\n".join(lines)

    def _select_context(self, items: Sequence[ContextItem]) -> List[str]:
        """Include context items by descending priority until the budget is spent."""
        chosen: List[str] = []
        used = 0
        for item in sorted(items, key=lambda c: c.priority, reverse=True):
            if used + len(item.content) > self._context_budget:
                continue
            chosen.append(item.content)
            used += len(item.content)
        return chosen
