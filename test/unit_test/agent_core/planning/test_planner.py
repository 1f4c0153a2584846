from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

import pytest

from intent_router.agent_core.capabilities import CapabilityRegistry, OperationRequirementMap
from intent_router.agent_core.errors import MalformedPlanError
from intent_router.agent_core.planning import PlannerRequest, PlannerStep, StructuredPlanner
from intent_router.agent_core.schemas.domain import ContextItem, Step


@pytest.mark.asyncio
async def test_keyword_planner_when_model_is_none() -> None:
    planner = StructuredPlanner(model=None)
    out = await planner.plan(PlannerRequest(prompt="Say hello to the new user"))

    assert planner.uses_model is False
    assert out.confidence == 0.85
    assert out.steps == [
        Step(
            op="create_document",
            args={"title": "User Greeting", "content": "Hello! Welcome to our platform.", "format": "text"},
            tool_caps=["WRITE_FILE"],
            data_caps=["share_with:public"],
        )
    ]


@pytest.mark.asyncio
async def test_keyword_planner_message_plan_has_dependency() -> None:
    out = await StructuredPlanner().plan(PlannerRequest(prompt="Send an email with the report"))
    assert [s.op for s in out.steps] == ["create_document", "send_message"]
    assert out.steps[1].deps == [0]
    assert out.steps[1].tool_caps == ["SEND_EMAIL"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "prompt,op",
    [
        ("find invoices from March", "search_entities"),
        ("analyze this paragraph", "analyze_content"),
        ("write a haiku", "create_document"),
    ],
)
async def test_keyword_planner_routes(prompt: str, op: str) -> None:
    out = await StructuredPlanner().plan(PlannerRequest(prompt=prompt))
    assert out.steps[0].op == op


@dataclass
class _FakeResult:
    output: List[Any]


def _fake_agent_class(output: List[Any]):
    class _FakeAgent:
        instances: List["_FakeAgent"] = []

        def __init__(self, model: Any, *, output_type: Any, system_prompt: str):
            self.model = model
            self.output_type = output_type
            self.system_prompt = system_prompt
            self.last_prompt: str | None = None
            _FakeAgent.instances.append(self)

        async def run(self, prompt: str) -> _FakeResult:
            self.last_prompt = prompt
            return _FakeResult(output=output)

    return _FakeAgent


@pytest.mark.asyncio
async def test_planner_uses_pydantic_ai_agent(monkeypatch: pytest.MonkeyPatch, registry: CapabilityRegistry) -> None:
    import intent_router.agent_core.planning.planner as planner_mod

    fake = _fake_agent_class(
        [
            PlannerStep(op="create_document", args={"title": "t", "content": "c"}, tool_caps=["WRITE_FILE"]),
            PlannerStep(op="send_message", args={"to": "a"}, tool_caps=["SEND_EMAIL"], deps=[0]),
        ]
    )
    monkeypatch.setattr(planner_mod, "Agent", fake)

    planner = StructuredPlanner(
        model=object(),
        registry=registry,
        operations=OperationRequirementMap.with_defaults(),
        context_budget=20,
    )
    out = await planner.plan(
        PlannerRequest(
            prompt="Draft and send",
            context=[ContextItem(content="low priority", priority=1), ContextItem(content="important", priority=9)],
        )
    )

    assert [s.op for s in out.steps] == ["create_document", "send_message"]
    assert out.confidence == 1.0
    agent = fake.instances[-1]
    assert agent.output_type == List[PlannerStep]
    assert "- send_message: SEND_EMAIL" in agent.last_prompt
    assert "share_with:team" in agent.last_prompt
    assert "- important" in agent.last_prompt
    assert "low priority" not in agent.last_prompt
    assert agent.last_prompt.endswith("Request: Draft and send")


@pytest.mark.asyncio
async def test_planner_out_of_range_dependency_lowers_confidence(monkeypatch: pytest.MonkeyPatch) -> None:
    import intent_router.agent_core.planning.planner as planner_mod

    monkeypatch.setattr(planner_mod, "Agent", _fake_agent_class([PlannerStep(op="analyze_content", deps=[4])]))
    out = await StructuredPlanner(model=object()).plan(PlannerRequest(prompt="x"))
    assert out.confidence == 0.9
    assert out.steps[0].deps == [4]


@pytest.mark.asyncio
async def test_planner_rejects_blank_operation(monkeypatch: pytest.MonkeyPatch) -> None:
    import intent_router.agent_core.planning.planner as planner_mod

    monkeypatch.setattr(planner_mod, "Agent", _fake_agent_class([PlannerStep(op="  ")]))
    with pytest.raises(MalformedPlanError):
        await StructuredPlanner(model=object()).plan(PlannerRequest(prompt="x"))


@pytest.mark.asyncio
async def test_planner_with_testmodel_produces_valid_steps() -> None:
    from pydantic_ai.models.test import TestModel

    planner = StructuredPlanner(model=TestModel())
    out = await planner.plan(PlannerRequest(prompt="Research pricing"))

    assert isinstance(out.steps, list)
    assert all(isinstance(s, Step) for s in out.steps)
    assert 0.7 <= out.confidence <= 1.0
