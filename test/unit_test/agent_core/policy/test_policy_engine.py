from __future__ import annotations

import pytest

from intent_router.agent_core.capabilities import CapabilityRegistry
from intent_router.agent_core.policy import PolicyEngine, create_approval_context
from intent_router.agent_core.schemas.domain import Capability, CapabilityKind, Entity, Step, ViolationKind


def _entity(*caps: str) -> Entity:
    return Entity(content="secret report", capabilities=list(caps))


def test_valid_plan_has_no_violations(policy: PolicyEngine) -> None:
    steps = [
        Step(op="create_document", args={"title": "t", "content": "c"}, tool_caps=["WRITE_FILE"], data_caps=["share_with:team"]),
        Step(op="send_message", args={"to": "a@b.c"}, tool_caps=["SEND_EMAIL"], data_caps=["share_with:team"], deps=[0]),
    ]
    assert policy.validate_plan(steps) == []


def test_missing_tool_capability(policy: PolicyEngine) -> None:
    violations = policy.validate_plan([Step(op="send_message", args={"to": "x"})])
    assert len(violations) == 1
    v = violations[0]
    assert v.violation_type == ViolationKind.missing_tool_cap
    assert v.step_index == 0
    assert v.required == ["SEND_EMAIL"]
    assert v.message == "Step 0 (send_message) missing required tool capabilities: SEND_EMAIL"


def test_invalid_declared_tool_capability(policy: PolicyEngine) -> None:
    violations = policy.validate_plan([Step(op="analyze_content", tool_caps=["LAUNCH_ROCKETS"])])
    assert [v.violation_type for v in violations] == [ViolationKind.missing_tool_cap]
    assert violations[0].message == "Step 0 declares invalid tool capabilities: LAUNCH_ROCKETS"


def test_data_capability_declared_as_tool_is_invalid(policy: PolicyEngine) -> None:
    violations = policy.validate_plan([Step(op="analyze_content", tool_caps=["share_with:team"])])
    assert len(violations) == 1
    assert violations[0].required == ["share_with:team"]


def test_invalid_declared_data_capability(policy: PolicyEngine) -> None:
    violations = policy.validate_plan([Step(op="analyze_content", data_caps=["share_with:mars"])])
    assert len(violations) == 1
    assert violations[0].violation_type == ViolationKind.missing_data_cap
    assert violations[0].message == "Step 0 declares invalid data capabilities: share_with:mars"


def test_missing_data_capability_for_referenced_entity(policy: PolicyEngine) -> None:
    entity = _entity("pii_allowed", "share_with:team")
    step = Step(op="analyze_content", args={"nested": {"ids": [entity.id]}}, data_caps=["share_with:team"])
    violations = policy.validate_plan([step], [entity])
    assert len(violations) == 1
    v = violations[0]
    assert v.violation_type == ViolationKind.missing_data_cap
    assert v.required == ["pii_allowed", "share_with:team"]
    assert v.message == f"Step 0 missing data capabilities for entity {entity.id}: pii_allowed"


def test_unknown_entity_reference_is_ignored(policy: PolicyEngine) -> None:
    step = Step(op="analyze_content", args={"entity_id": "123e4567-e89b-42d3-a456-426614174000"})
    assert policy.validate_plan([step], []) == []


def test_entity_tags_that_are_not_registered_data_caps_are_ignored(policy: PolicyEngine) -> None:
    entity = _entity("legacy-tag")
    assert policy.validate_plan([Step(op="analyze_content", args={"id": entity.id})], {entity.id: entity}) == []


@pytest.mark.parametrize(
    "deps,expected",
    [
        ([1], "Step 0 cannot depend on step 1 (circular or forward dependency)"),
        ([0], "Step 0 cannot depend on step 0 (circular or forward dependency)"),
        ([5], "Step 0 has invalid dependency: 5 (valid range: 0-1)"),
        ([-1], "Step 0 has invalid dependency: -1 (valid range: 0-1)"),
    ],
)
def test_invalid_dependencies(policy: PolicyEngine, deps, expected: str) -> None:
    steps = [Step(op="analyze_content", deps=deps), Step(op="analyze_content")]
    violations = policy.validate_plan(steps)
    assert [v.message for v in violations] == [expected]
    assert violations[0].violation_type == ViolationKind.invalid_dependency


def test_one_violation_per_bad_dependency(policy: PolicyEngine) -> None:
    steps = [Step(op="analyze_content"), Step(op="analyze_content", deps=[1, 7, 0])]
    violations = policy.validate_plan(steps)
    assert [v.available for v in violations] == [["1"], ["7"]]


def test_violation_order_tool_data_dependency(policy: PolicyEngine) -> None:
    entity = _entity("pii_allowed")
    steps = [
        Step(op="analyze_content"),
        Step(op="send_message", args={"doc": entity.id}, deps=[3]),
    ]
    kinds = [v.violation_type for v in policy.validate_plan(steps, [entity])]
    assert kinds == [ViolationKind.missing_tool_cap, ViolationKind.missing_data_cap, ViolationKind.invalid_dependency]


def test_validate_step_matches_plan_validation(policy: PolicyEngine) -> None:
    entity = _entity("financial_data_allowed")
    step = Step(op="fetch_data", args={"entity_id": entity.id}, tool_caps=["READ_FILE"])
    single = policy.validate_step(step, [entity], step_index=0)
    plan = policy.validate_plan([step], [entity])
    assert [v.model_dump() for v in single] == [v.model_dump() for v in plan]


def test_check_step_execution_scans_context(policy: PolicyEngine) -> None:
    entity = _entity("medical_data_allowed")
    step = Step(op="analyze_content", deps=[0])
    context = {"step_0_result": {"document_id": entity.id}}

    assert policy.check_step_execution(step, [entity], step_index=1).allowed is True
    result = policy.check_step_execution(step, [entity], step_index=1, context=context)
    assert result.allowed is False
    assert "medical_data_allowed" in result.reason


def test_registry_changes_apply_on_next_validation(registry: CapabilityRegistry, policy: PolicyEngine) -> None:
    step = Step(op="analyze_content", tool_caps=["SEND_SLACK"])
    assert len(policy.validate_plan([step])) == 1
    registry.add(Capability(id="SEND_SLACK", kind=CapabilityKind.tool, scope="chat"))
    assert policy.validate_plan([step]) == []


def test_capability_addition_is_monotonic(policy: PolicyEngine) -> None:
    entity = _entity("pii_allowed", "share_with:team")
    base = Step(op="send_message", args={"doc": entity.id}, tool_caps=["SEND_EMAIL"], data_caps=["share_with:team"])
    wider = base.model_copy(update={"data_caps": ["share_with:team", "pii_allowed"]})
    assert len(policy.validate_plan([base], [entity])) == 1
    assert policy.validate_plan([wider], [entity]) == []


def test_approval_context_summaries(policy: PolicyEngine) -> None:
    assert create_approval_context([]).requires_approval is False

    violations = policy.validate_plan([Step(op="send_message"), Step(op="analyze_content", deps=[1])])
    ctx = create_approval_context(violations)
    assert ctx.requires_approval is True
    assert ctx.blocked is True
    assert ctx.summary == "Plan requires approval: 1 tool capability violation(s), 1 dependency violation(s)"
    assert ctx.details == [v.message for v in violations]
