from __future__ import annotations

from intent_router.agent_core.capabilities import DEFAULT_OPERATION_REQUIREMENTS, OperationRequirementMap


def test_defaults_loaded() -> None:
    ops = OperationRequirementMap.with_defaults()
    assert ops.required_tool_caps("send_message") == frozenset({"SEND_EMAIL"})
    assert ops.required_tool_caps("fetch_data") == frozenset({"READ_FILE", "READ_DATABASE"})
    assert set(ops.operations()) == set(DEFAULT_OPERATION_REQUIREMENTS)


def test_unknown_operation_requires_nothing() -> None:
    ops = OperationRequirementMap.with_defaults()
    assert ops.required_tool_caps("totally_unknown") == frozenset()
    assert ops.required_tool_caps("analyze_content") == frozenset()


def test_register_last_wins_and_unregister() -> None:
    ops = OperationRequirementMap()
    ops.register("post_slack", ["MCP_TOOL:slack"])
    ops.register("post_slack", ["SEND_WEBHOOK"])
    assert ops.required_tool_caps("post_slack") == frozenset({"SEND_WEBHOOK"})
    assert ops.as_dict() == {"post_slack": ["SEND_WEBHOOK"]}

    assert ops.unregister("post_slack") is True
    assert ops.unregister("post_slack") is False
    assert ops.operations() == []
