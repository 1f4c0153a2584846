from __future__ import annotations

import asyncio
from typing import Any, Dict, List

import pytest

from intent_router.agent_core.capabilities import CapabilityRegistry, OperationRequirementMap, system_capabilities
from intent_router.agent_core.errors import ToolProviderError
from intent_router.agent_core.policy import PolicyEngine
from intent_router.agent_core.providers import (
    ProviderTool,
    ToolProviderConfig,
    ToolProviderRegistry,
    provider_capability_id,
)
from intent_router.agent_core.schemas.domain import CapabilityKind, Step
from intent_router.agent_core.tools import ExecutorRequest, ToolExecutor, default_tools


class _FakeProvider:
    def __init__(self, config: ToolProviderConfig, tools: List[ProviderTool], *, delay: float = 0.0, fail: bool = False) -> None:
        self._config = config
        self._tools = tools
        self._delay = delay
        self._fail = fail
        self.calls: List[tuple[str, Dict[str, Any]]] = []

    @property
    def name(self) -> str:
        return self._config.name

    async def list_tools(self) -> List[ProviderTool]:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._fail:
            raise ConnectionError("refused")
        return list(self._tools)

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((tool_name, arguments))
        if arguments.get("fail"):
            return {"is_error": True, "content": [], "text": "issue tracker unavailable"}
        return {"is_error": False, "content": [{"type": "text", "text": "created"}], "text": "created"}


def _config(name: str = "tracker") -> ToolProviderConfig:
    return ToolProviderConfig(name=name, transport="sse", url="http://mock/sse")


@pytest.fixture
def parts() -> Dict[str, Any]:
    return {
        "capabilities": CapabilityRegistry(),
        "operations": OperationRequirementMap.with_defaults(),
        "executor": ToolExecutor(default_tools()),
    }


def _registry(parts: Dict[str, Any], tools: List[ProviderTool], **provider_kw: Any) -> ToolProviderRegistry:
    def _factory(config: ToolProviderConfig) -> _FakeProvider:
        return _FakeProvider(config, tools, **provider_kw)

    return ToolProviderRegistry(probe_timeout=0.05, provider_factory=_factory, **parts)


@pytest.mark.asyncio
async def test_add_registers_capability_operations_and_tools(parts) -> None:
    registry = _registry(parts, [ProviderTool(name="create_issue", description="Open an issue")])

    info = await registry.add(_config())

    cap_id = provider_capability_id("tracker")
    assert info.capability_id == cap_id == "MCP_TOOL:tracker"
    assert [t.name for t in info.tools] == ["create_issue"]
    cap = parts["capabilities"].get(cap_id)
    assert cap is not None and cap.kind == CapabilityKind.tool and cap.scope == "mcp"
    assert parts["operations"].required_tool_caps("create_issue") == frozenset({cap_id})
    assert parts["executor"].get("create_issue").required_capabilities == (cap_id,)
    assert [p.name for p in registry.list()] == ["tracker"]
    assert registry.get("tracker") == info


@pytest.mark.asyncio
async def test_adapter_forwards_calls_and_maps_errors(parts) -> None:
    registry = _registry(parts, [ProviderTool(name="create_issue")])
    await registry.add(_config())
    executor: ToolExecutor = parts["executor"]

    ok = await executor.execute_step(ExecutorRequest(step=Step(op="create_issue", args={"title": "x"}), step_index=0))
    bad = await executor.execute_step(ExecutorRequest(step=Step(op="create_issue", args={"fail": True}), step_index=0))

    assert ok.error is None
    assert ok.result["server_name"] == "tracker"
    assert ok.result["tool_name"] == "create_issue"
    assert bad.error == "issue tracker unavailable"


@pytest.mark.asyncio
async def test_remove_reverses_registration(parts) -> None:
    registry = _registry(parts, [ProviderTool(name="create_issue")])
    await registry.add(_config())

    assert await registry.remove("tracker") is True
    assert await registry.remove("tracker") is False

    assert parts["capabilities"].get("MCP_TOOL:tracker") is None
    assert "create_issue" not in parts["operations"].operations()
    assert "create_issue" not in [t.name for t in parts["executor"].tools()]
    assert registry.list() == []


@pytest.mark.asyncio
async def test_duplicate_name_is_rejected(parts) -> None:
    registry = _registry(parts, [ProviderTool(name="create_issue")])
    await registry.add(_config())
    with pytest.raises(ToolProviderError, match="already registered"):
        await registry.add(_config())


@pytest.mark.asyncio
async def test_tool_name_clash_registers_nothing(parts) -> None:
    registry = _registry(parts, [ProviderTool(name="send_message"), ProviderTool(name="create_issue")])

    with pytest.raises(ToolProviderError, match="send_message"):
        await registry.add(_config())

    assert parts["capabilities"].get("MCP_TOOL:tracker") is None
    assert parts["operations"].required_tool_caps("send_message") == frozenset({"SEND_EMAIL"})
    assert registry.list() == []


@pytest.mark.asyncio
async def test_tool_named_like_guarded_operation_is_rejected(parts) -> None:
    registry = _registry(parts, [ProviderTool(name="execute_command")])
    policy = PolicyEngine(CapabilityRegistry(system_capabilities(), is_system=True), parts["operations"])

    with pytest.raises(ToolProviderError, match="execute_command"):
        await registry.add(_config("shell"))
    assert await registry.remove("shell") is False

    assert parts["operations"].required_tool_caps("execute_command") == frozenset({"EXECUTE_COMMAND"})
    violations = policy.validate_plan([Step(op="execute_command", args={"command": "ls"})])
    assert [v.message for v in violations] == [
        "Step 0 (execute_command) missing required tool capabilities: EXECUTE_COMMAND"
    ]


@pytest.mark.asyncio
async def test_probe_timeout_registers_nothing(parts) -> None:
    registry = _registry(parts, [ProviderTool(name="create_issue")], delay=1.0)
    with pytest.raises(ToolProviderError, match="did not answer"):
        await registry.add(_config())
    assert parts["capabilities"].get("MCP_TOOL:tracker") is None


@pytest.mark.asyncio
async def test_probe_failure_registers_nothing(parts) -> None:
    registry = _registry(parts, [ProviderTool(name="create_issue")], fail=True)
    with pytest.raises(ToolProviderError, match="probe failed: refused"):
        await registry.add(_config())
    assert registry.list() == []


def test_config_requires_endpoint() -> None:
    with pytest.raises(ValueError):
        ToolProviderConfig(name="local", transport="stdio")
    with pytest.raises(ValueError):
        ToolProviderConfig(name="remote", transport="sse")
    assert ToolProviderConfig(name="local", command="tracker-mcp").transport == "stdio"
