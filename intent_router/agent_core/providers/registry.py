"""Tool provider registry.

Adding a provider:

1. Probes ``list_tools()`` under a timeout. Nothing is registered if the probe
   fails or times out.
2. Registers the custom tool capability ``MCP_TOOL:{name}``.
3. Registers each tool as an operation requiring that capability.
4. Registers an executor tool that forwards calls to the provider.

Removing a provider reverses every step.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from ..capabilities import CapabilityRegistry, OperationRequirementMap
from ..errors import ToolProviderError
from ..schemas.domain import Capability, CapabilityKind
from ..tools import ToolContext, ToolExecutor, ToolResult
from .base import ProviderTool, ToolProvider, ToolProviderConfig, ToolProviderInfo, provider_capability_id
from .mcp import McpToolProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderToolAdapter:
    """Executor ``Tool`` forwarding to a provider tool."""

    provider: ToolProvider
    name: str
    description: str
    required_capabilities: tuple[str, ...]

    async def run(self, ctx: ToolContext, *, args: Dict[str, Any]) -> ToolResult:
        out = await self.provider.call_tool(self.name, dict(args))
        if out.get("is_error"):
            return ToolResult(ok=False, output={"error": out.get("text") or f"{self.name} failed"})
        return ToolResult(
            ok=True,
            output={"mcp_result": out, "server_name": self.provider.name, "tool_name": self.name},
        )


@dataclass
class _Registration:
    config: ToolProviderConfig
    provider: ToolProvider
    tools: List[ProviderTool]

    def info(self) -> ToolProviderInfo:
        return ToolProviderInfo(
            name=self.config.name,
            transport=self.config.transport,
            capability_id=provider_capability_id(self.config.name),
            tools=list(self.tools),
        )


class ToolProviderRegistry:
    """Registers tool providers with the capability registry, operation map and executor."""

    def __init__(
        self,
        *,
        capabilities: CapabilityRegistry,
        operations: OperationRequirementMap,
        executor: ToolExecutor,
        probe_timeout: float = 10.0,
        provider_factory: Callable[[ToolProviderConfig], ToolProvider] = McpToolProvider,
    ) -> None:
        self._capabilities = capabilities
        self._operations = operations
        self._executor = executor
        self._probe_timeout = probe_timeout
        self._factory = provider_factory
        self._providers: Dict[str, _Registration] = {}
        self._lock = asyncio.Lock()

    async def add(self, config: ToolProviderConfig) -> ToolProviderInfo:
        """
        Probe and register a provider.

        Raises:
            ToolProviderError: On duplicate name, a tool named like a
                registered tool or operation, or a failed or timed out probe.
        """
        async with self._lock:
            if config.name in self._providers:
                raise ToolProviderError(f"Tool provider '{config.name}' already registered")

            provider = self._factory(config)
            try:
                tools = await asyncio.wait_for(provider.list_tools(), timeout=self._probe_timeout)
            except asyncio.TimeoutError as e:
                raise ToolProviderError(
                    f"Tool provider '{config.name}' did not answer within {self._probe_timeout}s"
                ) from e
            except Exception as e:
                raise ToolProviderError(f"Tool provider '{config.name}' probe failed: {e}") from e

            known = {t.name for t in self._executor.tools()} | set(self._operations.operations())
            clashes = sorted(t.name for t in tools if t.name in known)
            if clashes:
                raise ToolProviderError(
                    f"Tool provider '{config.name}' tools clash with registered tools or operations: {', '.join(clashes)}"
                )

            cap_id = provider_capability_id(config.name)
            self._capabilities.add(
                Capability(
                    id=cap_id,
                    kind=CapabilityKind.tool,
                    scope="mcp",
                    description=f"Access to MCP server: {config.name}",
                    metadata={"provider": config.name, "transport": config.transport},
                ),
                replace=True,
            )
            for tool in tools:
                self._operations.register(tool.name, [cap_id])
                self._executor.register_tool(
                    ProviderToolAdapter(
                        provider=provider,
                        name=tool.name,
                        description=tool.description,
                        required_capabilities=(cap_id,),
                    )
                )

            reg = _Registration(config=config, provider=provider, tools=tools)
            self._providers[config.name] = reg
            logger.info(f"Registered tool provider '{config.name}' with {len(tools)} tool(s)")
            return reg.info()

    async def remove(self, name: str) -> bool:
        async with self._lock:
            reg = self._providers.pop(name, None)
            if reg is None:
                return False
            for tool in reg.tools:
                self._operations.unregister(tool.name)
                self._executor.unregister_tool(tool.name)
            self._capabilities.remove(provider_capability_id(name))
            logger.info(f"Removed tool provider '{name}'")
            return True

    def get(self, name: str) -> ToolProviderInfo | None:
        reg = self._providers.get(name)
        return reg.info() if reg is not None else None

    def list(self) -> List[ToolProviderInfo]:
        return [self._providers[name].info() for name in sorted(self._providers)]
