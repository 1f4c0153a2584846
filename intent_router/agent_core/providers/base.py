"""Tool provider contracts.

A tool provider is an external server (e.g. an MCP server) that exposes tools
discovered at runtime. Each provider contributes one custom tool capability,
``MCP_TOOL:{name}``, which every one of its tools requires.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Protocol

from pydantic import Field, model_validator

from ..schemas.base import BaseSchema

TransportKind = Literal["stdio", "sse", "streamable_http"]


def provider_capability_id(name: str) -> str:
    return f"MCP_TOOL:{name}"


class ToolProviderConfig(BaseSchema):
    """Connection settings for a tool provider.

    ``stdio`` providers need ``command``; ``sse`` and ``streamable_http``
    providers need ``url``.
    """

    name: str = Field(min_length=1, max_length=100)
    transport: TransportKind = "stdio"
    command: Optional[str] = None
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    url: Optional[str] = None

    @model_validator(mode="after")
    def _check_endpoint(self) -> "ToolProviderConfig":
        if self.transport == "stdio" and not self.command:
            raise ValueError("stdio tool providers require 'command'")
        if self.transport != "stdio" and not self.url:
            raise ValueError(f"{self.transport} tool providers require 'url'")
        return self


class ProviderTool(BaseSchema):
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=dict)


class ToolProviderInfo(BaseSchema):
    name: str
    transport: TransportKind
    capability_id: str
    tools: List[ProviderTool] = Field(default_factory=list)


class ToolProvider(Protocol):
    """Protocol for tool provider clients."""

    @property
    def name(self) -> str: ...

    async def list_tools(self) -> List[ProviderTool]: ...

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """
        Invoke a tool.

        Returns:
            ``{"is_error": bool, "content": [...], "text": str}``.
        """
        ...
