"""MCP tool provider client.

``McpToolProvider`` talks to an MCP server over stdio, SSE or streamable HTTP
using the official ``mcp`` client library. Every operation opens a fresh,
initialized ``ClientSession`` and closes it when done.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List

from mcp import ClientSession, StdioServerParameters
from mcp.client.sse import sse_client
from mcp.client.stdio import stdio_client
from mcp.client.streamable_http import streamablehttp_client

from .base import ProviderTool, ToolProviderConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_session(config: ToolProviderConfig) -> AsyncIterator[ClientSession]:
    """Yield an initialized ``ClientSession`` for the configured transport."""
    if config.transport == "stdio":
        params = StdioServerParameters(command=str(config.command), args=list(config.args), env=dict(config.env) or None)
        async with stdio_client(params) as (read_stream, write_stream):
            async with ClientSession(read_stream, write_stream) as session:
                await session.initialize()
                yield session
    elif config.transport == "sse":
        async with sse_client(str(config.url)) as (read_stream, write_stream):
            async with ClientSession(read_stream, write_stream) as session:
                await session.initialize()
                yield session
    else:
        async with streamablehttp_client(str(config.url)) as (read_stream, write_stream, _close_fn):
            async with ClientSession(read_stream, write_stream) as session:
                await session.initialize()
                yield session


class McpToolProvider:
    """Tool provider backed by an MCP server."""

    def __init__(self, config: ToolProviderConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> ToolProviderConfig:
        return self._config

    async def list_tools(self) -> List[ProviderTool]:
        async with open_session(self._config) as session:
            res = await session.list_tools()
        tools = [
            ProviderTool(name=t.name, description=t.description or "", input_schema=dict(t.inputSchema or {}))
            for t in res.tools
        ]
        logger.debug(f"MCP provider '{self.name}' exposes {len(tools)} tool(s)")
        return tools

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        async with open_session(self._config) as session:
            res = await session.call_tool(tool_name, arguments=arguments)
        content = [block.model_dump(mode="json") for block in res.content]
        text = "\n".join(str(c.get("text")) for c in content if c.get("type") == "text")
        return {"is_error": bool(res.isError), "content": content, "text": text}
