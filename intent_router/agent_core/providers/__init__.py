"""Dynamically discovered tool providers (MCP servers)."""

from .base import ProviderTool, ToolProvider, ToolProviderConfig, ToolProviderInfo, provider_capability_id
from .mcp import McpToolProvider
from .registry import ToolProviderRegistry

__all__ = [
    "McpToolProvider",
    "ProviderTool",
    "ToolProvider",
    "ToolProviderConfig",
    "ToolProviderInfo",
    "ToolProviderRegistry",
    "provider_capability_id",
]
