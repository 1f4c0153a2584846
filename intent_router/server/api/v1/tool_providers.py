"""
Tool Provider API Endpoints.

Registers MCP servers whose tools become executable operations. Adding a
provider lists its tools; an unreachable provider is reported as 502.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Response

from intent_router.agent_core.providers import ToolProviderConfig, ToolProviderInfo
from intent_router.server.services.deps import OrchestratorDep

router = APIRouter()


@router.get(
    "",
    response_model=List[ToolProviderInfo],
    summary="List Tool Providers",
)
async def list_tool_providers(orchestrator: OrchestratorDep):
    return orchestrator.list_tool_providers()


@router.post(
    "",
    response_model=ToolProviderInfo,
    status_code=201,
    summary="Add Tool Provider",
    description=(
        "Connect to a tool provider, list its tools and register each tool as an operation requiring "
        "the provider's `MCP_TOOL:{name}` capability."
    ),
)
async def add_tool_provider(config: ToolProviderConfig, orchestrator: OrchestratorDep):
    return await orchestrator.add_tool_provider(config)


@router.delete(
    "/{name}",
    status_code=204,
    summary="Remove Tool Provider",
)
async def remove_tool_provider(name: str, orchestrator: OrchestratorDep):
    if not await orchestrator.remove_tool_provider(name):
        raise HTTPException(status_code=404, detail=f"Tool provider not found: {name}")
    return Response(status_code=204)
