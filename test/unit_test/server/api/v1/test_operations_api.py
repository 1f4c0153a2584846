import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_operations_list_requirements(client: AsyncClient) -> None:
    ops = {o["name"]: o for o in (await client.get("/api/v1/operations")).json()}

    assert ops["send_message"]["required_tool_caps"] == ["SEND_EMAIL"]
    assert ops["send_message"]["executable"] is True
    assert ops["analyze_content"]["required_tool_caps"] == []
    assert ops["send_sms"]["executable"] is False


@pytest.mark.asyncio
async def test_tool_provider_lifecycle(client: AsyncClient) -> None:
    created = await client.post(
        "/api/v1/tool-providers", json={"name": "wiki", "transport": "sse", "url": "http://mock/sse"}
    )
    duplicate = await client.post(
        "/api/v1/tool-providers", json={"name": "wiki", "transport": "sse", "url": "http://mock/sse"}
    )

    assert created.status_code == 201
    assert created.json()["capability_id"] == "MCP_TOOL:wiki"
    assert duplicate.status_code == 502

    ops = {o["name"]: o for o in (await client.get("/api/v1/operations")).json()}
    assert ops["wiki_lookup"]["required_tool_caps"] == ["MCP_TOOL:wiki"]
    assert (await client.get("/api/v1/capabilities/MCP_TOOL:wiki")).status_code == 200
    assert [p["name"] for p in (await client.get("/api/v1/tool-providers")).json()] == ["wiki"]

    assert (await client.delete("/api/v1/tool-providers/wiki")).status_code == 204
    assert (await client.delete("/api/v1/tool-providers/wiki")).status_code == 404
    assert (await client.get("/api/v1/capabilities/MCP_TOOL:wiki")).status_code == 404


@pytest.mark.asyncio
async def test_unreachable_provider_is_502(client: AsyncClient) -> None:
    response = await client.post("/api/v1/tool-providers", json={"name": "down-1", "command": "wiki-mcp"})
    assert response.status_code == 502
    assert "connection refused" in response.json()["detail"]


@pytest.mark.asyncio
async def test_invalid_provider_config_is_422(client: AsyncClient) -> None:
    response = await client.post("/api/v1/tool-providers", json={"name": "wiki", "transport": "sse"})
    assert response.status_code == 422
