import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_list_system_capabilities(client: AsyncClient) -> None:
    tools = (await client.get("/api/v1/capabilities", params={"kind": "tool", "scope": "smtp"})).json()
    assert [c["id"] for c in tools] == ["SEND_EMAIL"]
    assert tools[0]["is_system"] is True

    hierarchy = (await client.get("/api/v1/capabilities/hierarchy")).json()
    assert "share_with:team" in hierarchy["sharing"]


@pytest.mark.asyncio
async def test_custom_capability_lifecycle(client: AsyncClient) -> None:
    payload = {"id": "SEND_SLACK", "kind": "tool", "scope": "communication", "description": "Post to Slack"}

    created = await client.post("/api/v1/capabilities", json=payload)
    duplicate = await client.post("/api/v1/capabilities", json=payload)
    updated = await client.put(
        "/api/v1/capabilities/SEND_SLACK",
        json={"kind": "tool", "scope": "chat", "description": "Post to a Slack channel"},
    )
    fetched = await client.get("/api/v1/capabilities/SEND_SLACK")
    deleted = await client.delete("/api/v1/capabilities/SEND_SLACK")
    missing = await client.get("/api/v1/capabilities/SEND_SLACK")
    deleted_again = await client.delete("/api/v1/capabilities/SEND_SLACK")

    assert created.status_code == 201
    assert created.json()["is_system"] is False
    assert duplicate.status_code == 409
    assert updated.status_code == 200
    assert fetched.json()["scope"] == "chat"
    assert deleted.status_code == 204
    assert missing.status_code == 404
    assert deleted_again.status_code == 404


@pytest.mark.asyncio
async def test_system_capabilities_are_read_only(client: AsyncClient) -> None:
    delete = await client.delete("/api/v1/capabilities/SEND_EMAIL")
    update = await client.put("/api/v1/capabilities/SEND_EMAIL", json={"kind": "tool", "scope": "smtp"})

    assert delete.status_code == 403
    assert update.status_code == 403
    assert delete.json()["error_type"] == "CapabilityForbiddenError"


@pytest.mark.asyncio
async def test_update_unknown_capability_is_404(client: AsyncClient) -> None:
    response = await client.put("/api/v1/capabilities/NOPE", json={"kind": "data", "scope": "x"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_export_then_import(client: AsyncClient) -> None:
    await client.post("/api/v1/capabilities", json={"id": "hr_data_allowed", "kind": "data", "scope": "privacy"})

    exported = (await client.get("/api/v1/capabilities/export")).json()
    skipped = await client.post("/api/v1/capabilities/import", json={"items": exported})
    replaced = await client.post("/api/v1/capabilities/import", json={"items": exported, "replace": True})

    assert [c["id"] for c in exported] == ["hr_data_allowed"]
    assert skipped.json() == {"imported": 0}
    assert replaced.json() == {"imported": 1}
