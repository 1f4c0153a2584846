import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_and_get_entity(client: AsyncClient) -> None:
    created = await client.post(
        "/api/v1/entities",
        json={"content": "payroll", "capabilities": ["financial_data_allowed"], "metadata": {"owner": "hr"}},
    )

    assert created.status_code == 201
    entity = created.json()
    fetched = (await client.get(f"/api/v1/entities/{entity['id']}")).json()
    assert fetched["capabilities"] == ["financial_data_allowed"]
    assert fetched["metadata"] == {"owner": "hr"}
    assert [e["id"] for e in (await client.get("/api/v1/entities")).json()] == [entity["id"]]


@pytest.mark.asyncio
async def test_unknown_entity_is_404(client: AsyncClient) -> None:
    assert (await client.get("/api/v1/entities/missing")).status_code == 404
