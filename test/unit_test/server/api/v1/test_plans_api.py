import pytest
from httpx import AsyncClient


async def _approved_plan_id(client: AsyncClient) -> str:
    response = await client.post("/api/v1/prompts", json={"content": "email the weekly summary"})
    body = response.json()
    assert body["status"] == "approved"
    return body["plan_id"]


@pytest.mark.asyncio
async def test_execute_plan_records_events_and_lineage(client: AsyncClient) -> None:
    plan_id = await _approved_plan_id(client)

    executed = await client.post(f"/api/v1/plans/{plan_id}/execute")
    again = await client.post(f"/api/v1/plans/{plan_id}/execute")

    assert executed.status_code == 200
    assert executed.json()["status"] == "completed"
    assert executed.json()["executed_steps"] == 2
    assert again.json()["status"] == "already_completed"

    plan = (await client.get(f"/api/v1/plans/{plan_id}")).json()
    assert plan["status"] == "completed"

    events = (await client.get(f"/api/v1/plans/{plan_id}/events")).json()
    assert [e["step_index"] for e in events] == [0, 1]
    (doc_id,) = events[0]["produces"]
    assert events[1]["consumes"] == [doc_id]

    lineage = (await client.get(f"/api/v1/plans/{plan_id}/lineage")).json()
    assert lineage["producers"] == {doc_id: 0}
    assert lineage["edges"] == [{"entity_id": doc_id, "from_step": 0, "to_step": 1}]

    doc = await client.get(f"/api/v1/entities/{doc_id}")
    assert doc.json()["capabilities"] == ["share_with:team"]


@pytest.mark.asyncio
async def test_list_plans_by_status(client: AsyncClient) -> None:
    plan_id = await _approved_plan_id(client)

    pending = (await client.get("/api/v1/plans", params={"status": "pending"})).json()
    completed = (await client.get("/api/v1/plans", params={"status": "completed"})).json()

    assert [p["id"] for p in pending] == [plan_id]
    assert completed == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/api/v1/plans/missing"),
        ("POST", "/api/v1/plans/missing/execute"),
        ("GET", "/api/v1/plans/missing/events"),
        ("GET", "/api/v1/plans/missing/lineage"),
    ],
)
async def test_unknown_plan_is_404(client: AsyncClient, method: str, path: str) -> None:
    response = await client.request(method, path)
    assert response.status_code == 404
    assert response.json()["error_type"] == "PlanNotFoundError"


@pytest.mark.asyncio
async def test_events_endpoint_lists_recent_events(client: AsyncClient) -> None:
    plan_id = await _approved_plan_id(client)
    await client.post(f"/api/v1/plans/{plan_id}/execute")

    events = (await client.get("/api/v1/events", params={"plan_id": plan_id})).json()
    recent = (await client.get("/api/v1/events", params={"limit": 1})).json()

    assert len(events) == 2
    assert len(recent) == 1
