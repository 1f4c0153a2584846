import pytest
from httpx import ASGITransport, AsyncClient

from intent_router.server.core import constant


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    response = await client.get("/api/v1/version")
    assert response.json() == {"version": constant.API_VERSION, "schema_version": constant.SCHEMA_VERSION}


@pytest.mark.asyncio
async def test_ready_after_bootstrap(client: AsyncClient) -> None:
    response = await client.get("/api/v1/ready")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["capabilities"] > 0
    assert body["tool_providers"] == 0


@pytest.mark.asyncio
async def test_unhandled_error_returns_reference(client: AsyncClient, orchestrator, monkeypatch) -> None:
    def _boom() -> None:
        raise RuntimeError("registry corrupted")

    monkeypatch.setattr(orchestrator, "list_operations", _boom)

    # Starlette re-raises after the catch-all handler has produced the response.
    from intent_router.server.main import app

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
        response = await raw_client.get("/api/v1/operations")

    assert response.status_code == 500
    body = response.json()
    assert body["detail"] == "Internal server error"
    assert body["error_type"] == "RuntimeError"
    assert len(body["error_id"]) == 12
