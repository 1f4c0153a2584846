from typing import Any, AsyncGenerator, Dict, List

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from intent_router.agent_core.factory import build_service
from intent_router.agent_core.providers import ProviderTool, ToolProviderConfig
from intent_router.agent_core.repos.sql import build_sql_repos, create_all, create_engine, create_sessionmaker

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeToolProvider:
    """Tool provider answering from memory; names starting with ``down`` refuse connections."""

    def __init__(self, config: ToolProviderConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        return self._config.name

    async def list_tools(self) -> List[ProviderTool]:
        if self._config.name.startswith("down"):
            raise ConnectionError("connection refused")
        return [ProviderTool(name=f"{self._config.name}_lookup", description="Look something up")]

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        return {"is_error": False, "content": [], "text": "found"}


@pytest_asyncio.fixture
async def test_engine():
    engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def orchestrator(test_engine):
    from intent_router.server.services.orchestrator import OrchestratorService

    repos = build_sql_repos(session_factory=create_sessionmaker(test_engine))
    service = build_service(repos=repos, provider_factory=FakeToolProvider)
    orchestrator = OrchestratorService(service=service)
    await orchestrator.startup()
    return orchestrator


@pytest_asyncio.fixture(name="client")
async def client_fixture(orchestrator) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over the app with the orchestrator dependency overridden."""
    from intent_router.server.main import app
    from intent_router.server.services.orchestrator import get_orchestrator

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
