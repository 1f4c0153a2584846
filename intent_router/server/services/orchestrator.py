"""
Orchestrator Service.

Wraps ``IntentRouterService`` for the API layer: builds the SQL repositories
from the global session factory, bootstraps the capability registry at
startup and reports prompt, policy and execution outcomes to monitoring.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from intent_router.agent_core.factory import build_service
from intent_router.agent_core.providers import ToolProviderConfig, ToolProviderInfo
from intent_router.agent_core.repos.sql import SqlRepoBundle, build_sql_repos
from intent_router.agent_core.schemas.domain import (
    Capability,
    CapabilityKind,
    ContextItem,
    Entity,
    Event,
    OperationInfo,
    Plan,
    PlanExecutionResult,
    PlanLineage,
    PlanStatus,
    Prompt,
    PromptSubmission,
)
from intent_router.agent_core.service import IntentRouterService
from intent_router.core.logging_config import get_logger
from intent_router.core.monitoring import (
    log_plan_execution,
    log_policy_violations,
    log_prompt_submitted,
)
from intent_router.server.core.config import settings

logger = get_logger(__name__)


class OrchestratorService:
    """
    Service layer for the API.
    Wraps the core IntentRouterService and its repositories.
    """

    def __init__(
        self,
        *,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        service: Optional[IntentRouterService] = None,
    ) -> None:
        if service is not None:
            self.repos: Optional[SqlRepoBundle] = None
            self.router_service = service
            return

        if session_factory is None:
            from intent_router.server.core.database import async_session_maker

            session_factory = async_session_maker

        runtime = settings.runtime
        self.repos = build_sql_repos(session_factory=session_factory)
        self.router_service = build_service(
            repos=self.repos,
            planner_model=runtime.planner_model,
            step_timeout=runtime.step_timeout_seconds,
            probe_timeout=runtime.tool_provider_probe_timeout_seconds,
            context_budget=runtime.planner_context_budget,
        )

    async def startup(self) -> None:
        await self.router_service.bootstrap()

    # ------------------------------------------------------------------
    # Prompts and plans
    # ------------------------------------------------------------------

    async def submit_prompt(
        self,
        content: str,
        *,
        metadata: Optional[Mapping[str, Any]] = None,
        context: Sequence[ContextItem] = (),
    ) -> PromptSubmission:
        submission = await self.router_service.submit_prompt(content, metadata=metadata, context=context)
        log_prompt_submitted(
            prompt_id=submission.prompt_id,
            status=submission.status.value,
            step_count=submission.step_count,
            confidence=submission.confidence,
        )
        log_policy_violations(submission.prompt_id, submission.violations)
        return submission

    async def get_prompt(self, prompt_id: str) -> Optional[Prompt]:
        return await self.router_service.get_prompt(prompt_id)

    async def get_plan(self, plan_id: str) -> Optional[Plan]:
        return await self.router_service.get_plan(plan_id)

    async def list_plans(
        self, *, status: Optional[PlanStatus] = None, limit: int = 100, offset: int = 0
    ) -> List[Plan]:
        return await self.router_service.list_plans(status=status, limit=limit, offset=offset)

    async def execute_plan(self, plan_id: str) -> PlanExecutionResult:
        start_time = time.time()
        result = await self.router_service.execute_plan(plan_id)
        log_plan_execution(result, duration_ms=(time.time() - start_time) * 1000)
        return result

    async def get_plan_lineage(self, plan_id: str) -> PlanLineage:
        return await self.router_service.get_plan_lineage(plan_id)

    # ------------------------------------------------------------------
    # Entities and events
    # ------------------------------------------------------------------

    async def create_entity(self, entity: Entity) -> Entity:
        return await self.router_service.create_entity(entity)

    async def get_entity(self, entity_id: str) -> Optional[Entity]:
        return await self.router_service.get_entity(entity_id)

    async def list_entities(self, *, limit: int = 100, offset: int = 0) -> List[Entity]:
        return await self.router_service.list_entities(limit=limit, offset=offset)

    async def list_events(self, *, plan_id: Optional[str] = None, limit: int = 100) -> List[Event]:
        return await self.router_service.list_events(plan_id=plan_id, limit=limit)

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    async def add_capability(self, capability: Capability) -> Capability:
        return await self.router_service.add_capability(capability)

    def get_capability(self, capability_id: str) -> Optional[Capability]:
        return self.router_service.get_capability(capability_id)

    async def update_capability(self, capability: Capability) -> Capability:
        return await self.router_service.update_capability(capability)

    async def remove_capability(self, capability_id: str) -> bool:
        return await self.router_service.remove_capability(capability_id)

    def list_capabilities(
        self, *, kind: Optional[CapabilityKind] = None, scope: Optional[str] = None
    ) -> List[Capability]:
        return self.router_service.list_capabilities(kind=kind, scope=scope)

    def capability_hierarchy(self) -> Dict[str, List[str]]:
        return self.router_service.capability_hierarchy()

    def export_capabilities(self) -> List[Dict[str, Any]]:
        return self.router_service.export_capabilities()

    async def import_capabilities(self, items: Iterable[Mapping[str, Any]], *, replace: bool = False) -> int:
        return await self.router_service.import_capabilities(items, replace=replace)

    # ------------------------------------------------------------------
    # Tool providers and operations
    # ------------------------------------------------------------------

    def list_tool_providers(self) -> List[ToolProviderInfo]:
        return self.router_service.list_tool_providers()

    async def add_tool_provider(self, config: ToolProviderConfig) -> ToolProviderInfo:
        info = await self.router_service.add_tool_provider(config)
        logger.info(f"Tool provider added: {info.name} ({len(info.tools)} tools)")
        return info

    async def remove_tool_provider(self, name: str) -> bool:
        return await self.router_service.remove_tool_provider(name)

    def list_operations(self) -> List[OperationInfo]:
        return self.router_service.list_operations()


_orchestrator: Optional[OrchestratorService] = None


def get_orchestrator() -> OrchestratorService:
    """
    Get or create the global orchestrator instance.

    Returns:
        The singleton OrchestratorService.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = OrchestratorService()
    return _orchestrator
