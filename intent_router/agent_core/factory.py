from __future__ import annotations

"""Convenience factories for wiring the router core.

This module contains small helpers to build the default operation map,
a ``ToolExecutor`` bound to an entity repository, and a ready-to-use
``IntentRouterService``.

The intent is to keep application wiring and tests concise, while still
allowing advanced deployments to provide their own registry, operation map,
planner model and repositories.
"""

from typing import Any, Callable, Optional, Sequence

from .capabilities import CapabilityRegistry, OperationRequirementMap
from .planning import StructuredPlanner
from .providers import ToolProvider, ToolProviderConfig
from .providers.mcp import McpToolProvider
from .repos import EntityRepository
from .repos.sql import SqlRepoBundle
from .schemas.domain import Entity
from .service import IntentRouterService, IntentRouterServiceDeps
from .tools import ToolDeps, ToolExecutor, default_tools


def build_operation_map() -> OperationRequirementMap:
    return OperationRequirementMap.with_defaults()


def build_executor(*, entities: Optional[EntityRepository] = None) -> ToolExecutor:
    """Construct a ``ToolExecutor`` with the built-in tools.

    When an entity repository is given, ``fetch_data`` and ``search_entities``
    read from it.
    """
    if entities is None:
        return ToolExecutor(default_tools())

    async def _search(query: str, limit: int) -> Sequence[Entity]:
        return await entities.search(query, limit=limit)

    return ToolExecutor(default_tools(), deps=ToolDeps(get_entity=entities.get, search_entities=_search))


def build_service(
    *,
    repos: SqlRepoBundle,
    planner_model: Any | None = None,
    step_timeout: float = 30.0,
    probe_timeout: float = 10.0,
    context_budget: int = 4000,
    provider_factory: Callable[[ToolProviderConfig], ToolProvider] = McpToolProvider,
) -> IntentRouterService:
    """Wire an ``IntentRouterService`` on top of a repository bundle.

    The registry starts empty; ``IntentRouterService.bootstrap`` seeds the
    system capabilities and loads persisted custom ones.
    """
    registry = CapabilityRegistry()
    operations = build_operation_map()
    planner = StructuredPlanner(
        model=planner_model, registry=registry, operations=operations, context_budget=context_budget
    )
    deps = IntentRouterServiceDeps(
        prompts=repos.prompts,
        plans=repos.plans,
        entities=repos.entities,
        events=repos.events,
        capabilities=repos.capabilities,
        planner=planner,
        executor=build_executor(entities=repos.entities),
    )
    return IntentRouterService(
        deps=deps,
        registry=registry,
        operations=operations,
        step_timeout=step_timeout,
        probe_timeout=probe_timeout,
        provider_factory=provider_factory,
    )
