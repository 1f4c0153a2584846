"""High-level orchestration service.

``IntentRouterService`` implements the synchronous request surface on top of
the capability registry, policy engine, planner, execution engine and
repositories.

Workflow
--------

- ``submit_prompt``:

  1. Persists the ``Prompt``.
  2. Asks the planner for candidate steps (untrusted, normalized at the
     boundary).
  3. Validates the steps against the registry and the known entities they
     reference.
  4. Persists the plan only when there are no violations.

- ``execute_plan``: delegates to ``PlanExecutionEngine``.

Capability administration keeps the in-memory registry (consulted by every
policy check) and the capability repository in step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .capabilities import CapabilityRegistry, OperationRequirementMap, system_capabilities
from .errors import MalformedPlanError, PersistenceError, PlanNotFoundError
from .planning import PlannerRequest, StructuredPlanner
from .policy import PolicyEngine, create_approval_context, extract_entity_references
from .providers import ToolProvider, ToolProviderConfig, ToolProviderInfo, ToolProviderRegistry, provider_capability_id
from .providers.mcp import McpToolProvider
from .repos import (
    CapabilityRepository,
    EntityRepository,
    EventRepository,
    PlanRepository,
    PromptRepository,
)
from .runtime import EngineDeps, PlanExecutionEngine, replay_lineage
from .schemas.domain import (
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
    Step,
    SubmitStatus,
)
from .tools import ToolExecutor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentRouterServiceDeps:
    """Dependency bundle for ``IntentRouterService``.

    This allows applications and tests to inject:

    - persistence repositories,
    - a planner implementation,
    - the executor collaborator.
    """

    prompts: PromptRepository
    plans: PlanRepository
    entities: EntityRepository
    events: EventRepository
    capabilities: CapabilityRepository
    planner: StructuredPlanner
    executor: ToolExecutor


class IntentRouterService:
    """Plan, validate and execute user requests under the capability policy."""

    def __init__(
        self,
        *,
        deps: IntentRouterServiceDeps,
        registry: Optional[CapabilityRegistry] = None,
        operations: Optional[OperationRequirementMap] = None,
        step_timeout: float = 30.0,
        probe_timeout: float = 10.0,
        provider_factory: Callable[[ToolProviderConfig], ToolProvider] = McpToolProvider,
    ) -> None:
        self._deps = deps
        self._registry = registry if registry is not None else CapabilityRegistry()
        self._operations = operations if operations is not None else OperationRequirementMap.with_defaults()
        self._policy = PolicyEngine(self._registry, self._operations)
        self._engine = PlanExecutionEngine(
            policy=self._policy,
            deps=EngineDeps(plans=deps.plans, entities=deps.entities, events=deps.events, executor=deps.executor),
            step_timeout=step_timeout,
        )
        self._providers = ToolProviderRegistry(
            capabilities=self._registry,
            operations=self._operations,
            executor=deps.executor,
            probe_timeout=probe_timeout,
            provider_factory=provider_factory,
        )

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    @property
    def operations(self) -> OperationRequirementMap:
        return self._operations

    @property
    def policy(self) -> PolicyEngine:
        return self._policy

    async def bootstrap(self) -> None:
        """Seed system capabilities and load persisted custom capabilities."""
        for cap in system_capabilities():
            if not self._registry.has(cap.id):
                self._registry.add(cap, is_system=True)
            await self._deps.capabilities.upsert(cap)

        loaded = 0
        for cap in await self._deps.capabilities.list():
            if cap.is_system or self._registry.has(cap.id):
                continue
            self._registry.add(cap)
            loaded += 1
        logger.info(f"Capability registry ready: {len(self._registry.list())} capabilities ({loaded} custom loaded)")

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
        """Store a prompt, plan it and validate the plan.

        Policy violations and planner failures are returned as data. Only
        ``PersistenceError`` propagates.
        """
        prompt = Prompt(content=content, metadata=dict(metadata or {}))
        await self._deps.prompts.create(prompt)

        try:
            planned = await self._deps.planner.plan(PlannerRequest(prompt=content, context=list(context)))
        except MalformedPlanError as e:
            logger.warning(f"Planner returned a malformed plan for prompt {prompt.id}: {e}")
            return PromptSubmission(prompt_id=prompt.id, status=SubmitStatus.planning_failed, error=str(e))
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Planner failed for prompt {prompt.id}: {e}", exc_info=True)
            return PromptSubmission(
                prompt_id=prompt.id, status=SubmitStatus.planning_failed, error=f"Planner failed: {e}"
            )

        known = await self._deps.entities.get_many(self._referenced_entity_ids(planned.steps))
        violations = self._policy.validate_plan(planned.steps, known)
        if violations:
            approval = create_approval_context(violations)
            logger.info(f"Prompt {prompt.id} produced {len(violations)} policy violation(s)")
            return PromptSubmission(
                prompt_id=prompt.id,
                status=SubmitStatus.policy_violation,
                confidence=planned.confidence,
                step_count=len(planned.steps),
                steps=planned.steps,
                violations=violations,
                requires_approval=approval.requires_approval,
                approval=approval,
            )

        plan = Plan(prompt_id=prompt.id, steps=planned.steps, confidence=planned.confidence)
        await self._deps.plans.create(plan)
        logger.info(f"Prompt {prompt.id} approved as plan {plan.id} ({len(plan.steps)} step(s))")
        return PromptSubmission(
            prompt_id=prompt.id,
            plan_id=plan.id,
            status=SubmitStatus.approved,
            confidence=planned.confidence,
            step_count=len(plan.steps),
            steps=plan.steps,
        )

    @staticmethod
    def _referenced_entity_ids(steps: Iterable[Step]) -> List[str]:
        return extract_entity_references([s.args for s in steps])

    async def get_prompt(self, prompt_id: str) -> Optional[Prompt]:
        return await self._deps.prompts.get(prompt_id)

    async def get_plan(self, plan_id: str) -> Optional[Plan]:
        return await self._deps.plans.get(plan_id)

    async def list_plans(
        self, *, status: Optional[PlanStatus] = None, limit: int = 100, offset: int = 0
    ) -> List[Plan]:
        return await self._deps.plans.list(status=status, limit=limit, offset=offset)

    async def execute_plan(self, plan_id: str) -> PlanExecutionResult:
        return await self._engine.execute(plan_id)

    async def get_plan_lineage(self, plan_id: str) -> PlanLineage:
        plan = await self._deps.plans.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        events = await self._deps.events.list(plan_id=plan_id, limit=max(len(plan.steps), 1))
        return replay_lineage(plan_id, events)

    # ------------------------------------------------------------------
    # Entities and events
    # ------------------------------------------------------------------

    async def create_entity(self, entity: Entity) -> Entity:
        await self._deps.entities.create(entity)
        return entity

    async def get_entity(self, entity_id: str) -> Optional[Entity]:
        return await self._deps.entities.get(entity_id)

    async def list_entities(self, *, limit: int = 100, offset: int = 0) -> List[Entity]:
        return await self._deps.entities.list(limit=limit, offset=offset)

    async def list_events(self, *, plan_id: Optional[str] = None, limit: int = 100) -> List[Event]:
        return await self._deps.events.list(plan_id=plan_id, limit=limit)

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    async def add_capability(self, capability: Capability, *, replace: bool = False) -> Capability:
        existing = self._registry.get(capability.id)
        stored = self._registry.add(capability, replace=replace)
        try:
            await self._deps.capabilities.upsert(stored)
        except PersistenceError:
            self._registry.remove(stored.id)
            if existing is not None:
                self._registry.add(existing)
            raise
        return stored

    def get_capability(self, capability_id: str) -> Optional[Capability]:
        return self._registry.get(capability_id)

    async def update_capability(self, capability: Capability) -> Capability:
        previous = self._registry.get(capability.id)
        updated = self._registry.update(capability)
        try:
            await self._deps.capabilities.upsert(updated)
        except PersistenceError:
            if previous is not None:
                self._registry.add(previous, replace=True)
            raise
        return updated

    async def remove_capability(self, capability_id: str) -> bool:
        removed = self._registry.remove(capability_id)
        if removed:
            await self._deps.capabilities.delete(capability_id)
        return removed

    def list_capabilities(
        self, *, kind: Optional[CapabilityKind] = None, scope: Optional[str] = None
    ) -> List[Capability]:
        caps = self._registry.list_by_kind(kind) if kind is not None else self._registry.list()
        if scope is not None:
            caps = [c for c in caps if c.scope == scope]
        return sorted(caps, key=lambda c: c.id)

    def capability_hierarchy(self) -> Dict[str, List[str]]:
        return self._registry.hierarchy()

    def export_capabilities(self) -> List[Dict[str, Any]]:
        return self._registry.export_capabilities()

    async def import_capabilities(self, items: Iterable[Mapping[str, Any]], *, replace: bool = False) -> int:
        count = self._registry.import_capabilities(items, replace=replace)
        for cap in self._registry.list():
            if not cap.is_system:
                await self._deps.capabilities.upsert(cap)
        return count

    # ------------------------------------------------------------------
    # Tool providers and operations
    # ------------------------------------------------------------------

    def list_tool_providers(self) -> List[ToolProviderInfo]:
        return self._providers.list()

    async def add_tool_provider(self, config: ToolProviderConfig) -> ToolProviderInfo:
        info = await self._providers.add(config)
        cap = self._registry.get(info.capability_id)
        if cap is not None:
            await self._deps.capabilities.upsert(cap)
        return info

    async def remove_tool_provider(self, name: str) -> bool:
        removed = await self._providers.remove(name)
        if removed:
            await self._deps.capabilities.delete(provider_capability_id(name))
        return removed

    def list_operations(self) -> List[OperationInfo]:
        tools = {t.name: t for t in self._deps.executor.tools()}
        names = sorted(set(self._operations.operations()) | set(tools))
        return [
            OperationInfo(
                name=name,
                required_tool_caps=sorted(self._operations.required_tool_caps(name)),
                description=tools[name].description if name in tools else "",
                executable=name in tools,
            )
            for name in names
        ]
