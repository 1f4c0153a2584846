from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pytest

from intent_router.agent_core.capabilities import CapabilityRegistry, OperationRequirementMap, system_capabilities
from intent_router.agent_core.policy import PolicyEngine
from intent_router.agent_core.schemas.domain import (
    Capability,
    Entity,
    Event,
    Plan,
    PlanStatus,
    Prompt,
)


class _PromptsRepo:
    def __init__(self) -> None:
        self.by_id: Dict[str, Prompt] = {}

    async def create(self, prompt: Prompt) -> None:
        self.by_id[prompt.id] = prompt

    async def get(self, prompt_id: str) -> Optional[Prompt]:
        return self.by_id.get(prompt_id)


class _PlansRepo:
    def __init__(self) -> None:
        self.by_id: Dict[str, Plan] = {}
        self.status_updates: List[tuple[str, str]] = []

    async def create(self, plan: Plan) -> None:
        self.by_id[plan.id] = plan.model_copy(deep=True)

    async def get(self, plan_id: str) -> Optional[Plan]:
        plan = self.by_id.get(plan_id)
        return plan.model_copy(deep=True) if plan is not None else None

    async def list(self, *, status: Optional[PlanStatus] = None, limit: int = 100, offset: int = 0) -> List[Plan]:
        plans = [p for p in self.by_id.values() if status is None or p.status == status]
        plans.sort(key=lambda p: p.created_at, reverse=True)
        return plans[offset : offset + limit]

    async def update_status(self, plan_id: str, *, status: PlanStatus) -> None:
        self.status_updates.append((plan_id, status.value))
        plan = self.by_id.get(plan_id)
        if plan is not None:
            plan.status = status

    async def claim_for_execution(self, plan_id: str) -> bool:
        plan = self.by_id.get(plan_id)
        if plan is None or plan.status != PlanStatus.pending:
            return False
        plan.status = PlanStatus.executing
        self.status_updates.append((plan_id, PlanStatus.executing.value))
        return True


class _EntitiesRepo:
    def __init__(self) -> None:
        self.by_id: Dict[str, Entity] = {}

    async def create(self, entity: Entity) -> None:
        self.by_id[entity.id] = entity

    async def get(self, entity_id: str) -> Optional[Entity]:
        return self.by_id.get(entity_id)

    async def get_many(self, entity_ids: Sequence[str]) -> List[Entity]:
        return [self.by_id[i] for i in entity_ids if i in self.by_id]

    async def list(self, *, limit: int = 100, offset: int = 0) -> List[Entity]:
        items = sorted(self.by_id.values(), key=lambda e: e.created_at, reverse=True)
        return items[offset : offset + limit]

    async def search(self, query: str, *, limit: int = 10) -> List[Entity]:
        q = query.lower()
        return [e for e in self.by_id.values() if q in e.content.lower()][:limit]


class _EventsRepo:
    def __init__(self) -> None:
        self.events: List[Event] = []

    async def append(self, event: Event) -> None:
        self.events.append(event)

    async def list(self, *, plan_id: Optional[str] = None, limit: int = 100) -> List[Event]:
        if plan_id is not None:
            return sorted((e for e in self.events if e.plan_id == plan_id), key=lambda e: e.sequence)[:limit]
        return list(reversed(self.events))[:limit]


class _CapabilitiesRepo:
    def __init__(self) -> None:
        self.by_id: Dict[str, Capability] = {}
        self.fail_writes = False

    async def upsert(self, capability: Capability) -> None:
        if self.fail_writes:
            from intent_router.agent_core.errors import PersistenceError

            raise PersistenceError("upsert capability failed: disk full")
        self.by_id[capability.id] = capability

    async def get(self, capability_id: str) -> Optional[Capability]:
        return self.by_id.get(capability_id)

    async def delete(self, capability_id: str) -> bool:
        return self.by_id.pop(capability_id, None) is not None

    async def list(self) -> List[Capability]:
        return [self.by_id[k] for k in sorted(self.by_id)]


@pytest.fixture
def repos() -> Dict[str, Any]:
    return {
        "prompts": _PromptsRepo(),
        "plans": _PlansRepo(),
        "entities": _EntitiesRepo(),
        "events": _EventsRepo(),
        "capabilities": _CapabilitiesRepo(),
    }


@pytest.fixture
def registry() -> CapabilityRegistry:
    return CapabilityRegistry(system_capabilities(), is_system=True)


@pytest.fixture
def operations() -> OperationRequirementMap:
    return OperationRequirementMap.with_defaults()


@pytest.fixture
def policy(registry: CapabilityRegistry, operations: OperationRequirementMap) -> PolicyEngine:
    return PolicyEngine(registry, operations)
