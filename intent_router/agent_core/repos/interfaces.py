"""Repository interface contracts.

The execution engine and the service depend on these Protocols instead of
concrete persistence implementations.

Contract guidelines
-------------------

- All methods are async.
- Implementations must not leak sessions or transactions to callers.
- Prompts are immutable once created.
- Events are append-only; there is no update or delete.
- Plan status is the only in-place mutation of an execution record.
  ``claim_for_execution`` must be an atomic compare-and-set so two concurrent
  execute calls cannot both move the same plan to ``executing``.
- Implementations raise ``PersistenceError`` when the store is unreachable.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..schemas.domain import Capability, Entity, Event, Plan, PlanStatus, Prompt


class PromptRepository(Protocol):
    """Persist immutable prompt records."""

    async def create(self, prompt: Prompt) -> None:
        """
        Persist a new prompt.

        Args:
            prompt: The prompt to insert.
        """
        ...

    async def get(self, prompt_id: str) -> Optional[Prompt]:
        """
        Retrieve a prompt by id.

        Args:
            prompt_id: The prompt identifier.

        Returns:
            The prompt, or None if missing.
        """
        ...


class PlanRepository(Protocol):
    """Persist plans and their execution status."""

    async def create(self, plan: Plan) -> None:
        """
        Persist a new plan.

        Args:
            plan: The plan to insert. Its ``prompt_id`` must reference an
                existing prompt.
        """
        ...

    async def get(self, plan_id: str) -> Optional[Plan]:
        """
        Retrieve a plan by id.

        Args:
            plan_id: The plan identifier.

        Returns:
            The plan, or None if missing.
        """
        ...

    async def list(
        self, *, status: Optional[PlanStatus] = None, limit: int = 100, offset: int = 0
    ) -> list[Plan]:
        """
        List plans, newest first.

        Args:
            status: Optional status filter.
            limit: Max number of plans to return.
            offset: Number of plans to skip.
        """
        ...

    async def update_status(self, plan_id: str, *, status: PlanStatus) -> None:
        """
        Overwrite the status of a plan (last writer wins).

        Args:
            plan_id: The plan identifier. Unknown ids are a no-op.
            status: The new status.
        """
        ...

    async def claim_for_execution(self, plan_id: str) -> bool:
        """
        Atomically move a plan from ``pending`` to ``executing``.

        Returns:
            True if this caller won the transition, False otherwise.
        """
        ...


class EntityRepository(Protocol):
    """Persist content items and their capability tags."""

    async def create(self, entity: Entity) -> None:
        """
        Persist a new entity.

        Args:
            entity: The entity to insert.
        """
        ...

    async def get(self, entity_id: str) -> Optional[Entity]:
        ...

    async def get_many(self, entity_ids: Sequence[str]) -> list[Entity]:
        """
        Resolve several ids at once.

        Args:
            entity_ids: Ids to resolve. Unknown ids are skipped.

        Returns:
            The entities that exist, in no particular order.
        """
        ...

    async def list(self, *, limit: int = 100, offset: int = 0) -> list[Entity]:
        ...

    async def search(self, query: str, *, limit: int = 10) -> list[Entity]:
        """
        Case-insensitive substring search over entity content.

        Args:
            query: Text to look for.
            limit: Max number of entities to return.
        """
        ...


class EventRepository(Protocol):
    """Append-only event log."""

    async def append(self, event: Event) -> None:
        """
        Append a new event.

        Args:
            event: The event to insert.
        """
        ...

    async def list(self, *, plan_id: Optional[str] = None, limit: int = 100) -> list[Event]:
        """
        List events.

        Args:
            plan_id: When given, only that plan's events in execution order.
                Otherwise the most recent events across all plans.
            limit: Max number of events to return.
        """
        ...


class CapabilityRepository(Protocol):
    """Durable copy of the capability registry."""

    async def upsert(self, capability: Capability) -> None:
        """
        Insert or overwrite a capability record.

        Args:
            capability: The capability to store.
        """
        ...

    async def get(self, capability_id: str) -> Optional[Capability]:
        ...

    async def delete(self, capability_id: str) -> bool:
        """
        Delete a capability record.

        Returns:
            True if a record was deleted.
        """
        ...

    async def list(self) -> list[Capability]:
        ...
