"""SQLAlchemy async repository implementations.

This module provides SQL-backed persistence for the repository interfaces
defined in ``intent_router.agent_core.repos.interfaces``. PostgreSQL (asyncpg)
and SQLite (aiosqlite) are both supported.

Usage
-----

Typical wiring (tests or application setup):

- Create an async engine with ``create_engine``.
- Create tables with ``create_all`` (for tests/dev; production uses the
  alembic migration).
- Create a session factory with ``create_sessionmaker``.
- Build repository instances with ``build_sql_repos``.

Transaction model
-----------------

Each repository method opens an ``AsyncSession``, performs its operation, and
commits. Every persisted record (event, entity, status change) is durable when
the method returns. Driver errors are re-raised as ``PersistenceError``.
"""

from __future__ import annotations

import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncIterator, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..errors import PersistenceError
from ..schemas.domain import Capability, Entity, Event, Plan, PlanStatus, Prompt, Step
from .interfaces import (
    CapabilityRepository,
    EntityRepository,
    EventRepository,
    PlanRepository,
    PromptRepository,
)
from .models import Base, CapabilityRow, EntityRow, EventRow, PlanRow, PromptRow


def normalize_db_url(db_url: str) -> str:
    """Rewrite ``postgres://`` style URLs to the asyncpg driver."""
    return re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)


def create_engine(db_url: str, **kwargs) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    The helper normalizes Postgres URLs to ensure the async driver is used.
    For example, it rewrites ``postgresql://`` and other variants to
    ``postgresql+asyncpg://``. Extra keyword arguments are passed through to
    ``create_async_engine``.
    """
    url = normalize_db_url(db_url)
    if url.startswith("postgresql"):
        kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(url, **kwargs)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an ``async_sessionmaker`` with safe defaults for this project."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables for the current ORM metadata.

    This is mainly intended for tests and local development.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on read.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@asynccontextmanager
async def _persistence(action: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        raise PersistenceError(f"{action} failed: {e}") from e


def _plan_from_row(row: PlanRow) -> Plan:
    return Plan(
        id=row.id,
        prompt_id=row.prompt_id,
        steps=[Step.model_validate(s) for s in row.steps or []],
        status=PlanStatus(row.status),
        confidence=row.confidence,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def _entity_from_row(row: EntityRow) -> Entity:
    return Entity(
        id=row.id,
        content=row.content,
        capabilities=list(row.capabilities or []),
        embedding=list(row.embedding) if row.embedding is not None else None,
        metadata=dict(row.meta or {}),
        created_at=_as_utc(row.created_at),
    )


def _event_from_row(row: EventRow) -> Event:
    return Event(
        id=row.id,
        plan_id=row.plan_id,
        step_index=row.step_index,
        sequence=row.sequence,
        op=row.op,
        produces=list(row.produces or []),
        consumes=list(row.consumes or []),
        result=row.result,
        error=row.error,
        created_at=_as_utc(row.created_at),
    )


def _capability_from_row(row: CapabilityRow) -> Capability:
    return Capability(
        id=row.id,
        kind=row.kind,
        scope=row.scope,
        description=row.description or "",
        is_system=bool(row.is_system),
        metadata=dict(row.meta or {}),
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


@dataclass(frozen=True)
class SqlPromptRepository(PromptRepository):
    """SQL implementation of ``PromptRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def create(self, prompt: Prompt) -> None:
        async with _persistence("create prompt"), self.session_factory() as s:
            s.add(
                PromptRow(
                    id=prompt.id,
                    content=prompt.content,
                    meta=dict(prompt.metadata),
                    created_at=prompt.created_at,
                )
            )
            await s.commit()

    async def get(self, prompt_id: str) -> Optional[Prompt]:
        async with _persistence("get prompt"), self.session_factory() as s:
            row = await s.get(PromptRow, prompt_id)
            if row is None:
                return None
            return Prompt(id=row.id, content=row.content, metadata=dict(row.meta or {}), created_at=_as_utc(row.created_at))


@dataclass(frozen=True)
class SqlPlanRepository(PlanRepository):
    """SQL implementation of ``PlanRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def create(self, plan: Plan) -> None:
        """
        Persist a new plan record.

        Args:
            plan: The plan domain object to insert.
        """
        async with _persistence("create plan"), self.session_factory() as s:
            s.add(
                PlanRow(
                    id=plan.id,
                    prompt_id=plan.prompt_id,
                    steps=[step.model_dump(mode="json") for step in plan.steps],
                    status=plan.status.value,
                    confidence=plan.confidence,
                    created_at=plan.created_at,
                    updated_at=plan.updated_at,
                )
            )
            await s.commit()

    async def get(self, plan_id: str) -> Optional[Plan]:
        async with _persistence("get plan"), self.session_factory() as s:
            row = await s.get(PlanRow, plan_id)
            return _plan_from_row(row) if row is not None else None

    async def list(
        self, *, status: Optional[PlanStatus] = None, limit: int = 100, offset: int = 0
    ) -> list[Plan]:
        async with _persistence("list plans"), self.session_factory() as s:
            stmt = select(PlanRow)
            if status is not None:
                stmt = stmt.where(PlanRow.status == status.value)
            stmt = stmt.order_by(PlanRow.created_at.desc()).offset(offset).limit(limit)
            result = await s.execute(stmt)
            return [_plan_from_row(r) for r in result.scalars().all()]

    async def update_status(self, plan_id: str, *, status: PlanStatus) -> None:
        """
        Update the status of an existing plan.

        Args:
            plan_id: The ID of the plan to update.
            status: The new status value.
        """
        async with _persistence("update plan status"), self.session_factory() as s:
            await s.execute(
                update(PlanRow).where(PlanRow.id == plan_id).values(status=status.value, updated_at=_utc_now())
            )
            await s.commit()

    async def claim_for_execution(self, plan_id: str) -> bool:
        async with _persistence("claim plan"), self.session_factory() as s:
            result = await s.execute(
                update(PlanRow)
                .where(PlanRow.id == plan_id, PlanRow.status == PlanStatus.pending.value)
                .values(status=PlanStatus.executing.value, updated_at=_utc_now())
            )
            await s.commit()
            return result.rowcount == 1


@dataclass(frozen=True)
class SqlEntityRepository(EntityRepository):
    """SQL implementation of ``EntityRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def create(self, entity: Entity) -> None:
        async with _persistence("create entity"), self.session_factory() as s:
            s.add(
                EntityRow(
                    id=entity.id,
                    content=entity.content,
                    capabilities=list(entity.capabilities),
                    embedding=list(entity.embedding) if entity.embedding is not None else None,
                    meta=dict(entity.metadata),
                    created_at=entity.created_at,
                )
            )
            await s.commit()

    async def get(self, entity_id: str) -> Optional[Entity]:
        async with _persistence("get entity"), self.session_factory() as s:
            row = await s.get(EntityRow, entity_id)
            return _entity_from_row(row) if row is not None else None

    async def get_many(self, entity_ids: Sequence[str]) -> list[Entity]:
        if not entity_ids:
            return []
        async with _persistence("get entities"), self.session_factory() as s:
            result = await s.execute(select(EntityRow).where(EntityRow.id.in_(list(entity_ids))))
            return [_entity_from_row(r) for r in result.scalars().all()]

    async def list(self, *, limit: int = 100, offset: int = 0) -> list[Entity]:
        async with _persistence("list entities"), self.session_factory() as s:
            stmt = select(EntityRow).order_by(EntityRow.created_at.desc()).offset(offset).limit(limit)
            result = await s.execute(stmt)
            return [_entity_from_row(r) for r in result.scalars().all()]

    async def search(self, query: str, *, limit: int = 10) -> list[Entity]:
        async with _persistence("search entities"), self.session_factory() as s:
            pattern = f"%{query.lower()}%"
            stmt = (
                select(EntityRow)
                .where(func.lower(EntityRow.content).like(pattern))
                .order_by(EntityRow.created_at.desc())
                .limit(limit)
            )
            result = await s.execute(stmt)
            return [_entity_from_row(r) for r in result.scalars().all()]


@dataclass(frozen=True)
class SqlEventRepository(EventRepository):
    """SQL implementation of ``EventRepository`` (append-only)."""

    session_factory: async_sessionmaker[AsyncSession]

    async def append(self, event: Event) -> None:
        """
        Append a new event to the store.

        Args:
            event: The event domain object.
        """
        async with _persistence("append event"), self.session_factory() as s:
            s.add(
                EventRow(
                    id=event.id,
                    plan_id=event.plan_id,
                    step_index=event.step_index,
                    sequence=event.sequence,
                    op=event.op,
                    produces=list(event.produces),
                    consumes=list(event.consumes),
                    result=event.model_dump(mode="json", include={"result"})["result"],
                    error=event.error,
                    created_at=event.created_at,
                )
            )
            await s.commit()

    async def list(self, *, plan_id: Optional[str] = None, limit: int = 100) -> list[Event]:
        """
        List events, per plan in execution order or globally newest first.

        Args:
            plan_id: Optional plan identifier.
            limit: Max number of events to return.

        Returns:
            A list of Event objects.
        """
        async with _persistence("list events"), self.session_factory() as s:
            stmt = select(EventRow)
            if plan_id is not None:
                stmt = stmt.where(EventRow.plan_id == plan_id).order_by(EventRow.sequence.asc())
            else:
                stmt = stmt.order_by(EventRow.created_at.desc())
            result = await s.execute(stmt.limit(limit))
            return [_event_from_row(r) for r in result.scalars().all()]


@dataclass(frozen=True)
class SqlCapabilityRepository(CapabilityRepository):
    """SQL implementation of ``CapabilityRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def upsert(self, capability: Capability) -> None:
        async with _persistence("upsert capability"), self.session_factory() as s:
            row = await s.get(CapabilityRow, capability.id)
            if row is None:
                row = CapabilityRow(id=capability.id, created_at=capability.created_at)
                s.add(row)
            row.kind = capability.kind.value
            row.scope = capability.scope
            row.description = capability.description
            row.is_system = capability.is_system
            row.meta = dict(capability.metadata)
            row.updated_at = capability.updated_at
            await s.commit()

    async def get(self, capability_id: str) -> Optional[Capability]:
        async with _persistence("get capability"), self.session_factory() as s:
            row = await s.get(CapabilityRow, capability_id)
            return _capability_from_row(row) if row is not None else None

    async def delete(self, capability_id: str) -> bool:
        async with _persistence("delete capability"), self.session_factory() as s:
            result = await s.execute(delete(CapabilityRow).where(CapabilityRow.id == capability_id))
            await s.commit()
            return result.rowcount > 0

    async def list(self) -> list[Capability]:
        async with _persistence("list capabilities"), self.session_factory() as s:
            result = await s.execute(select(CapabilityRow).order_by(CapabilityRow.id.asc()))
            return [_capability_from_row(r) for r in result.scalars().all()]


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience bundle of SQL repositories sharing one session factory."""

    prompts: SqlPromptRepository
    plans: SqlPlanRepository
    entities: SqlEntityRepository
    events: SqlEventRepository
    capabilities: SqlCapabilityRepository


def build_sql_repos(*, session_factory: async_sessionmaker[AsyncSession]) -> SqlRepoBundle:
    """Build a ``SqlRepoBundle`` from a session factory."""
    return SqlRepoBundle(
        prompts=SqlPromptRepository(session_factory=session_factory),
        plans=SqlPlanRepository(session_factory=session_factory),
        entities=SqlEntityRepository(session_factory=session_factory),
        events=SqlEventRepository(session_factory=session_factory),
        capabilities=SqlCapabilityRepository(session_factory=session_factory),
    )
