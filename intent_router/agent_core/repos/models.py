"""SQLAlchemy ORM models for router persistence.

These ORM models define the SQL schema used by the SQL repository
implementation in ``intent_router.agent_core.repos.sql``.

Design
------

- Prompts are immutable request records.
- Plans embed their steps as an ordered JSON array and carry a status.
- Entities carry their capability tags as a JSON array.
- Events form an append-only execution log, ordered per plan by ``sequence``.
- Capabilities mirror the in-memory registry.

JSON columns use ``JSONB`` on PostgreSQL and generic ``JSON`` elsewhere.

Table names are prefixed with ``ir_`` to avoid collisions in shared databases.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class PromptRow(Base):
    """Row model for ``ir_prompts``."""

    __tablename__ = "ir_prompts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    content: Mapped[str] = mapped_column(Text)
    meta: Mapped[Dict[str, Any]] = mapped_column("metadata", JSONType, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class PlanRow(Base):
    """Row model for ``ir_plans``.

    ``steps`` is the ordered list of step objects. ``status`` moves
    pending → executing → completed | failed.
    """

    __tablename__ = "ir_plans"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    prompt_id: Mapped[str] = mapped_column(String(64), ForeignKey("ir_prompts.id"), index=True)
    steps: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType)
    status: Mapped[str] = mapped_column(String(32), index=True)
    confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class EntityRow(Base):
    """Row model for ``ir_entities``."""

    __tablename__ = "ir_entities"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    content: Mapped[str] = mapped_column(Text)
    capabilities: Mapped[List[str]] = mapped_column(JSONType)
    embedding: Mapped[Optional[List[float]]] = mapped_column(JSONType, nullable=True)
    meta: Mapped[Dict[str, Any]] = mapped_column("metadata", JSONType, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class EventRow(Base):
    """Row model for ``ir_events``.

    Append-only: rows are never updated or deleted.
    """

    __tablename__ = "ir_events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    plan_id: Mapped[str] = mapped_column(String(64), ForeignKey("ir_plans.id"), index=True)
    step_index: Mapped[int] = mapped_column(Integer)
    sequence: Mapped[int] = mapped_column(Integer, default=0)
    op: Mapped[str] = mapped_column(String(128))
    produces: Mapped[List[str]] = mapped_column(JSONType)
    consumes: Mapped[List[str]] = mapped_column(JSONType)
    result: Mapped[Optional[Any]] = mapped_column(JSONType, nullable=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class CapabilityRow(Base):
    """Row model for ``ir_capabilities``."""

    __tablename__ = "ir_capabilities"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    kind: Mapped[str] = mapped_column(String(16), index=True)
    scope: Mapped[str] = mapped_column(String(64), index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    is_system: Mapped[bool] = mapped_column(Boolean, default=False)
    meta: Mapped[Dict[str, Any]] = mapped_column("metadata", JSONType, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
