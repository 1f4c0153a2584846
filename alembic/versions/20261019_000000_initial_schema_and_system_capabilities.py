"""Initial schema and system capabilities for the intent router

Revision ID: 20261019_000000
Revises: None
Create Date: 2026-10-19 00:00:00.000000

Creates the router tables and seeds the system capability set:
- ir_prompts, ir_plans, ir_entities, ir_events, ir_capabilities
- the built-in ToolCap / DataCap entries (``is_system = true``)

Revision format: YYYYMMDD_HHMMSS_description

"""

from datetime import datetime, timezone
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op
from intent_router.agent_core.capabilities import system_capabilities

# revision identifiers, used by Alembic.
revision: str = "20261019_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(JSONB(), "postgresql")


def upgrade() -> None:
    """Create all tables and seed the system capabilities."""

    op.create_table(
        "ir_prompts",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("metadata", JSONType, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "ir_plans",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("prompt_id", sa.String(64), sa.ForeignKey("ir_prompts.id"), nullable=False),
        sa.Column("steps", JSONType, nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_ir_plans_prompt_id", "prompt_id"),
        sa.Index("ix_ir_plans_status", "status"),
    )

    op.create_table(
        "ir_entities",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("capabilities", JSONType, nullable=False),
        sa.Column("embedding", JSONType, nullable=True),
        sa.Column("metadata", JSONType, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_ir_entities_created_at", "created_at"),
    )

    op.create_table(
        "ir_events",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("plan_id", sa.String(64), sa.ForeignKey("ir_plans.id"), nullable=False),
        sa.Column("step_index", sa.Integer(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("op", sa.String(128), nullable=False),
        sa.Column("produces", JSONType, nullable=False),
        sa.Column("consumes", JSONType, nullable=False),
        sa.Column("result", JSONType, nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_ir_events_plan_id", "plan_id"),
        sa.Index("ix_ir_events_created_at", "created_at"),
    )

    capabilities = op.create_table(
        "ir_capabilities",
        sa.Column("id", sa.String(128), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("scope", sa.String(64), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("is_system", sa.Boolean(), nullable=False),
        sa.Column("metadata", JSONType, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_ir_capabilities_kind", "kind"),
        sa.Index("ix_ir_capabilities_scope", "scope"),
    )

    now = datetime.now(timezone.utc)
    op.bulk_insert(
        capabilities,
        [
            {
                "id": cap.id,
                "kind": cap.kind.value,
                "scope": cap.scope,
                "description": cap.description,
                "is_system": True,
                "metadata": {},
                "created_at": now,
                "updated_at": now,
            }
            for cap in system_capabilities()
        ],
    )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("ir_capabilities")
    op.drop_table("ir_events")
    op.drop_table("ir_entities")
    op.drop_table("ir_plans")
    op.drop_table("ir_prompts")
