"""
API Schemas.

This module contains Pydantic models used for API request bodies.
Response bodies reuse the domain models from ``agent_core.schemas.domain``.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from intent_router.agent_core.schemas.domain import CapabilityKind, ContextItem


class PromptCreate(BaseModel):
    """
    Schema for submitting a prompt.

    The prompt is planned and the plan validated against the capability policy.
    """

    content: str = Field(
        ...,
        min_length=1,
        description="The natural-language request to plan.",
        examples=["Create a summary document and send it to alice@example.com"],
    )
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Free-form metadata stored with the prompt.")
    context: List[ContextItem] = Field(
        default_factory=list,
        description="Prioritized context snippets given to the planner within its context budget.",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "content": "Create a summary document and send it to alice@example.com",
                "metadata": {"source": "console"},
            }
        }
    )


class EntityCreate(BaseModel):
    """Schema for ingesting an entity together with its data capability tags."""

    content: str = Field(..., description="The entity content.")
    capabilities: List[str] = Field(
        default_factory=list,
        description="Data capability tags attached to the entity.",
        examples=[["share_with:team", "pii_allowed"]],
    )
    embedding: Optional[List[float]] = Field(default=None, description="Optional embedding vector.")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class CapabilityCreate(BaseModel):
    """Schema for registering a custom capability."""

    id: str = Field(..., min_length=1, max_length=200, examples=["SEND_SLACK"])
    kind: CapabilityKind = Field(..., description="ToolCap gates actions, DataCap gates information flow.")
    scope: str = Field(..., min_length=1, examples=["communication"])
    description: str = Field(default="")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class CapabilityUpdate(BaseModel):
    """Schema for replacing the mutable fields of a custom capability."""

    kind: CapabilityKind
    scope: str = Field(..., min_length=1)
    description: str = Field(default="")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class CapabilityImport(BaseModel):
    """Schema for bulk-importing capabilities previously exported."""

    items: List[Dict[str, Any]] = Field(default_factory=list)
    replace: bool = Field(default=False, description="Overwrite existing custom capabilities with the same id.")


class CapabilityImportResult(BaseModel):
    imported: int
