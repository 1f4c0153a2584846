"""
Entity API Endpoints.

Entities are the content items steps read and produce. Each carries data
capability tags that the policy engine checks before a step may consume it.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Query

from intent_router.agent_core.schemas.domain import Entity
from intent_router.server.schemas import EntityCreate
from intent_router.server.services.deps import OrchestratorDep

router = APIRouter()


@router.get(
    "",
    response_model=List[Entity],
    summary="List Entities",
    description="List stored entities, newest first.",
)
async def list_entities(
    orchestrator: OrchestratorDep,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
):
    return await orchestrator.list_entities(limit=limit, offset=offset)


@router.post(
    "",
    response_model=Entity,
    status_code=201,
    summary="Create Entity",
    description="Ingest an entity with its data capability tags.",
)
async def create_entity(entity_in: EntityCreate, orchestrator: OrchestratorDep):
    entity = Entity(
        content=entity_in.content,
        capabilities=list(entity_in.capabilities),
        embedding=entity_in.embedding,
        metadata=dict(entity_in.metadata),
    )
    return await orchestrator.create_entity(entity)


@router.get(
    "/{entity_id}",
    response_model=Entity,
    summary="Get Entity",
)
async def get_entity(entity_id: str, orchestrator: OrchestratorDep):
    entity = await orchestrator.get_entity(entity_id)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"Entity not found: {entity_id}")
    return entity
