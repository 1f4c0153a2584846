"""
Capability API Endpoints.

Administration of the capability registry. System capabilities are listed
like any other but cannot be updated or deleted (403). Every change is
persisted so the registry survives restarts.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Response

from intent_router.agent_core.errors import CapabilityNotFoundError
from intent_router.agent_core.schemas.domain import Capability, CapabilityKind
from intent_router.core.logging_config import get_logger
from intent_router.server.schemas import (
    CapabilityCreate,
    CapabilityImport,
    CapabilityImportResult,
    CapabilityUpdate,
)
from intent_router.server.services.deps import OrchestratorDep

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "",
    response_model=List[Capability],
    summary="List Capabilities",
    description="List registered capabilities, optionally filtered by kind and scope.",
)
async def list_capabilities(
    orchestrator: OrchestratorDep,
    kind: Optional[CapabilityKind] = None,
    scope: Optional[str] = None,
):
    return orchestrator.list_capabilities(kind=kind, scope=scope)


@router.post(
    "",
    response_model=Capability,
    status_code=201,
    summary="Create Capability",
    description="Register a custom capability. Returns 409 if the id is already registered.",
)
async def create_capability(cap_in: CapabilityCreate, orchestrator: OrchestratorDep):
    cap = Capability(
        id=cap_in.id,
        kind=cap_in.kind,
        scope=cap_in.scope,
        description=cap_in.description,
        metadata=dict(cap_in.metadata),
    )
    created = await orchestrator.add_capability(cap)
    logger.info(f"Capability created: {created.id} ({created.kind.value})")
    return created


@router.get(
    "/hierarchy",
    response_model=Dict[str, List[str]],
    summary="Capability Hierarchy",
    description="Capability ids grouped by scope.",
)
async def capability_hierarchy(orchestrator: OrchestratorDep):
    return orchestrator.capability_hierarchy()


@router.get(
    "/export",
    response_model=List[Dict[str, Any]],
    summary="Export Capabilities",
    description="Export custom capabilities in a form accepted by the import endpoint.",
)
async def export_capabilities(orchestrator: OrchestratorDep):
    return orchestrator.export_capabilities()


@router.post(
    "/import",
    response_model=CapabilityImportResult,
    summary="Import Capabilities",
    description="Import previously exported custom capabilities. Existing ids are skipped unless `replace` is set.",
)
async def import_capabilities(body: CapabilityImport, orchestrator: OrchestratorDep):
    imported = await orchestrator.import_capabilities(body.items, replace=body.replace)
    return CapabilityImportResult(imported=imported)


@router.get(
    "/{capability_id}",
    response_model=Capability,
    summary="Get Capability",
)
async def get_capability(capability_id: str, orchestrator: OrchestratorDep):
    cap = orchestrator.get_capability(capability_id)
    if cap is None:
        raise CapabilityNotFoundError(capability_id)
    return cap


@router.put(
    "/{capability_id}",
    response_model=Capability,
    summary="Update Capability",
    description="Replace kind, scope, description and metadata of a custom capability.",
)
async def update_capability(capability_id: str, cap_in: CapabilityUpdate, orchestrator: OrchestratorDep):
    cap = Capability(
        id=capability_id,
        kind=cap_in.kind,
        scope=cap_in.scope,
        description=cap_in.description,
        metadata=dict(cap_in.metadata),
    )
    return await orchestrator.update_capability(cap)


@router.delete(
    "/{capability_id}",
    status_code=204,
    summary="Delete Capability",
    description="Remove a custom capability. System capabilities cannot be removed.",
)
async def delete_capability(capability_id: str, orchestrator: OrchestratorDep):
    if not await orchestrator.remove_capability(capability_id):
        raise HTTPException(status_code=404, detail=f"Capability not found: {capability_id}")
    return Response(status_code=204)
