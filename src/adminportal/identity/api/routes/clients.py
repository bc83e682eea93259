# src/adminportal/identity/api/routes/clients.py
from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status

from adminportal.identity.api.dependencies import (
    get_assignment_service,
    get_current_identity,
    get_deletion_orchestrator,
    get_directory_service,
    get_tenant_access_gate,
    require_roles,
)
from adminportal.identity.api.schemas import (
    CreateTenantRequest,
    DeletionResponse,
    EngineerListResponse,
    ReplaceEngineersRequest,
    TenantResponse,
)
from adminportal.identity.application.assignment_service import EngineerAssignmentService
from adminportal.identity.application.deletion_orchestrator import CascadingDeletionOrchestrator
from adminportal.identity.application.directory_service import DirectoryService
from adminportal.identity.application.tenant_access_gate import TenantAccessGate
from adminportal.identity.domain.identity import Identity
from adminportal.identity.domain.roles import Role

router = APIRouter(prefix="/api/admin/clients", tags=["admin:clients"])

AdminOnly = Annotated[Identity, Depends(require_roles(Role.ADMIN))]
Staff = Annotated[Identity, Depends(require_roles(Role.ADMIN, Role.SOLUTIONS_ENGINEER))]


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: CreateTenantRequest,
    _: AdminOnly,
    directory: Annotated[DirectoryService, Depends(get_directory_service)],
) -> TenantResponse:
    tenant = await directory.create_tenant(
        payload.name,
        company_url=payload.company_url,
        credit_balance=payload.credit_balance,
        pipeline_phase=payload.pipeline_phase,
    )
    return TenantResponse.from_entity(tenant)


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_client(
    tenant_id: str,
    identity: Staff,
    gate: Annotated[TenantAccessGate, Depends(get_tenant_access_gate)],
    directory: Annotated[DirectoryService, Depends(get_directory_service)],
) -> TenantResponse:
    # scope check first so a denied caller cannot probe for existence
    await gate.require_tenant_access(identity, tenant_id)
    return TenantResponse.from_entity(await directory.get_tenant(tenant_id))


@router.delete("/{tenant_id}", response_model=DeletionResponse)
async def delete_client(
    tenant_id: str,
    identity: Annotated[Optional[Identity], Depends(get_current_identity)],
    orchestrator: Annotated[CascadingDeletionOrchestrator, Depends(get_deletion_orchestrator)],
) -> DeletionResponse:
    result = await orchestrator.delete_tenant(tenant_id, identity)
    return DeletionResponse.from_result(result)


@router.get("/{tenant_id}/engineers", response_model=EngineerListResponse)
async def list_client_engineers(
    tenant_id: str,
    identity: Staff,
    gate: Annotated[TenantAccessGate, Depends(get_tenant_access_gate)],
    directory: Annotated[DirectoryService, Depends(get_directory_service)],
) -> EngineerListResponse:
    await gate.require_tenant_access(identity, tenant_id)
    return EngineerListResponse.from_users(await directory.list_tenant_engineers(tenant_id))


@router.put("/{tenant_id}/engineers", response_model=EngineerListResponse)
async def replace_client_engineers(
    tenant_id: str,
    payload: ReplaceEngineersRequest,
    _: AdminOnly,
    assignments: Annotated[EngineerAssignmentService, Depends(get_assignment_service)],
    directory: Annotated[DirectoryService, Depends(get_directory_service)],
) -> EngineerListResponse:
    await assignments.replace_engineers(tenant_id, payload.engineer_ids)
    return EngineerListResponse.from_users(await directory.list_tenant_engineers(tenant_id))


@router.post("/{tenant_id}/engineers/{engineer_id}", response_model=TenantResponse)
async def assign_client_engineer(
    tenant_id: str,
    engineer_id: str,
    _: AdminOnly,
    assignments: Annotated[EngineerAssignmentService, Depends(get_assignment_service)],
) -> TenantResponse:
    return TenantResponse.from_entity(await assignments.assign(tenant_id, engineer_id))


@router.delete("/{tenant_id}/engineers/{engineer_id}", response_model=TenantResponse)
async def unassign_client_engineer(
    tenant_id: str,
    engineer_id: str,
    _: AdminOnly,
    assignments: Annotated[EngineerAssignmentService, Depends(get_assignment_service)],
) -> TenantResponse:
    return TenantResponse.from_entity(await assignments.unassign(tenant_id, engineer_id))
