# src/adminportal/identity/api/routes/client_users.py
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from adminportal.identity.api.dependencies import get_directory_service, get_tenant_access_gate, require_identity
from adminportal.identity.api.schemas import CreateClientUserRequest, UserEnvelope, UserListResponse, UserResponse
from adminportal.identity.application.directory_service import DirectoryService
from adminportal.identity.application.tenant_access_gate import TenantAccessGate
from adminportal.identity.domain.identity import Identity

router = APIRouter(prefix="/api/client/{tenant_id}/users", tags=["client:users"])

# Any authenticated role may call these; the tenant gate decides.
Caller = Annotated[Identity, Depends(require_identity)]
Gate = Annotated[TenantAccessGate, Depends(get_tenant_access_gate)]
Directory = Annotated[DirectoryService, Depends(get_directory_service)]


@router.get("", response_model=UserListResponse, response_model_exclude_none=True)
async def list_client_users(tenant_id: str, identity: Caller, gate: Gate, directory: Directory) -> UserListResponse:
    await gate.require_tenant_user_management(identity, tenant_id)
    users = await directory.list_client_users(tenant_id)
    return UserListResponse(users=[UserResponse.from_entity(u) for u in users])


@router.post("", response_model=UserEnvelope, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_client_user(
    tenant_id: str,
    payload: CreateClientUserRequest,
    identity: Caller,
    gate: Gate,
    directory: Directory,
) -> UserEnvelope:
    await gate.require_tenant_user_management(identity, tenant_id)
    user = await directory.create_client_user(
        tenant_id,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        phone=payload.phone,
        is_org_admin=payload.is_org_admin,
        has_billing_access=payload.has_billing_access,
    )
    return UserEnvelope(user=UserResponse.from_entity(user))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client_user(
    tenant_id: str,
    user_id: str,
    identity: Caller,
    gate: Gate,
    directory: Directory,
) -> Response:
    await gate.require_tenant_user_management(identity, tenant_id)
    await directory.delete_client_user(tenant_id, user_id, actor_id=identity.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
