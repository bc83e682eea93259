# src/adminportal/identity/api/routes/users.py
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from adminportal.identity.api.dependencies import get_directory_service, require_roles
from adminportal.identity.api.schemas import CreateStaffUserRequest, UserEnvelope, UserResponse
from adminportal.identity.application.directory_service import DirectoryService
from adminportal.identity.domain.identity import Identity
from adminportal.identity.domain.roles import Role

router = APIRouter(prefix="/api/admin/users", tags=["admin:users"])


@router.post("", response_model=UserEnvelope, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_staff_user(
    payload: CreateStaffUserRequest,
    _: Annotated[Identity, Depends(require_roles(Role.ADMIN))],
    directory: Annotated[DirectoryService, Depends(get_directory_service)],
) -> UserEnvelope:
    user = await directory.create_staff_user(
        name=payload.name,
        email=payload.email,
        role=Role(payload.role),
        password=payload.password,
        phone=payload.phone,
    )
    return UserEnvelope(user=UserResponse.from_entity(user))
