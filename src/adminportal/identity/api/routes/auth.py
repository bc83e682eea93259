# src/adminportal/identity/api/routes/auth.py
from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Response

from adminportal.identity.api.dependencies import get_auth_service, get_current_identity, get_settings
from adminportal.identity.api.schemas import LoginRequest, UserEnvelope, UserResponse
from adminportal.identity.application.auth_service import AuthService
from adminportal.identity.domain.identity import Identity
from adminportal.shared.config import Settings

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=UserEnvelope, response_model_exclude_none=True)
async def login(
    payload: LoginRequest,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UserEnvelope:
    result = await auth.login(payload.email, payload.password)
    response.set_cookie(
        settings.session_cookie_name,
        result.token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.is_prod,
        samesite="strict",
        path="/",
    )
    return UserEnvelope(user=UserResponse.from_entity(result.user))


@router.post("/logout")
async def logout(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict:
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"success": True}


@router.get("/me", response_model=UserEnvelope, response_model_exclude_none=True)
async def me(
    identity: Annotated[Optional[Identity], Depends(get_current_identity)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> UserEnvelope:
    user = await auth.current_user(identity)
    return UserEnvelope(user=UserResponse.from_entity(user))
