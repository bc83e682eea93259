# src/adminportal/identity/api/routes/external.py
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from adminportal.identity.api.dependencies import get_api_key_gate
from adminportal.identity.application.api_key_gate import ExternalApiKeyGate

router = APIRouter(prefix="/api/external", tags=["external"])


@router.get("/ping")
async def ping(request: Request, gate: Annotated[ExternalApiKeyGate, Depends(get_api_key_gate)]):
    denial = gate.authenticate(request)
    if denial is not None:
        return denial
    return {"status": "ok"}
