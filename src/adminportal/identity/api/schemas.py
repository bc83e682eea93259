"""
Portal API Schemas
"""
from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from adminportal.identity.application.deletion_orchestrator import DeletionResult
from adminportal.identity.domain.entities.tenant import Tenant
from adminportal.identity.domain.entities.user import ClientUserProfile, SolutionsEngineerProfile, User


# ─── Auth ──────────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    """Login request schema"""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, description="Account password")


class UserResponse(BaseModel):
    """
    User projection. Role-specific fields are only filled for their role;
    password material is never part of it.
    """
    id: str
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    assigned_tenant_ids: Optional[List[str]] = Field(None, description="SOLUTIONS_ENGINEER only")
    tenant_id: Optional[str] = Field(None, description="CLIENT_USER only")
    is_org_admin: Optional[bool] = Field(None, description="CLIENT_USER only")
    has_billing_access: Optional[bool] = Field(None, description="CLIENT_USER only")

    @classmethod
    def from_entity(cls, user: User) -> UserResponse:
        data = dict(id=user.id, name=user.name, email=user.email, role=user.role.value, phone=user.phone)
        profile = user.profile
        if isinstance(profile, SolutionsEngineerProfile):
            data["assigned_tenant_ids"] = list(profile.assigned_tenant_ids)
        elif isinstance(profile, ClientUserProfile):
            data.update(
                tenant_id=profile.tenant_id,
                is_org_admin=profile.is_org_admin,
                has_billing_access=profile.has_billing_access,
            )
        return cls(**data)


class UserEnvelope(BaseModel):
    user: UserResponse


# ─── Clients (tenants) ─────────────────────────────────────────────────────

class CreateTenantRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Client display name (unique, case-insensitive)")
    company_url: Optional[str] = Field(None, max_length=2048)
    credit_balance: Decimal = Field(Decimal("0"))
    pipeline_phase: Optional[str] = Field(None, max_length=64)


class TenantResponse(BaseModel):
    id: str
    name: str
    company_url: Optional[str] = None
    active_subscription_id: Optional[str] = None
    credit_balance: Decimal
    pipeline_phase: Optional[str] = None
    assigned_engineer_ids: List[str]
    lead_engineer_id: Optional[str] = None

    @classmethod
    def from_entity(cls, tenant: Tenant) -> TenantResponse:
        return cls(
            id=tenant.id,
            name=tenant.name,
            company_url=tenant.company_url,
            active_subscription_id=tenant.active_subscription_id,
            credit_balance=tenant.credit_balance,
            pipeline_phase=tenant.pipeline_phase,
            assigned_engineer_ids=list(tenant.assigned_engineer_ids),
            lead_engineer_id=tenant.lead_engineer_id,
        )


class EngineerResponse(BaseModel):
    id: str
    name: str
    email: str
    is_lead: bool


class EngineerListResponse(BaseModel):
    engineers: List[EngineerResponse]

    @classmethod
    def from_users(cls, users: List[User]) -> EngineerListResponse:
        return cls(
            engineers=[
                EngineerResponse(id=u.id, name=u.name, email=u.email, is_lead=index == 0)
                for index, u in enumerate(users)
            ]
        )


class ReplaceEngineersRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    engineer_ids: List[str] = Field(default_factory=list, description="Ordered; the first is the lead")


class DeletionResponse(BaseModel):
    tenant_id: str
    deleted_user_count: int
    unlinked_engineer_count: int
    message: str

    @classmethod
    def from_result(cls, result: DeletionResult) -> DeletionResponse:
        return cls(
            tenant_id=result.tenant_id,
            deleted_user_count=result.deleted_user_count,
            unlinked_engineer_count=result.unlinked_engineer_count,
            message=f"Client deleted along with {result.deleted_user_count} client user(s)",
        )


# ─── Users ─────────────────────────────────────────────────────────────────

class CreateStaffUserRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role: Literal["ADMIN", "SOLUTIONS_ENGINEER"]
    password: Optional[str] = Field(None, min_length=8, description="Omit for external-provider accounts")
    phone: Optional[str] = Field(None, max_length=32)


class CreateClientUserRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=8, description="Omit for external-provider accounts")
    phone: Optional[str] = Field(None, max_length=32)
    is_org_admin: bool = False
    has_billing_access: bool = False


class UserListResponse(BaseModel):
    users: List[UserResponse]
