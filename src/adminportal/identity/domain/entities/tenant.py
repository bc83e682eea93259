# src/adminportal/identity/domain/entities/tenant.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple
from uuid import uuid4


def normalize_tenant_name(name: str) -> str:
    return " ".join(name.split()).lower()


@dataclass(frozen=True)
class Tenant:
    """
    A client organization: the unit of billing and data isolation.

    ``assigned_engineer_ids`` is ordered; the first engineer is the lead.
    """
    id: str
    name: str
    assigned_engineer_ids: Tuple[str, ...] = ()
    company_url: Optional[str] = None
    active_subscription_id: Optional[str] = None
    credit_balance: Decimal = Decimal("0")
    pipeline_phase: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Tenant name cannot be empty")
        if len(set(self.assigned_engineer_ids)) != len(self.assigned_engineer_ids):
            raise ValueError("Tenant engineer list cannot contain duplicates")

    @staticmethod
    def new_id() -> str:
        return str(uuid4())

    @property
    def normalized_name(self) -> str:
        return normalize_tenant_name(self.name)

    @property
    def lead_engineer_id(self) -> Optional[str]:
        return self.assigned_engineer_ids[0] if self.assigned_engineer_ids else None

    def has_engineer(self, engineer_id: str) -> bool:
        return engineer_id in self.assigned_engineer_ids
