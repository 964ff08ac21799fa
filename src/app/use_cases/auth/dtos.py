"""
Auth Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the login and session flows.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.domain.entities import Account


# ============================================================================
# Command DTOs
# ============================================================================


class VerifiedIdentity(BaseModel):
    """Identity asserted by a federated provider after a successful handshake"""

    email: str = Field(..., min_length=3)
    display_name: str = ""


# ============================================================================
# Response DTOs
# ============================================================================


class AccountResponse(BaseModel):
    """Public projection of an account"""

    id: str
    email: str
    display_name: str
    department: Optional[str] = None
    job_title: Optional[str] = None
    role: str
    is_active: bool
    is_provisioned: bool
    activated_at: Optional[str] = None
    last_login_at: Optional[str] = None
    created_at: str

    @classmethod
    def from_entity(cls, account: Account) -> "AccountResponse":
        return cls(
            id=str(account.id),
            email=account.email,
            display_name=account.display_name,
            department=account.department,
            job_title=account.job_title,
            role=account.role.value,
            is_active=account.is_active,
            is_provisioned=account.is_provisioned,
            activated_at=_iso(account.activated_at),
            last_login_at=_iso(account.last_login_at),
            created_at=account.created_at.isoformat(),
        )


class LoginOutcome(BaseModel):
    """Result of a completed login callback"""

    account: AccountResponse
    session_handle: str
    session_expires_at: datetime
    outcome: str  # returning / activated / invited / created
    warnings: List[str] = []


class LogoutResponse(BaseModel):
    """Response for logout use case"""

    status: str


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None
