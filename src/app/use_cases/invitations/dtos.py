"""
Invitation Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import Invitation


class InvitationResponse(BaseModel):
    """Response for any use case that issues an invitation token"""

    id: str
    email: str
    role: str
    status: str
    token: str
    invitation_url: str
    expires_at: str
    resend_count: int
    resent: bool = False

    @classmethod
    def from_entity(
        cls, invitation: Invitation, frontend_url: str, resent: bool = False
    ) -> "InvitationResponse":
        return cls(
            id=str(invitation.id),
            email=invitation.email,
            role=invitation.role.value,
            status=invitation.status.value,
            token=invitation.token,
            invitation_url=build_invitation_url(frontend_url, invitation.token),
            expires_at=invitation.expires_at.isoformat(),
            resend_count=invitation.resend_count,
            resent=resent,
        )


class PendingInvitationItem(BaseModel):
    """Pending invitation as listed to admins (token omitted)"""

    id: str
    email: str
    role: str
    invited_by_id: str
    invited_at: str
    expires_at: str
    resent_at: Optional[str] = None
    resend_count: int
    is_expired: bool

    @classmethod
    def from_entity(cls, invitation: Invitation, now: datetime) -> "PendingInvitationItem":
        return cls(
            id=str(invitation.id),
            email=invitation.email,
            role=invitation.role.value,
            invited_by_id=str(invitation.invited_by_id),
            invited_at=invitation.invited_at.isoformat(),
            expires_at=invitation.expires_at.isoformat(),
            resent_at=invitation.resent_at.isoformat() if invitation.resent_at else None,
            resend_count=invitation.resend_count,
            is_expired=invitation.is_expired(now),
        )


class PendingInvitationsResponse(BaseModel):
    """Response for list pending invitations use case"""

    items: List[PendingInvitationItem]
    total: int
    page_number: int
    page_size: int


class RevokeInvitationResponse(BaseModel):
    """Response for revoke invitation use case"""

    id: str
    status: str


def build_invitation_url(frontend_url: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/login?invitation={token}"
