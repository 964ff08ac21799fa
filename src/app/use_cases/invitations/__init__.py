"""
Invitation Use Cases

Issuing, listing and revoking invitations.
"""

from .create_invitation_use_case import CreateInvitationUseCase
from .dtos import (
    InvitationResponse,
    PendingInvitationItem,
    PendingInvitationsResponse,
    RevokeInvitationResponse,
)
from .list_pending_invitations_use_case import ListPendingInvitationsUseCase
from .revoke_invitation_use_case import RevokeInvitationUseCase

__all__ = [
    "CreateInvitationUseCase",
    "RevokeInvitationUseCase",
    "ListPendingInvitationsUseCase",
    "InvitationResponse",
    "PendingInvitationItem",
    "PendingInvitationsResponse",
    "RevokeInvitationResponse",
]
