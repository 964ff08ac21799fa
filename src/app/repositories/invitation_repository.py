from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import Invitation


class IInvitationRepository(ABC):
    """Invitation repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, invitation_id: UUID) -> Optional[Invitation]:
        """Get invitation by ID"""
        pass

    @abstractmethod
    async def get_by_token(self, token: str) -> Optional[Invitation]:
        """Get invitation by token"""
        pass

    @abstractmethod
    async def get_pending_by_email(self, email: str) -> Optional[Invitation]:
        """Get the pending (possibly expired) invitation for an email"""
        pass

    @abstractmethod
    async def create(self, invitation: Invitation) -> Optional[Invitation]:
        """
        Insert a new invitation.

        Returns None when another pending invitation for the same email won the
        partial unique index; the transaction has been rolled back.
        """
        pass

    @abstractmethod
    async def update(self, invitation: Invitation) -> Invitation:
        """Update existing invitation"""
        pass

    @abstractmethod
    async def mark_consumed(self, token: str, now: datetime) -> bool:
        """
        Atomically consume a live invitation.

        Single conditional update on (token, status=pending, expires_at >= now).
        Returns True only for the one caller whose update matched the row.
        """
        pass

    @abstractmethod
    async def list_pending_paginated(
        self, offset: int, limit: int
    ) -> Tuple[List[Invitation], int]:
        """Get a page of pending invitations (expired included), newest first"""
        pass

    @abstractmethod
    async def delete_pending_expired_before(self, cutoff: datetime) -> int:
        """Delete pending invitations that expired before cutoff. Returns count."""
        pass
