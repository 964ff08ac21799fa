from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def get_by_handle_hash(self, handle_hash: str) -> Optional[Session]:
        """Find session by the SHA-256 digest of its handle"""
        pass

    @abstractmethod
    async def touch(self, session_id: UUID, now: datetime) -> None:
        """Record activity on a session (sliding idle window)"""
        pass

    @abstractmethod
    async def revoke_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Revoke a specific session. Returns True if it was active."""
        pass

    @abstractmethod
    async def revoke_all_by_account_id(self, account_id: UUID, now: datetime) -> int:
        """Revoke all sessions for an account. Returns count of revoked sessions."""
        pass

    @abstractmethod
    async def delete_stale(self, idle_cutoff: datetime, now: datetime) -> int:
        """Delete revoked, idle-expired or absolutely-expired sessions. Returns count."""
        pass
