from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def get_by_handle_hash(self, handle_hash: str) -> Optional[Session]:
        """Find session by handle digest"""
        stmt = select(Session).where(Session.handle_hash == handle_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def touch(self, session_id: UUID, now: datetime) -> None:
        """Bump last_seen_at"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)  # noqa: E712
            .values(last_seen_at=now)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def revoke_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_by_account_id(self, account_id: UUID, now: datetime) -> int:
        """Revoke all active sessions for an account"""
        stmt = (
            update(Session)
            .where(Session.account_id == account_id, Session.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_stale(self, idle_cutoff: datetime, now: datetime) -> int:
        """Delete sessions that can never validate again"""
        stmt = delete(Session).where(
            or_(
                Session.revoked == True,  # noqa: E712
                Session.last_seen_at < idle_cutoff,
                Session.expires_at <= now,
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
