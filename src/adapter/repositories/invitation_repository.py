from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.invitation_repository import IInvitationRepository
from src.domain.base import normalize_email
from src.domain.entities import Invitation, InvitationStatus


class InvitationRepository(IInvitationRepository):
    """Invitation repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, invitation_id: UUID) -> Optional[Invitation]:
        """Get invitation by ID"""
        stmt = select(Invitation).where(Invitation.id == invitation_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_token(self, token: str) -> Optional[Invitation]:
        """Get invitation by token"""
        stmt = select(Invitation).where(Invitation.token == token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_pending_by_email(self, email: str) -> Optional[Invitation]:
        """Get pending invitation by email"""
        stmt = select(Invitation).where(
            Invitation.email == normalize_email(email),
            Invitation.status == InvitationStatus.pending,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, invitation: Invitation) -> Optional[Invitation]:
        """Insert a new invitation, None when a pending one already exists"""
        invitation.email = normalize_email(invitation.email)
        self.session.add(invitation)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            return None
        await self.session.refresh(invitation)
        return invitation

    async def update(self, invitation: Invitation) -> Invitation:
        """Update existing invitation"""
        self.session.add(invitation)
        await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def mark_consumed(self, token: str, now: datetime) -> bool:
        """Conditional pending -> consumed transition"""
        stmt = (
            update(Invitation)
            .where(
                Invitation.token == token,
                Invitation.status == InvitationStatus.pending,
                Invitation.expires_at >= now,
            )
            .values(status=InvitationStatus.consumed, consumed_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def list_pending_paginated(
        self, offset: int, limit: int
    ) -> Tuple[List[Invitation], int]:
        """Get a page of pending invitations, newest first"""
        pending = Invitation.status == InvitationStatus.pending
        total = (
            await self.session.exec(
                select(func.count()).select_from(Invitation).where(pending)
            )
        ).one()
        stmt = (
            select(Invitation)
            .where(pending)
            .order_by(Invitation.invited_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def delete_pending_expired_before(self, cutoff: datetime) -> int:
        """Delete long-expired pending invitations"""
        stmt = delete(Invitation).where(
            Invitation.status == InvitationStatus.pending,
            Invitation.expires_at < cutoff,
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
