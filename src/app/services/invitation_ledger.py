"""
Invitation Ledger

Lifecycle of pre-provisioned access: creation, resend, single-use consumption,
expiry and sweeping.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from result import Err, Ok, Result

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import normalize_email, utcnow
from src.domain.entities import AccountRole, Invitation, InvitationStatus
from src.domain.errors import Error

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
MIN_TTL = timedelta(days=1)
MAX_TTL = timedelta(days=90)


@dataclass(frozen=True)
class InvitationClaim:
    """What a consumed invitation grants"""

    invitation_id: UUID
    email: str
    role: AccountRole
    invited_by_id: UUID
    invited_at: datetime


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


class InvitationLedger:
    """
    Business Rules:
    - At most one pending invitation per email (live or expired)
    - Creating while a live invitation exists fails with DUPLICATE_INVITATION
    - An expired pending invitation is superseded (revoked) by a new one
    - Resend rotates the token and resets expiry on the same row
    - Consume is one conditional update; a second consume always fails
    - Runs inside the caller's unit of work; the caller commits
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def create_invitation(
        self,
        email: str,
        role: AccountRole,
        issuer_id: UUID,
        ttl: timedelta,
        now: Optional[datetime] = None,
    ) -> Result[Invitation, Error]:
        now = now or utcnow()
        email = normalize_email(email)

        ttl_check = _check_ttl(ttl)
        if ttl_check.is_err():
            return ttl_check

        existing = await self.uow.invitations.get_pending_by_email(email)
        if existing is not None:
            if existing.is_live(now):
                return Err(
                    Error(
                        "DUPLICATE_INVITATION",
                        "A pending invitation already exists for this email",
                    )
                )
            # Expired leftovers must make room under the pending-email index
            existing.status = InvitationStatus.revoked
            await self.uow.invitations.update(existing)

        invitation = Invitation(
            email=email,
            role=role,
            token=generate_token(),
            invited_by_id=issuer_id,
            invited_at=now,
            expires_at=now + ttl,
        )
        created = await self.uow.invitations.create(invitation)
        if created is None:
            return Err(
                Error(
                    "DUPLICATE_INVITATION",
                    "A pending invitation already exists for this email",
                )
            )
        return Ok(created)

    async def resend(
        self, email: str, ttl: timedelta, now: Optional[datetime] = None
    ) -> Result[Invitation, Error]:
        now = now or utcnow()

        ttl_check = _check_ttl(ttl)
        if ttl_check.is_err():
            return ttl_check

        invitation = await self.uow.invitations.get_pending_by_email(email)
        if invitation is None:
            return Err(Error("INVITATION_NOT_FOUND", "No pending invitation for this email"))

        invitation.token = generate_token()
        invitation.expires_at = now + ttl
        invitation.resent_at = now
        invitation.resend_count += 1
        return Ok(await self.uow.invitations.update(invitation))

    async def consume(
        self, token: str, now: Optional[datetime] = None
    ) -> Result[InvitationClaim, Error]:
        now = now or utcnow()

        if await self.uow.invitations.mark_consumed(token, now):
            invitation = await self.uow.invitations.get_by_token(token)
            return Ok(
                InvitationClaim(
                    invitation_id=invitation.id,
                    email=invitation.email,
                    role=invitation.role,
                    invited_by_id=invitation.invited_by_id,
                    invited_at=invitation.invited_at,
                )
            )

        # The update matched nothing; only now classify why
        invitation = await self.uow.invitations.get_by_token(token)
        if (
            invitation is not None
            and invitation.status == InvitationStatus.pending
            and invitation.is_expired(now)
        ):
            return Err(Error("INVITATION_EXPIRED", "This invitation has expired"))

        return Err(Error("INVITATION_NOT_FOUND", "Invalid or already used invitation"))

    async def find_live(self, email: str, now: Optional[datetime] = None) -> Optional[Invitation]:
        invitation = await self.uow.invitations.get_pending_by_email(email)
        if invitation is not None and invitation.is_live(now or utcnow()):
            return invitation
        return None

    async def list_pending(
        self, page_number: int, page_size: int
    ) -> Tuple[List[Invitation], int]:
        offset = (page_number - 1) * page_size
        return await self.uow.invitations.list_pending_paginated(offset, page_size)

    async def revoke(self, invitation_id: UUID) -> Result[Invitation, Error]:
        invitation = await self.uow.invitations.get_by_id(invitation_id)
        if invitation is None or invitation.status == InvitationStatus.revoked:
            return Err(Error("INVITATION_NOT_FOUND", "Invitation not found"))

        if invitation.status == InvitationStatus.consumed:
            return Err(
                Error(
                    "INVITATION_ALREADY_CONSUMED",
                    "Cannot revoke an invitation that has already been used",
                )
            )

        invitation.status = InvitationStatus.revoked
        return Ok(await self.uow.invitations.update(invitation))

    async def sweep(self, cutoff: datetime) -> int:
        count = await self.uow.invitations.delete_pending_expired_before(cutoff)
        if count:
            logger.info("Swept %d invitations expired before %s", count, cutoff.isoformat())
        return count


def _check_ttl(ttl: timedelta) -> Result[None, Error]:
    if ttl < MIN_TTL or ttl > MAX_TTL:
        return Err(Error("INVALID_TTL", "Invitation lifetime must be between 1 and 90 days"))
    return Ok(None)
