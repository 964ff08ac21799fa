"""
Revoke Invitation Use Case
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from result import Ok, Result

from src.app.services.authorization import AuthorizationResolver
from src.app.services.invitation_ledger import InvitationLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Account, AccountRole, AuditEvent
from src.domain.errors import Error

from .dtos import RevokeInvitationResponse

logger = logging.getLogger(__name__)


class RevokeInvitationUseCase:
    """
    Business Rules:
    - Only admins can revoke
    - Pending invitations (live or expired) become revoked
    - Consumed invitations cannot be revoked (INVITATION_ALREADY_CONSUMED)
    """

    def __init__(self, uow: UnitOfWork, authorization: Optional[AuthorizationResolver] = None):
        self.uow = uow
        self.authorization = authorization or AuthorizationResolver()

    async def execute(
        self, acting: Account, invitation_id: UUID, now: Optional[datetime] = None
    ) -> Result[RevokeInvitationResponse, Error]:
        now = now or utcnow()

        allowed = self.authorization.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return allowed

        async with self.uow:
            revoked = await InvitationLedger(self.uow).revoke(invitation_id)
            if revoked.is_err():
                return revoked

            invitation = revoked.ok_value
            await self.uow.audit_events.create(
                AuditEvent(
                    actor_id=acting.id,
                    action="invitation_revoked",
                    event_metadata={"invitation_id": str(invitation.id), "email": invitation.email},
                    created_at=now,
                )
            )
            await self.uow.commit()

            logger.info("Invitation for %s revoked", invitation.email)
            return Ok(RevokeInvitationResponse(id=str(invitation.id), status=invitation.status.value))
