"""
Invite Account Use Case

Sends (or re-sends) the invitation for a provisioned account that has not
completed its first login yet.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from result import Err, Ok, Result

from src.app.services.account_store import AccountStore
from src.app.services.authorization import AuthorizationResolver
from src.app.services.invitation_ledger import InvitationLedger
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.invitations.dtos import InvitationResponse
from src.domain.base import utcnow
from src.domain.entities import Account, AccountRole, AuditEvent
from src.domain.errors import Error

logger = logging.getLogger(__name__)


class InviteAccountUseCase:
    """
    Business Rules:
    - Only admins can invite
    - The account must exist and must not be activated (ACCOUNT_ALREADY_ACTIVE)
    - A pending invitation (live or expired) is re-sent: new token, new expiry
    - Otherwise a new invitation is created with the account's role
    """

    def __init__(
        self,
        uow: UnitOfWork,
        default_ttl: timedelta,
        frontend_url: str,
        authorization: Optional[AuthorizationResolver] = None,
    ):
        self.uow = uow
        self.default_ttl = default_ttl
        self.frontend_url = frontend_url
        self.authorization = authorization or AuthorizationResolver()

    async def execute(
        self,
        acting: Account,
        account_id: UUID,
        ttl_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Result[InvitationResponse, Error]:
        now = now or utcnow()
        ttl = timedelta(days=ttl_days) if ttl_days is not None else self.default_ttl

        allowed = self.authorization.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return allowed

        async with self.uow:
            found = await AccountStore(self.uow).get(account_id)
            if found.is_err():
                return found

            account = found.ok_value
            if account.activated_at is not None:
                return Err(
                    Error("ACCOUNT_ALREADY_ACTIVE", "This account has already signed in")
                )

            ledger = InvitationLedger(self.uow)
            resent = await self.uow.invitations.get_pending_by_email(account.email) is not None
            if resent:
                issued = await ledger.resend(account.email, ttl, now)
            else:
                issued = await ledger.create_invitation(
                    account.email, account.role, acting.id, ttl, now
                )
            if issued.is_err():
                return issued

            invitation = issued.ok_value
            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    actor_id=acting.id,
                    action="invitation_resent" if resent else "invitation_created",
                    event_metadata={
                        "invitation_id": str(invitation.id),
                        "email": invitation.email,
                    },
                    created_at=now,
                )
            )
            await self.uow.commit()

            logger.info(
                "Invitation for %s %s", invitation.email, "re-sent" if resent else "created"
            )
            return Ok(InvitationResponse.from_entity(invitation, self.frontend_url, resent=resent))
