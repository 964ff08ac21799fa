"""
Create Invitation Use Case

Handles inviting a person by e-mail with a pre-assigned role.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from result import Err, Ok, Result

from src.app.services.account_store import AccountStore
from src.app.services.authorization import AuthorizationResolver
from src.app.services.domain_policy import DomainPolicy
from src.app.services.invitation_ledger import InvitationLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import normalize_email, utcnow
from src.domain.entities import Account, AccountRole, AuditEvent
from src.domain.errors import Error

from .dtos import InvitationResponse

logger = logging.getLogger(__name__)


class CreateInvitationUseCase:
    """
    Use case for inviting a person to the intranet.

    Business Rules:
    - Only admins can invite
    - Role must be a valid AccountRole
    - The email must pass the domain policy
    - An email that already belongs to an activated account cannot be invited
    - At most one live invitation per email (DUPLICATE_INVITATION)
    - Lifetime defaults to the configured TTL and must be 1 to 90 days
    - Returns the token and invitation URL for the mailer; nothing is sent here
    """

    def __init__(
        self,
        uow: UnitOfWork,
        domain_policy: DomainPolicy,
        default_ttl: timedelta,
        frontend_url: str,
        authorization: Optional[AuthorizationResolver] = None,
    ):
        self.uow = uow
        self.domain_policy = domain_policy
        self.default_ttl = default_ttl
        self.frontend_url = frontend_url
        self.authorization = authorization or AuthorizationResolver()

    async def execute(
        self,
        acting: Account,
        email: str,
        role: str,
        ttl_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Result[InvitationResponse, Error]:
        """
        Execute create invitation use case.

        Args:
            acting: Admin sending the invitation
            email: Email address to invite
            role: Role to grant on first login (Employee/Manager/Admin)
            ttl_days: Lifetime override in days
            now: Clock override

        Returns:
            Result with InvitationResponse DTO, or Error
        """
        now = now or utcnow()
        email = normalize_email(email)
        ttl = timedelta(days=ttl_days) if ttl_days is not None else self.default_ttl

        allowed = self.authorization.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return allowed

        try:
            invitation_role = AccountRole.parse(role)
        except ValueError:
            return Err(Error("INVALID_ROLE", f"Invalid role: {role}"))

        if not self.domain_policy.is_allowed(email):
            return Err(Error("DOMAIN_NOT_ALLOWED", "This e-mail domain is not allowed"))

        async with self.uow:
            existing = await AccountStore(self.uow).find_by_email(email)
            if existing is not None and existing.activated_at is not None:
                return Err(
                    Error("ACCOUNT_ALREADY_ACTIVE", "This person already has an active account")
                )

            created = await InvitationLedger(self.uow).create_invitation(
                email, invitation_role, acting.id, ttl, now
            )
            if created.is_err():
                return created

            invitation = created.ok_value
            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=existing.id if existing is not None else None,
                    actor_id=acting.id,
                    action="invitation_created",
                    event_metadata={
                        "invitation_id": str(invitation.id),
                        "email": email,
                        "role": invitation_role.value,
                    },
                    created_at=now,
                )
            )
            await self.uow.commit()

            logger.info("Invitation created for %s as %s", email, invitation_role.value)
            return Ok(InvitationResponse.from_entity(invitation, self.frontend_url))
