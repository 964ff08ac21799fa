"""
Handle Login Callback Use Case

Turns a verified federated identity into an account and a server-side session.
"""

import logging
from datetime import datetime
from typing import List, Optional

from result import Err, Ok, Result

from src.app.services.account_store import AccountStore
from src.app.services.domain_policy import DomainPolicy
from src.app.services.invitation_ledger import InvitationClaim, InvitationLedger
from src.app.services.session_manager import SessionManager, SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import normalize_email, utcnow
from src.domain.entities import Account, AccountRole, AuditEvent
from src.domain.errors import Error

from .dtos import AccountResponse, LoginOutcome, VerifiedIdentity

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3

# Lost races that are resolved by restarting at the account lookup
RETRY_CODES = ("DUPLICATE_EMAIL", "INVITATION_NOT_FOUND")


class HandleLoginCallbackUseCase:
    """
    Use case for completing a federated login.

    Business Rules:
    - Domain policy is checked first; a rejected domain touches nothing
    - Existing inactive account: USER_INACTIVE, no session
    - Existing active account: activated on first completed login (consuming
      its live invitation for lineage only, the account keeps its role)
    - No account + live invitation: consume, create with the invitation's role
    - No account + no live invitation: create as Employee, or Admin iff the
      email is the configured admin email
    - Expired invitation: ignored with an INVITATION_EXPIRED warning
    - A lost race (DUPLICATE_EMAIL, or the invitation consumed or revoked
      between lookup and update) rolls the attempt back and restarts at lookup
    """

    def __init__(
        self,
        uow: UnitOfWork,
        domain_policy: DomainPolicy,
        session_settings: SessionSettings,
        admin_email: str = "",
    ):
        self.uow = uow
        self.domain_policy = domain_policy
        self.session_settings = session_settings
        self.admin_email = normalize_email(admin_email or "")

    async def execute(
        self,
        identity: VerifiedIdentity,
        invitation_token: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[LoginOutcome, Error]:
        """
        Execute login callback use case.

        Args:
            identity: Verified email and display name from the provider
            invitation_token: Token carried through the login redirect, if any
            now: Clock override

        Returns:
            Result with LoginOutcome DTO, or Error
            (DOMAIN_NOT_ALLOWED, USER_INACTIVE, LOGIN_CONFLICT)
        """
        now = now or utcnow()
        email = normalize_email(identity.email)

        if not self.domain_policy.is_allowed(email):
            logger.warning("Login rejected for %s: domain not allowed", email)
            return Err(
                Error("DOMAIN_NOT_ALLOWED", "Your e-mail domain is not allowed to sign in")
            )

        for attempt in range(1, MAX_ATTEMPTS + 1):
            async with self.uow:
                result = await self._attempt(email, identity.display_name, invitation_token, now)

                if result.is_err() and result.err_value.code in RETRY_CODES:
                    logger.info("Concurrent first login for %s, retrying (attempt %d)", email, attempt)
                    await self.uow.rollback()
                    continue

                if result.is_ok():
                    await self.uow.commit()
                return result

        logger.error("Login for %s kept colliding after %d attempts", email, MAX_ATTEMPTS)
        return Err(Error("LOGIN_CONFLICT", "Could not complete login, please try again"))

    async def _attempt(
        self,
        email: str,
        name: str,
        invitation_token: Optional[str],
        now: datetime,
    ) -> Result[LoginOutcome, Error]:
        accounts = AccountStore(self.uow)
        ledger = InvitationLedger(self.uow)
        warnings: List[str] = []

        account = await accounts.find_by_email(email)

        if account is not None:
            if not account.is_active:
                logger.warning("Login rejected for %s: account is inactive", email)
                return Err(Error("USER_INACTIVE", "This account has been deactivated"))

            outcome = "returning"
            if account.activated_at is None:
                claim = await self._consume_live_invitation(ledger, email, now)
                if claim is not None and account.invited_by_id is None:
                    account.invited_by_id = claim.invited_by_id
                    account.invited_at = claim.invited_at
                account = await accounts.activate(account, name, now)
                outcome = "activated"
                await self._audit(account, "account_activated", now, {"role": account.role.value})

            account = await accounts.record_login(account, now)
            return await self._finish(account, outcome, warnings, now)

        claim: Optional[InvitationClaim] = None
        candidate = await self._candidate_token(email, invitation_token)
        if candidate is not None:
            consumed = await ledger.consume(candidate, now)
            if consumed.is_ok():
                claim = consumed.ok_value
            elif consumed.err_value.code == "INVITATION_EXPIRED":
                logger.warning("Ignoring expired invitation for %s", email)
                warnings.append("INVITATION_EXPIRED")
            else:
                # Consumed or revoked between lookup and update
                return consumed

        if claim is not None:
            role = claim.role
            outcome = "invited"
        else:
            role = self._default_role(email)
            outcome = "created"

        created = await accounts.create_from_first_login(email, name, role, now, invitation=claim)
        if created.is_err():
            return created

        account = created.ok_value
        metadata = {"role": role.value}
        if claim is not None:
            metadata["invitation_id"] = str(claim.invitation_id)
        await self._audit(account, "account_created", now, metadata)
        return await self._finish(account, outcome, warnings, now)

    async def _candidate_token(
        self, email: str, invitation_token: Optional[str]
    ) -> Optional[str]:
        """
        Pick the invitation to honour for a first login.

        At most one invitation per email is pending, so a presented token can
        only ever be that one. A token issued for a different email is ignored.
        """
        pending = await self.uow.invitations.get_pending_by_email(email)
        if pending is None:
            return None
        if invitation_token and invitation_token != pending.token:
            logger.warning("Presented invitation is not the one pending for %s", email)
        return pending.token

    async def _consume_live_invitation(
        self, ledger: InvitationLedger, email: str, now: datetime
    ) -> Optional[InvitationClaim]:
        invitation = await ledger.find_live(email, now)
        if invitation is None:
            return None
        consumed = await ledger.consume(invitation.token, now)
        return consumed.ok_value if consumed.is_ok() else None

    def _default_role(self, email: str) -> AccountRole:
        if self.admin_email and email == self.admin_email:
            logger.info("Granting Admin to configured admin email %s", email)
            return AccountRole.admin
        return AccountRole.lowest()

    async def _finish(
        self, account: Account, outcome: str, warnings: List[str], now: datetime
    ) -> Result[LoginOutcome, Error]:
        sessions = SessionManager(self.uow, self.session_settings)
        handle, session = await sessions.issue(account.id, now)
        await self._audit(account, "login", now, {"outcome": outcome})

        logger.info("Login for %s completed (%s)", account.email, outcome)
        return Ok(
            LoginOutcome(
                account=AccountResponse.from_entity(account),
                session_handle=handle,
                session_expires_at=session.expires_at,
                outcome=outcome,
                warnings=warnings,
            )
        )

    async def _audit(self, account: Account, action: str, now: datetime, metadata: dict) -> None:
        await self.uow.audit_events.create(
            AuditEvent(
                account_id=account.id,
                actor_id=account.id,
                action=action,
                event_metadata=metadata,
                created_at=now,
            )
        )
