"""
Check Email Availability Use Case

Tells an admin whether an e-mail can still be provisioned or invited.
"""

from datetime import datetime
from typing import Optional

from result import Ok, Result

from src.app.services.account_store import AccountStore
from src.app.services.authorization import AuthorizationResolver
from src.app.services.domain_policy import DomainPolicy
from src.app.services.invitation_ledger import InvitationLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import normalize_email, utcnow
from src.domain.entities import Account, AccountRole
from src.domain.errors import Error

from .dtos import EmailAvailabilityResponse


class CheckEmailAvailabilityUseCase:
    """Read-only; reports the first reason the email is taken"""

    def __init__(
        self,
        uow: UnitOfWork,
        domain_policy: DomainPolicy,
        authorization: Optional[AuthorizationResolver] = None,
    ):
        self.uow = uow
        self.domain_policy = domain_policy
        self.authorization = authorization or AuthorizationResolver()

    async def execute(
        self, acting: Account, email: str, now: Optional[datetime] = None
    ) -> Result[EmailAvailabilityResponse, Error]:
        now = now or utcnow()
        email = normalize_email(email)

        allowed = self.authorization.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return allowed

        if not self.domain_policy.is_allowed(email):
            return Ok(EmailAvailabilityResponse(email=email, available=False, reason="DOMAIN_NOT_ALLOWED"))

        async with self.uow:
            if await AccountStore(self.uow).find_by_email(email) is not None:
                return Ok(EmailAvailabilityResponse(email=email, available=False, reason="DUPLICATE_EMAIL"))

            if await InvitationLedger(self.uow).find_live(email, now) is not None:
                return Ok(
                    EmailAvailabilityResponse(email=email, available=False, reason="DUPLICATE_INVITATION")
                )

        return Ok(EmailAvailabilityResponse(email=email, available=True))
