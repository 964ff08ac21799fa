"""
Create Provisioned Account Use Case

Lets an admin create an account before the person has ever logged in.
"""

import logging
from datetime import datetime
from typing import Optional

from result import Err, Ok, Result

from src.app.services.account_store import AccountStore
from src.app.services.authorization import AuthorizationResolver
from src.app.services.domain_policy import DomainPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import AccountResponse
from src.domain.base import normalize_email, utcnow
from src.domain.entities import Account, AccountRole, AuditEvent
from src.domain.errors import Error

logger = logging.getLogger(__name__)


class CreateProvisionedAccountUseCase:
    """
    Business Rules:
    - Only admins can provision accounts
    - The email must pass the domain policy
    - The account starts active, provisioned and not yet activated
    - An existing email fails with DUPLICATE_EMAIL, nothing is overwritten
    """

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
        self,
        acting: Account,
        email: str,
        role: str,
        display_name: str = "",
        now: Optional[datetime] = None,
    ) -> Result[AccountResponse, Error]:
        """
        Execute create provisioned account use case.

        Args:
            acting: Admin performing the operation
            email: Email of the person to provision
            role: Role name or label (Employee/Manager/Admin)
            display_name: Optional name shown until the first login
            now: Clock override

        Returns:
            Result with AccountResponse, or Error (ROLE_INSUFFICIENT,
            INVALID_ROLE, DOMAIN_NOT_ALLOWED, DUPLICATE_EMAIL)
        """
        now = now or utcnow()
        email = normalize_email(email)

        allowed = self.authorization.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return allowed

        try:
            account_role = AccountRole.parse(role)
        except ValueError:
            return Err(Error("INVALID_ROLE", f"Invalid role: {role}"))

        if not self.domain_policy.is_allowed(email):
            return Err(Error("DOMAIN_NOT_ALLOWED", "This e-mail domain is not allowed"))

        async with self.uow:
            created = await AccountStore(self.uow).create_provisioned(
                email, account_role, acting.id, display_name, now
            )
            if created.is_err():
                return created

            account = created.ok_value
            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    actor_id=acting.id,
                    action="account_provisioned",
                    event_metadata={"email": email, "role": account_role.value},
                    created_at=now,
                )
            )
            await self.uow.commit()

            logger.info("Account %s provisioned as %s", email, account_role.value)
            return Ok(AccountResponse.from_entity(account))
