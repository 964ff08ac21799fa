"""
Set Account Active Use Case

Administrative deactivation and reactivation.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from result import Ok, Result

from src.app.services.account_store import AccountStore
from src.app.services.authorization import AuthorizationResolver
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import AccountResponse
from src.domain.base import utcnow
from src.domain.entities import Account, AccountRole, AuditEvent
from src.domain.errors import Error

logger = logging.getLogger(__name__)


class SetAccountActiveUseCase:
    """
    Business Rules:
    - Only admins can (de)activate accounts
    - An admin cannot deactivate themselves
    - The last active admin cannot be deactivated
    - Deactivation revokes every outstanding session of the account
    - No history is deleted
    """

    def __init__(self, uow: UnitOfWork, authorization: Optional[AuthorizationResolver] = None):
        self.uow = uow
        self.authorization = authorization or AuthorizationResolver()

    async def execute(
        self,
        acting: Account,
        account_id: UUID,
        is_active: bool,
        now: Optional[datetime] = None,
    ) -> Result[AccountResponse, Error]:
        now = now or utcnow()

        allowed = self.authorization.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return allowed

        async with self.uow:
            store = AccountStore(self.uow, self.authorization)
            found = await store.get(account_id)
            if found.is_err():
                return found

            updated = await store.set_active(found.ok_value, is_active, acting, now)
            if updated.is_err():
                return updated

            account = updated.ok_value
            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    actor_id=acting.id,
                    action="account_activated" if is_active else "account_deactivated",
                    created_at=now,
                )
            )
            await self.uow.commit()

            logger.info("Account %s set active=%s", account.email, is_active)
            return Ok(AccountResponse.from_entity(account))
