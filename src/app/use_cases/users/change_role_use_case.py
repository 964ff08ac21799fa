"""
Change Role Use Case

Handles changing an account's role.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from result import Err, Ok, Result

from src.app.services.account_store import AccountStore
from src.app.services.authorization import AuthorizationResolver
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import AccountResponse
from src.domain.base import utcnow
from src.domain.entities import Account, AccountRole, AuditEvent
from src.domain.errors import Error

logger = logging.getLogger(__name__)


class ChangeRoleUseCase:
    """
    Use case for changing an account's role.

    Business Rules:
    - Only active admins can change roles
    - The last active admin cannot be demoted (LAST_ADMIN)
    - Setting the current role again is a no-op success
    - Records an audit event with the old and new role
    """

    def __init__(self, uow: UnitOfWork, authorization: Optional[AuthorizationResolver] = None):
        self.uow = uow
        self.authorization = authorization or AuthorizationResolver()

    async def execute(
        self,
        acting: Account,
        account_id: UUID,
        new_role: str,
        now: Optional[datetime] = None,
    ) -> Result[AccountResponse, Error]:
        """
        Execute change role use case.

        Args:
            acting: Account performing the change
            account_id: Account whose role changes
            new_role: Role name or label
            now: Clock override

        Returns:
            Result with the updated AccountResponse, or Error
            (INVALID_ROLE, ROLE_INSUFFICIENT, ACCOUNT_NOT_FOUND, LAST_ADMIN)
        """
        now = now or utcnow()

        allowed = self.authorization.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return allowed

        try:
            role = AccountRole.parse(new_role)
        except ValueError:
            return Err(Error("INVALID_ROLE", f"Invalid role: {new_role}"))

        async with self.uow:
            store = AccountStore(self.uow, self.authorization)

            found = await store.get(account_id)
            if found.is_err():
                return found

            account = found.ok_value
            old_role = account.role

            changed = await store.set_role(account, role, acting, now)
            if changed.is_err():
                return changed

            account = changed.ok_value
            if old_role != role:
                await self.uow.audit_events.create(
                    AuditEvent(
                        account_id=account.id,
                        actor_id=acting.id,
                        action="role_changed",
                        event_metadata={"old_role": old_role.value, "new_role": role.value},
                        created_at=now,
                    )
                )
            await self.uow.commit()

            logger.info("Role of %s changed from %s to %s", account.email, old_role.value, role.value)
            return Ok(AccountResponse.from_entity(account))
