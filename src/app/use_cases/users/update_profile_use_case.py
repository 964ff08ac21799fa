"""
Update Profile Use Case

Edits the descriptive fields of an account: display name, department and job
title, plus the active flag for admins.
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


class UpdateProfileUseCase:
    """
    Business Rules:
    - An account may edit its own profile; admins may edit anyone's
    - A field left as None is unchanged; an empty department or job title clears it
    - Only admins may change is_active, through the same rules as PUT /users/{id}/active
    - Role is never editable here
    - Each change is audited; a request that changes nothing writes nothing
    """

    def __init__(self, uow: UnitOfWork, authorization: Optional[AuthorizationResolver] = None):
        self.uow = uow
        self.authorization = authorization or AuthorizationResolver()

    async def execute(
        self,
        acting: Account,
        account_id: UUID,
        display_name: Optional[str] = None,
        department: Optional[str] = None,
        job_title: Optional[str] = None,
        is_active: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> Result[AccountResponse, Error]:
        """
        Returns:
            Result with the updated AccountResponse, or Error
            (ROLE_INSUFFICIENT, ACCOUNT_NOT_FOUND, CANNOT_DEACTIVATE_SELF, LAST_ADMIN)
        """
        now = now or utcnow()

        allowed = self.authorization.require_self_or_role(acting, account_id, AccountRole.admin)
        if allowed.is_err():
            return allowed

        async with self.uow:
            store = AccountStore(self.uow, self.authorization)
            found = await store.get(account_id)
            if found.is_err():
                return found

            account = found.ok_value
            requested = {}
            if display_name is not None:
                requested["display_name"] = display_name.strip()
            if department is not None:
                requested["department"] = department.strip() or None
            if job_title is not None:
                requested["job_title"] = job_title.strip() or None

            changes = {
                field: value
                for field, value in requested.items()
                if getattr(account, field) != value
            }
            toggles_active = is_active is not None and is_active != account.is_active
            if not changes and not toggles_active:
                return Ok(AccountResponse.from_entity(account))

            if toggles_active:
                allowed = self.authorization.require_role(acting, AccountRole.admin)
                if allowed.is_err():
                    return allowed

                toggled = await store.set_active(account, is_active, acting, now)
                if toggled.is_err():
                    return toggled

                account = toggled.ok_value
                await self._audit(
                    account, acting, "account_activated" if is_active else "account_deactivated", now
                )

            if changes:
                account = await store.update_profile(account, **changes)
                await self._audit(account, acting, "profile_updated", now, {"fields": sorted(changes)})

            await self.uow.commit()

            logger.info("Profile of %s updated by %s", account.email, acting.email)
            return Ok(AccountResponse.from_entity(account))

    async def _audit(self, account, acting, action, now, metadata=None):
        await self.uow.audit_events.create(
            AuditEvent(
                account_id=account.id,
                actor_id=acting.id,
                action=action,
                event_metadata=metadata,
                created_at=now,
            )
        )
