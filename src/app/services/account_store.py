"""
Account Store

Persistent user records: identity, role, activation state.
"""

from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from result import Err, Ok, Result

from src.app.repositories.account_repository import AccountQuery
from src.app.services.authorization import AuthorizationResolver
from src.app.services.invitation_ledger import InvitationClaim
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import normalize_email, utcnow
from src.domain.entities import Account, AccountRole
from src.domain.errors import Error


class AccountStore:
    """
    Business Rules:
    - Creation is a plain insert; the unique email index turns a collision
      into DUPLICATE_EMAIL instead of an overwrite
    - activate() sets activated_at once and is a no-op afterwards
    - Role changes are authorized by the AuthorizationResolver first
    - Deactivation keeps history and revokes outstanding sessions
    - Demoting or deactivating an admin is one conditional write that fails
      when no other active admin would remain
    - Runs inside the caller's unit of work; the caller commits
    """

    def __init__(self, uow: UnitOfWork, authorization: Optional[AuthorizationResolver] = None):
        self.uow = uow
        self.authorization = authorization or AuthorizationResolver()

    async def find_by_email(self, email: str) -> Optional[Account]:
        return await self.uow.accounts.get_by_email(normalize_email(email))

    async def get(self, account_id: UUID) -> Result[Account, Error]:
        account = await self.uow.accounts.get_by_id(account_id)
        if account is None:
            return Err(Error("ACCOUNT_NOT_FOUND", "Account not found"))
        return Ok(account)

    async def create_provisioned(
        self,
        email: str,
        role: AccountRole,
        issuer_id: UUID,
        display_name: str = "",
        now: Optional[datetime] = None,
    ) -> Result[Account, Error]:
        now = now or utcnow()
        account = Account(
            email=normalize_email(email),
            display_name=display_name,
            role=role,
            is_active=True,
            is_provisioned=True,
            invited_by_id=issuer_id,
            invited_at=now,
            activated_at=None,
            created_at=now,
            updated_at=now,
        )
        return await self._insert(account)

    async def create_from_first_login(
        self,
        email: str,
        name: str,
        role: AccountRole,
        now: Optional[datetime] = None,
        invitation: Optional[InvitationClaim] = None,
    ) -> Result[Account, Error]:
        now = now or utcnow()
        account = Account(
            email=normalize_email(email),
            display_name=name,
            role=role,
            is_active=True,
            is_provisioned=invitation is not None,
            invited_by_id=invitation.invited_by_id if invitation else None,
            invited_at=invitation.invited_at if invitation else None,
            activated_at=now,
            last_login_at=now,
            created_at=now,
            updated_at=now,
        )
        return await self._insert(account)

    async def activate(
        self, account: Account, name: str = "", now: Optional[datetime] = None
    ) -> Account:
        if account.activated_at is not None:
            return account
        account.activated_at = now or utcnow()
        if not account.display_name and name:
            account.display_name = name
        return await self.uow.accounts.update(account)

    async def record_login(self, account: Account, now: Optional[datetime] = None) -> Account:
        account.last_login_at = now or utcnow()
        return await self.uow.accounts.update(account)

    async def set_role(
        self,
        account: Account,
        new_role: AccountRole,
        acting: Account,
        now: Optional[datetime] = None,
    ) -> Result[Account, Error]:
        active_admins = await self.uow.accounts.count_active_admins(lock=True)
        allowed = self.authorization.check_role_change(acting, account, new_role, active_admins)
        if allowed.is_err():
            return allowed

        if _is_active_admin(account) and new_role != AccountRole.admin:
            updated = await self.uow.accounts.update_unless_last_admin(account, role=new_role)
            if updated is None:
                return Err(Error("LAST_ADMIN", "The last remaining admin cannot be demoted"))
            return Ok(updated)

        account.role = new_role
        return Ok(await self.uow.accounts.update(account))

    async def set_active(
        self,
        account: Account,
        is_active: bool,
        acting: Account,
        now: Optional[datetime] = None,
    ) -> Result[Account, Error]:
        now = now or utcnow()

        if account.id == acting.id and not is_active:
            return Err(
                Error("CANNOT_DEACTIVATE_SELF", "You cannot deactivate your own account")
            )

        if not is_active and _is_active_admin(account):
            last_admin = Err(
                Error("LAST_ADMIN", "The last remaining admin cannot be deactivated")
            )
            if await self.uow.accounts.count_active_admins(lock=True) <= 1:
                return last_admin
            updated = await self.uow.accounts.update_unless_last_admin(account, is_active=False)
            if updated is None:
                return last_admin
            account = updated
        else:
            account.is_active = is_active
            account = await self.uow.accounts.update(account)

        if not is_active:
            await self.uow.sessions.revoke_all_by_account_id(account.id, now)

        return Ok(account)

    async def update_profile(self, account: Account, **changes) -> Account:
        for field, value in changes.items():
            setattr(account, field, value)
        return await self.uow.accounts.update(account)

    async def list_accounts(
        self, page_number: int, page_size: int, query: Optional[AccountQuery] = None
    ) -> Tuple[List[Account], int]:
        offset = (page_number - 1) * page_size
        return await self.uow.accounts.list_paginated(offset, page_size, query)

    async def _insert(self, account: Account) -> Result[Account, Error]:
        created = await self.uow.accounts.create(account)
        if created is None:
            return Err(
                Error("DUPLICATE_EMAIL", "An account with this email already exists")
            )
        return Ok(created)


def _is_active_admin(account: Account) -> bool:
    return account.role == AccountRole.admin and account.is_active
