from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.account_repository import AccountQuery, IAccountRepository
from src.domain.base import normalize_email, utcnow
from src.domain.entities import Account, AccountRole


class AccountRepository(IAccountRepository):
    """Account repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        stmt = select(Account).where(Account.id == account_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by email address"""
        stmt = select(Account).where(Account.email == normalize_email(email))
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, account: Account) -> Optional[Account]:
        """Insert a new account, None on email collision"""
        account.email = normalize_email(account.email)
        self.session.add(account)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            return None
        await self.session.refresh(account)
        return account

    async def update(self, account: Account) -> Account:
        """Update existing account"""
        account.updated_at = utcnow()
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def update_unless_last_admin(self, account: Account, **values) -> Optional[Account]:
        """Conditional update guarded by the count of the other active admins"""
        other = aliased(Account)
        other_admins = (
            select(func.count(other.id))
            .where(
                other.role == AccountRole.admin,
                other.is_active == True,  # noqa: E712
                other.id != account.id,
            )
            .scalar_subquery()
        )
        stmt = (
            update(Account)
            .where(Account.id == account.id, other_admins >= 1)
            .values(updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        await self.session.refresh(account)
        return account

    async def list_paginated(
        self, offset: int, limit: int, query: Optional[AccountQuery] = None
    ) -> Tuple[List[Account], int]:
        """Get a filtered, sorted page of accounts"""
        query = query or AccountQuery()

        criteria = []
        if query.search and query.search.strip():
            term = query.search.strip().lower()
            criteria.append(
                or_(
                    *(
                        func.lower(column).contains(term, autoescape=True)
                        for column in (
                            Account.email,
                            Account.display_name,
                            Account.department,
                            Account.job_title,
                        )
                    )
                )
            )
        if query.role is not None:
            criteria.append(Account.role == query.role)
        if query.is_active is not None:
            criteria.append(Account.is_active == query.is_active)

        count_stmt = select(func.count()).select_from(Account).where(*criteria)
        total = (await self.session.exec(count_stmt)).one()

        stmt = (
            select(Account)
            .where(*criteria)
            .order_by(*_ordering(query))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def count_active_admins(self, lock: bool = False) -> int:
        """Count active admins, optionally locking their rows"""
        active_admin = (Account.role == AccountRole.admin, Account.is_active == True)  # noqa: E712
        if lock:
            # FOR UPDATE cannot be combined with an aggregate
            stmt = select(Account.id).where(*active_admin).with_for_update()
            result = await self.session.exec(stmt)
            return len(result.all())

        stmt = select(func.count()).select_from(Account).where(*active_admin)
        result = await self.session.exec(stmt)
        return result.one()


def _ordering(query: AccountQuery) -> list:
    column = query.sort_column
    if column is None:
        return [Account.created_at.desc(), Account.email]

    if column == "role":
        key = case(*((Account.role == role, role.rank) for role in AccountRole))
    elif column in ("department", "job_title"):
        key = func.coalesce(getattr(Account, column), "")
    else:
        key = getattr(Account, column)

    return [key.desc() if query.descending else key.asc(), Account.email]
