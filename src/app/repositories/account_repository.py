from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import Account, AccountRole

# Accepted sort keys, with the aliases the admin UI sends
SORT_KEYS = {
    "email": "email",
    "name": "display_name",
    "display_name": "display_name",
    "fullname": "display_name",
    "role": "role",
    "department": "department",
    "job_title": "job_title",
    "jobtitle": "job_title",
    "status": "is_active",
    "is_active": "is_active",
    "created_at": "created_at",
    "createdat": "created_at",
}


@dataclass(frozen=True)
class AccountQuery:
    """
    Filters and ordering for the account listing.

    search matches e-mail, display name, department and job title
    (case-insensitive substring). Without sort_by the newest accounts come first.
    """

    search: Optional[str] = None
    role: Optional[AccountRole] = None
    is_active: Optional[bool] = None
    sort_by: Optional[str] = None
    descending: bool = False

    @property
    def sort_column(self) -> Optional[str]:
        if not self.sort_by:
            return None
        return SORT_KEYS.get(self.sort_by.strip().lower())


class IAccountRepository(ABC):
    """Account repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by normalized email address"""
        pass

    @abstractmethod
    async def create(self, account: Account) -> Optional[Account]:
        """
        Insert a new account.

        Returns None when the email is already taken. The unique index decides,
        not a prior lookup, and the surrounding transaction has been rolled
        back by the time None is returned.
        """
        pass

    @abstractmethod
    async def update(self, account: Account) -> Account:
        """Update existing account (bumps updated_at)"""
        pass

    @abstractmethod
    async def update_unless_last_admin(self, account: Account, **values) -> Optional[Account]:
        """
        Apply values to an admin's row only while another active admin remains.

        One conditional UPDATE, so two admins demoting or deactivating each
        other at the same time cannot both succeed. Returns None (and leaves
        the account untouched) when the guard fails.
        """
        pass

    @abstractmethod
    async def list_paginated(
        self, offset: int, limit: int, query: Optional[AccountQuery] = None
    ) -> Tuple[List[Account], int]:
        """Get a filtered, sorted page of accounts, plus the filtered total"""
        pass

    @abstractmethod
    async def count_active_admins(self, lock: bool = False) -> int:
        """
        Count active accounts holding the admin role.

        lock=True takes row locks on those admins until the transaction ends,
        on databases that support SELECT ... FOR UPDATE.
        """
        pass
