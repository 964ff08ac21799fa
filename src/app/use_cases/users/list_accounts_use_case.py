"""
List Accounts Use Case
"""

from typing import Optional

from result import Err, Ok, Result

from src.app.repositories.account_repository import AccountQuery
from src.app.services.account_store import AccountStore
from src.app.services.authorization import AuthorizationResolver
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import AccountResponse
from src.domain.entities import Account, AccountRole
from src.domain.errors import Error

from .dtos import AccountListResponse


class ListAccountsUseCase:
    """
    Admin-only paginated account listing.

    Optional filters: a search term over email, display name, department and
    job title, an exact role, and the active flag. Newest accounts come first
    unless sort_by names a known column; unknown sort keys fall back to that
    default order.
    """

    def __init__(self, uow: UnitOfWork, authorization: Optional[AuthorizationResolver] = None):
        self.uow = uow
        self.authorization = authorization or AuthorizationResolver()

    async def execute(
        self,
        acting: Account,
        page_number: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        sort_by: Optional[str] = None,
        descending: bool = False,
    ) -> Result[AccountListResponse, Error]:
        allowed = self.authorization.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return allowed

        role_filter = None
        if role:
            try:
                role_filter = AccountRole.parse(role)
            except ValueError:
                return Err(Error("INVALID_ROLE", f"Invalid role: {role}"))

        query = AccountQuery(
            search=search,
            role=role_filter,
            is_active=is_active,
            sort_by=sort_by,
            descending=descending,
        )

        async with self.uow:
            accounts, total = await AccountStore(self.uow).list_accounts(
                page_number, page_size, query
            )
            return Ok(
                AccountListResponse(
                    items=[AccountResponse.from_entity(a) for a in accounts],
                    total=total,
                    page_number=page_number,
                    page_size=page_size,
                )
            )
