"""
Get Account Use Case
"""

from typing import Optional
from uuid import UUID

from result import Ok, Result

from src.app.services.account_store import AccountStore
from src.app.services.authorization import AuthorizationResolver
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import AccountResponse
from src.domain.entities import Account, AccountRole
from src.domain.errors import Error


class GetAccountUseCase:
    """Anyone may read their own account; managers and admins may look up any account"""

    def __init__(self, uow: UnitOfWork, authorization: Optional[AuthorizationResolver] = None):
        self.uow = uow
        self.authorization = authorization or AuthorizationResolver()

    async def execute(self, acting: Account, account_id: UUID) -> Result[AccountResponse, Error]:
        allowed = self.authorization.require_self_or_role(acting, account_id, AccountRole.manager)
        if allowed.is_err():
            return allowed

        async with self.uow:
            account = await AccountStore(self.uow).get(account_id)
            if account.is_err():
                return account
            return Ok(AccountResponse.from_entity(account.ok_value))
