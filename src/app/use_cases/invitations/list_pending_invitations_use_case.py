"""
List Pending Invitations Use Case
"""

from datetime import datetime
from typing import Optional

from result import Ok, Result

from src.app.services.authorization import AuthorizationResolver
from src.app.services.invitation_ledger import InvitationLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Account, AccountRole
from src.domain.errors import Error

from .dtos import PendingInvitationItem, PendingInvitationsResponse


class ListPendingInvitationsUseCase:
    """Admin-only, newest first; expired-but-pending rows are included and flagged"""

    def __init__(self, uow: UnitOfWork, authorization: Optional[AuthorizationResolver] = None):
        self.uow = uow
        self.authorization = authorization or AuthorizationResolver()

    async def execute(
        self,
        acting: Account,
        page_number: int = 1,
        page_size: int = 20,
        now: Optional[datetime] = None,
    ) -> Result[PendingInvitationsResponse, Error]:
        now = now or utcnow()

        allowed = self.authorization.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return allowed

        async with self.uow:
            invitations, total = await InvitationLedger(self.uow).list_pending(page_number, page_size)
            return Ok(
                PendingInvitationsResponse(
                    items=[PendingInvitationItem.from_entity(i, now) for i in invitations],
                    total=total,
                    page_number=page_number,
                    page_size=page_size,
                )
            )
