"""
Get Account Audit Events Use Case

Retrieves the audit trail of one account with pagination.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from result import Ok, Result

from src.app.services.account_store import AccountStore
from src.app.services.authorization import AuthorizationResolver
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Account, AccountRole
from src.domain.errors import Error


class GetAccountAuditEventsUseCase:
    """
    Use case for retrieving the audit events of an account.

    Business Rules:
    - Caller must be an admin
    - Results ordered by newest first
    - Supports cursor-based pagination
    - Each event includes action, actor email, timestamp, metadata
    """

    def __init__(self, uow: UnitOfWork, authorization: Optional[AuthorizationResolver] = None):
        self.uow = uow
        self.authorization = authorization or AuthorizationResolver()

    async def execute(
        self,
        acting: Account,
        account_id: UUID,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Result[Dict[str, Any], Error]:
        """
        Execute get account audit events use case.

        Args:
            acting: Admin asking
            account_id: Account whose trail is read
            limit: Maximum number of events to return
            cursor: Pagination cursor (optional)

        Returns:
            Result with events list and next_cursor, or Error
        """
        allowed = self.authorization.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return allowed

        async with self.uow:
            found = await AccountStore(self.uow).get(account_id)
            if found.is_err():
                return found

            events, next_cursor = await self.uow.audit_events.get_by_account_paginated(
                account_id, limit=limit, cursor=cursor
            )

            actor_emails: Dict[UUID, Optional[str]] = {}
            events_list = []
            for event in events:
                actor_email = None
                if event.actor_id:
                    if event.actor_id not in actor_emails:
                        actor = await self.uow.accounts.get_by_id(event.actor_id)
                        actor_emails[event.actor_id] = actor.email if actor else None
                    actor_email = actor_emails[event.actor_id]

                events_list.append(
                    {
                        "action": event.action,
                        "actor_email": actor_email,
                        "timestamp": event.created_at.isoformat() + "Z",
                        "metadata": event.event_metadata or {},
                    }
                )

            return Ok({"events": events_list, "next_cursor": next_cursor})
