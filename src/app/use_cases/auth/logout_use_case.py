"""
Logout Use Case

Revokes the caller's session server-side.
"""

import logging
from datetime import datetime
from typing import Optional

from result import Ok, Result

from src.app.services.session_manager import SessionManager, SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditEvent
from src.domain.errors import Error

from .dtos import LogoutResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Business Rules:
    - Logout is idempotent: an unknown or already revoked handle still succeeds
    - The revoked session never validates again, even before its idle timeout
    """

    def __init__(self, uow: UnitOfWork, session_settings: SessionSettings):
        self.uow = uow
        self.session_settings = session_settings

    async def execute(
        self, handle: Optional[str], now: Optional[datetime] = None
    ) -> Result[LogoutResponse, Error]:
        now = now or utcnow()
        async with self.uow:
            sessions = SessionManager(self.uow, self.session_settings)
            account = await sessions.validate(handle, now)

            if await sessions.revoke(handle, now):
                if account.is_ok():
                    await self.uow.audit_events.create(
                        AuditEvent(
                            account_id=account.ok_value.id,
                            actor_id=account.ok_value.id,
                            action="logout",
                            created_at=now,
                        )
                    )
                await self.uow.commit()
                logger.info("Session revoked on logout")

            return Ok(LogoutResponse(status="logged_out"))
