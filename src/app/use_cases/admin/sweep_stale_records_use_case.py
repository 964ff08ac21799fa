"""
Use Case: Sweep Stale Records

Storage hygiene for the shared store. Removes sessions that can never
validate again and pending invitations expired beyond the retention window.
Correctness never depends on this running: expiry is checked lazily.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel
from result import Ok, Result

from src.app.services.invitation_ledger import InvitationLedger
from src.app.services.session_manager import SessionManager, SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.errors import Error

logger = logging.getLogger(__name__)


class SweepStaleRecordsResponse(BaseModel):
    """Response DTO for SweepStaleRecordsUseCase"""

    status: str
    sessions_deleted: int
    invitations_deleted: int


class SweepStaleRecordsUseCase:
    """
    Business Logic:
    1. Delete revoked, idle-expired and absolutely-expired sessions
    2. Delete pending invitations whose expiry is older than the retention window
    3. Consumed and revoked invitations are kept for audit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        session_settings: SessionSettings,
        invitation_retention: timedelta,
    ):
        self.uow = uow
        self.session_settings = session_settings
        self.invitation_retention = invitation_retention

    async def execute(self, now: Optional[datetime] = None) -> Result[SweepStaleRecordsResponse, Error]:
        now = now or utcnow()
        async with self.uow:
            sessions_deleted = await SessionManager(self.uow, self.session_settings).sweep(now)
            invitations_deleted = await InvitationLedger(self.uow).sweep(
                now - self.invitation_retention
            )
            await self.uow.commit()

            logger.info(
                "Sweep removed %d sessions and %d invitations",
                sessions_deleted,
                invitations_deleted,
            )
            return Ok(
                SweepStaleRecordsResponse(
                    status="completed",
                    sessions_deleted=sessions_deleted,
                    invitations_deleted=invitations_deleted,
                )
            )
