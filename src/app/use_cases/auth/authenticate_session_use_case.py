"""
Authenticate Session Use Case

Resolves the session cookie of an incoming request to its account.
"""

from datetime import datetime
from typing import Optional

from result import Result

from src.app.services.session_manager import SessionManager, SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Account
from src.domain.errors import Error


class AuthenticateSessionUseCase:
    """
    Business Rules:
    - Any failure is SESSION_INVALID, whatever the reason
    - A valid session has its idle window extended (committed here)
    """

    def __init__(self, uow: UnitOfWork, session_settings: SessionSettings):
        self.uow = uow
        self.session_settings = session_settings

    async def execute(
        self, handle: Optional[str], now: Optional[datetime] = None
    ) -> Result[Account, Error]:
        async with self.uow:
            result = await SessionManager(self.uow, self.session_settings).validate(handle, now)
            if result.is_ok():
                await self.uow.commit()
            return result
