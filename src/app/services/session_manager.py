"""
Session Manager

Issues, validates and revokes the opaque handles carried by the session cookie.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple
from uuid import UUID

from result import Err, Ok, Result

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Account, Session
from src.domain.errors import Error

HANDLE_BYTES = 32


@dataclass(frozen=True)
class SessionSettings:
    idle_timeout: timedelta
    absolute_ttl: timedelta

    @classmethod
    def from_config(cls, config) -> "SessionSettings":
        return cls(
            idle_timeout=timedelta(minutes=config.SESSION_IDLE_TIMEOUT_MINUTES),
            absolute_ttl=timedelta(hours=config.SESSION_ABSOLUTE_TTL_HOURS),
        )


def hash_handle(handle: str) -> str:
    return hashlib.sha256(handle.encode("utf-8")).hexdigest()


class SessionManager:
    """
    Server-side sessions on top of the shared store.

    Business Rules:
    - Handles are secrets.token_urlsafe(32); only their SHA-256 digest is stored
    - A handle validates iff issued, not revoked, not idle-expired, not past
      its absolute expiry, and its account is active right now
    - Idle expiry is lazy: checked on validation, swept only for hygiene
    - Runs inside the caller's unit of work; the caller commits
    """

    def __init__(self, uow: UnitOfWork, settings: SessionSettings):
        self.uow = uow
        self.settings = settings

    async def issue(
        self, account_id: UUID, now: Optional[datetime] = None
    ) -> Tuple[str, Session]:
        now = now or utcnow()
        handle = secrets.token_urlsafe(HANDLE_BYTES)
        session = Session(
            account_id=account_id,
            handle_hash=hash_handle(handle),
            created_at=now,
            last_seen_at=now,
            expires_at=now + self.settings.absolute_ttl,
        )
        session = await self.uow.sessions.create(session)
        return handle, session

    async def validate(
        self, handle: Optional[str], now: Optional[datetime] = None
    ) -> Result[Account, Error]:
        """
        Resolve a handle to its account.

        Every failure reason maps to the same SESSION_INVALID error so callers
        cannot tell an unknown handle from an expired one.
        """
        now = now or utcnow()
        invalid = Err(Error("SESSION_INVALID", "Session is invalid or expired"))

        if not handle:
            return invalid

        session = await self.uow.sessions.get_by_handle_hash(hash_handle(handle))
        if session is None or session.revoked:
            return invalid

        if now - session.last_seen_at > self.settings.idle_timeout:
            return invalid

        if now >= session.expires_at:
            return invalid

        account = await self.uow.accounts.get_by_id(session.account_id)
        if account is None or not account.is_active:
            return invalid

        await self.uow.sessions.touch(session.id, now)
        return Ok(account)

    async def revoke(self, handle: Optional[str], now: Optional[datetime] = None) -> bool:
        if not handle:
            return False
        session = await self.uow.sessions.get_by_handle_hash(hash_handle(handle))
        if session is None:
            return False
        return await self.uow.sessions.revoke_by_id(session.id, now or utcnow())

    async def revoke_all(self, account_id: UUID, now: Optional[datetime] = None) -> int:
        return await self.uow.sessions.revoke_all_by_account_id(account_id, now or utcnow())

    async def sweep(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        return await self.uow.sessions.delete_stale(now - self.settings.idle_timeout, now)
