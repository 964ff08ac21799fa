import base64
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.domain.entities import AuditEvent

CURSOR_SEPARATOR = "|"


def encode_cursor(event: AuditEvent) -> str:
    raw = f"{event.created_at.isoformat()}{CURSOR_SEPARATOR}{event.id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> Tuple[datetime, UUID]:
    """Raises ValueError on anything that is not a cursor we issued"""
    raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
    created_at, _, event_id = raw.partition(CURSOR_SEPARATOR)
    return datetime.fromisoformat(created_at), UUID(event_id)


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Append an audit event; rows are never updated afterwards"""
        self.session.add(audit_event)
        await self.session.flush()
        return audit_event

    async def get_by_account_paginated(
        self, account_id: UUID, limit: int = 50, cursor: Optional[str] = None
    ) -> Tuple[List[AuditEvent], Optional[str]]:
        """
        Keyset pagination over (created_at, id), newest first.

        Events written in the same instant share created_at, so the id breaks
        the tie and no event is skipped between pages.
        """
        stmt = select(AuditEvent).where(AuditEvent.account_id == account_id)

        if cursor:
            try:
                after_created_at, after_id = decode_cursor(cursor)
            except ValueError:
                # Unknown cursor, start from the newest event
                pass
            else:
                stmt = stmt.where(
                    or_(
                        AuditEvent.created_at < after_created_at,
                        and_(
                            AuditEvent.created_at == after_created_at,
                            AuditEvent.id < after_id,
                        ),
                    )
                )

        stmt = stmt.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(limit + 1)
        events = list((await self.session.exec(stmt)).all())

        next_cursor = None
        if len(events) > limit:
            events = events[:limit]
            next_cursor = encode_cursor(events[-1])

        return events, next_cursor
