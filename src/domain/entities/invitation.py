"""
Invitation Entity

Pre-provisioned, not-yet-activated access for an e-mail address.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import AccountRole, InvitationStatus


class Invitation(SQLModel, table=True):
    """
    Invitation entity - single-use token that grants a role on first login.

    Business Rules:
    - Created by an admin, expires after INVITATION_TTL_DAYS (default 7)
    - Token is secrets.token_urlsafe(32), never derived from email or time
    - At most one pending row per email (partial unique index)
    - Consumed exactly once via a conditional update
    - Expired rows stay pending (inert) until resent, superseded or swept
    """

    __tablename__ = "invitations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    email: str = Field(max_length=255, nullable=False, index=True)
    role: AccountRole = Field(nullable=False)
    token: str = Field(unique=True, index=True, max_length=64)

    status: InvitationStatus = Field(default=InvitationStatus.pending)

    invited_by_id: UUID = Field(foreign_key="accounts.id", nullable=False)
    resend_count: int = Field(default=0)

    # Timestamps
    invited_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    resent_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    consumed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_invitation_expires_at", "expires_at"),
        Index("idx_invitation_status", "status"),
        Index(
            "uq_invitation_pending_email",
            "email",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_live(self, now: datetime) -> bool:
        return self.status == InvitationStatus.pending and not self.is_expired(now)
