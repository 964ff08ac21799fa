"""
Account Entity

Represents a person allowed into the intranet.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import AccountRole


class Account(SQLModel, table=True):
    """
    Account entity - one row per person, keyed by e-mail.

    Business Rules:
    - Email is stored lower-cased and is unique for the lifetime of the system
    - The unique index is the only guard against duplicate-account races
    - activated_at is set once, at the first completed login
    - Deactivation keeps the row; outstanding sessions stop validating
    """

    __tablename__ = "accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    display_name: str = Field(default="", max_length=255)
    department: Optional[str] = Field(default=None, max_length=255)
    job_title: Optional[str] = Field(default=None, max_length=255)

    role: AccountRole = Field(default=AccountRole.employee)
    is_active: bool = Field(default=True)

    # Provisioning lineage
    is_provisioned: bool = Field(default=False)
    invited_by_id: Optional[UUID] = Field(default=None)
    invited_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    activated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_account_role_active", "role", "is_active"),
    )
