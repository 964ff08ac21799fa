from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.domain.entities import Account, AccountRole, Invitation, InvitationStatus

NOW = datetime(2026, 3, 2, 9, 0, 0)


def _returns_argument():
    return AsyncMock(side_effect=lambda entity, *args, **kwargs: entity)


def _applies_values():
    def apply(entity, **values):
        for field, value in values.items():
            setattr(entity, field, value)
        return entity

    return AsyncMock(side_effect=apply)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.accounts = MagicMock()
    uow.accounts.get_by_id = AsyncMock(return_value=None)
    uow.accounts.get_by_email = AsyncMock(return_value=None)
    uow.accounts.create = _returns_argument()
    uow.accounts.update = _returns_argument()
    uow.accounts.update_unless_last_admin = _applies_values()
    uow.accounts.list_paginated = AsyncMock(return_value=([], 0))
    uow.accounts.count_active_admins = AsyncMock(return_value=1)

    uow.invitations = MagicMock()
    uow.invitations.get_by_id = AsyncMock(return_value=None)
    uow.invitations.get_by_token = AsyncMock(return_value=None)
    uow.invitations.get_pending_by_email = AsyncMock(return_value=None)
    uow.invitations.create = _returns_argument()
    uow.invitations.update = _returns_argument()
    uow.invitations.mark_consumed = AsyncMock(return_value=False)
    uow.invitations.list_pending_paginated = AsyncMock(return_value=([], 0))
    uow.invitations.delete_pending_expired_before = AsyncMock(return_value=0)

    uow.sessions = MagicMock()
    uow.sessions.create = _returns_argument()
    uow.sessions.get_by_handle_hash = AsyncMock(return_value=None)
    uow.sessions.touch = AsyncMock()
    uow.sessions.revoke_by_id = AsyncMock(return_value=True)
    uow.sessions.revoke_all_by_account_id = AsyncMock(return_value=0)
    uow.sessions.delete_stale = AsyncMock(return_value=0)

    uow.audit_events = MagicMock()
    uow.audit_events.create = _returns_argument()
    uow.audit_events.get_by_account_paginated = AsyncMock(return_value=([], None))

    return uow


@pytest.fixture
def make_account():
    def factory(**overrides) -> Account:
        fields = dict(
            id=uuid4(),
            email="someone@co.com",
            display_name="Someone",
            role=AccountRole.employee,
            is_active=True,
            is_provisioned=False,
            activated_at=NOW,
            created_at=NOW,
            updated_at=NOW,
        )
        fields.update(overrides)
        return Account(**fields)

    return factory


@pytest.fixture
def make_invitation():
    def factory(**overrides) -> Invitation:
        fields = dict(
            id=uuid4(),
            email="bob@co.com",
            role=AccountRole.manager,
            token="invitation-token",
            status=InvitationStatus.pending,
            invited_by_id=uuid4(),
            invited_at=NOW,
            expires_at=NOW.replace(day=9),
            resend_count=0,
        )
        fields.update(overrides)
        return Invitation(**fields)

    return factory
