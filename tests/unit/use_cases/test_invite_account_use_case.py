from datetime import timedelta

import pytest

from src.app.use_cases.users import InviteAccountUseCase
from src.domain.entities import AccountRole


def _use_case(mock_uow):
    return InviteAccountUseCase(
        mock_uow, default_ttl=timedelta(days=7), frontend_url="https://intranet.co.com"
    )


@pytest.mark.asyncio
async def test_creates_invitation_with_account_role(mock_uow, make_account, now):
    admin = make_account(role=AccountRole.admin)
    target = make_account(
        email="dave@co.com", role=AccountRole.manager, is_provisioned=True, activated_at=None
    )
    mock_uow.accounts.get_by_id.return_value = target

    result = await _use_case(mock_uow).execute(admin, target.id, now=now)

    assert result.is_ok()
    assert result.ok_value.resent is False
    assert result.ok_value.role == "Manager"
    assert result.ok_value.email == "dave@co.com"
    mock_uow.invitations.create.assert_called_once()


@pytest.mark.asyncio
async def test_resends_pending_invitation(mock_uow, make_account, make_invitation, now):
    admin = make_account(role=AccountRole.admin)
    target = make_account(email="dave@co.com", is_provisioned=True, activated_at=None)
    invitation = make_invitation(email="dave@co.com", token="old", expires_at=now - timedelta(days=1))
    mock_uow.accounts.get_by_id.return_value = target
    mock_uow.invitations.get_pending_by_email.return_value = invitation

    result = await _use_case(mock_uow).execute(admin, target.id, ttl_days=3, now=now)

    assert result.is_ok()
    response = result.ok_value
    assert response.resent is True
    assert response.token != "old"
    assert response.expires_at == (now + timedelta(days=3)).isoformat()
    assert response.resend_count == 1
    mock_uow.invitations.create.assert_not_called()


@pytest.mark.asyncio
async def test_activated_account_cannot_be_invited(mock_uow, make_account, now):
    admin = make_account(role=AccountRole.admin)
    target = make_account(email="erin@co.com")
    mock_uow.accounts.get_by_id.return_value = target

    result = await _use_case(mock_uow).execute(admin, target.id, now=now)

    assert result.is_err()
    assert result.err_value.code == "ACCOUNT_ALREADY_ACTIVE"
