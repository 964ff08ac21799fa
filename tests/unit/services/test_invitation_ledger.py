from datetime import timedelta
from uuid import uuid4

import pytest

from src.app.services.invitation_ledger import InvitationLedger, generate_token
from src.domain.entities import AccountRole, InvitationStatus

WEEK = timedelta(days=7)


def test_tokens_are_long_and_unique():
    tokens = {generate_token() for _ in range(50)}

    assert len(tokens) == 50
    assert all(len(t) >= 43 for t in tokens)


@pytest.mark.asyncio
async def test_create_invitation(mock_uow, now):
    issuer_id = uuid4()

    result = await InvitationLedger(mock_uow).create_invitation(
        "Bob@Co.com", AccountRole.manager, issuer_id, WEEK, now
    )

    assert result.is_ok()
    invitation = result.ok_value
    assert invitation.email == "bob@co.com"
    assert invitation.role == AccountRole.manager
    assert invitation.status == InvitationStatus.pending
    assert invitation.expires_at == now + WEEK
    assert invitation.invited_by_id == issuer_id


@pytest.mark.asyncio
async def test_create_rejects_when_live_invitation_exists(mock_uow, make_invitation, now):
    mock_uow.invitations.get_pending_by_email.return_value = make_invitation(
        expires_at=now + timedelta(days=1)
    )

    result = await InvitationLedger(mock_uow).create_invitation(
        "bob@co.com", AccountRole.manager, uuid4(), WEEK, now
    )

    assert result.is_err()
    assert result.err_value.code == "DUPLICATE_INVITATION"
    mock_uow.invitations.create.assert_not_called()


@pytest.mark.asyncio
async def test_create_supersedes_expired_pending_invitation(mock_uow, make_invitation, now):
    stale = make_invitation(expires_at=now - timedelta(days=1))
    mock_uow.invitations.get_pending_by_email.return_value = stale

    result = await InvitationLedger(mock_uow).create_invitation(
        "bob@co.com", AccountRole.employee, uuid4(), WEEK, now
    )

    assert result.is_ok()
    assert stale.status == InvitationStatus.revoked
    mock_uow.invitations.update.assert_called_once_with(stale)
    assert result.ok_value.token != stale.token


@pytest.mark.asyncio
async def test_create_reports_lost_race_as_duplicate(mock_uow, now):
    mock_uow.invitations.create.side_effect = None
    mock_uow.invitations.create.return_value = None

    result = await InvitationLedger(mock_uow).create_invitation(
        "bob@co.com", AccountRole.employee, uuid4(), WEEK, now
    )

    assert result.is_err()
    assert result.err_value.code == "DUPLICATE_INVITATION"


@pytest.mark.asyncio
@pytest.mark.parametrize("ttl", [timedelta(hours=23), timedelta(days=91)])
async def test_create_rejects_out_of_range_ttl(mock_uow, now, ttl):
    result = await InvitationLedger(mock_uow).create_invitation(
        "bob@co.com", AccountRole.employee, uuid4(), ttl, now
    )

    assert result.is_err()
    assert result.err_value.code == "INVALID_TTL"


@pytest.mark.asyncio
async def test_resend_rotates_token_and_resets_expiry(mock_uow, make_invitation, now):
    invitation = make_invitation(token="old-token", expires_at=now - timedelta(days=2))
    mock_uow.invitations.get_pending_by_email.return_value = invitation

    result = await InvitationLedger(mock_uow).resend("bob@co.com", WEEK, now)

    assert result.is_ok()
    assert invitation.token != "old-token"
    assert invitation.expires_at == now + WEEK
    assert invitation.resent_at == now
    assert invitation.resend_count == 1
    mock_uow.invitations.create.assert_not_called()


@pytest.mark.asyncio
async def test_resend_without_pending_invitation(mock_uow, now):
    result = await InvitationLedger(mock_uow).resend("nobody@co.com", WEEK, now)

    assert result.is_err()
    assert result.err_value.code == "INVITATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_consume_returns_claim(mock_uow, make_invitation, now):
    invitation = make_invitation(status=InvitationStatus.consumed, consumed_at=now)
    mock_uow.invitations.mark_consumed.return_value = True
    mock_uow.invitations.get_by_token.return_value = invitation

    result = await InvitationLedger(mock_uow).consume("invitation-token", now)

    assert result.is_ok()
    claim = result.ok_value
    assert claim.email == "bob@co.com"
    assert claim.role == AccountRole.manager
    assert claim.invited_by_id == invitation.invited_by_id
    mock_uow.invitations.mark_consumed.assert_called_once_with("invitation-token", now)


@pytest.mark.asyncio
async def test_consume_expired_invitation(mock_uow, make_invitation, now):
    mock_uow.invitations.mark_consumed.return_value = False
    mock_uow.invitations.get_by_token.return_value = make_invitation(expires_at=now - timedelta(seconds=1))

    result = await InvitationLedger(mock_uow).consume("invitation-token", now)

    assert result.is_err()
    assert result.err_value.code == "INVITATION_EXPIRED"


@pytest.mark.asyncio
async def test_consume_already_consumed_invitation(mock_uow, make_invitation, now):
    mock_uow.invitations.mark_consumed.return_value = False
    mock_uow.invitations.get_by_token.return_value = make_invitation(status=InvitationStatus.consumed)

    result = await InvitationLedger(mock_uow).consume("invitation-token", now)

    assert result.is_err()
    assert result.err_value.code == "INVITATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_consume_unknown_token(mock_uow, now):
    result = await InvitationLedger(mock_uow).consume("unknown", now)

    assert result.is_err()
    assert result.err_value.code == "INVITATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_revoke_consumed_invitation_is_rejected(mock_uow, make_invitation):
    mock_uow.invitations.get_by_id.return_value = make_invitation(status=InvitationStatus.consumed)

    result = await InvitationLedger(mock_uow).revoke(uuid4())

    assert result.is_err()
    assert result.err_value.code == "INVITATION_ALREADY_CONSUMED"


@pytest.mark.asyncio
async def test_revoke_pending_invitation(mock_uow, make_invitation):
    invitation = make_invitation()
    mock_uow.invitations.get_by_id.return_value = invitation

    result = await InvitationLedger(mock_uow).revoke(invitation.id)

    assert result.is_ok()
    assert invitation.status == InvitationStatus.revoked
