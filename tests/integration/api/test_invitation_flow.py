from datetime import timedelta
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.invitation_ledger import InvitationLedger
from src.domain.base import utcnow
from src.domain.entities import Account, AccountRole, Invitation, InvitationStatus
from tests.integration.helpers import auth_headers, fetch_one, login, login_admin


async def _invite(client, admin_handle, email, role="Manager", **extra):
    return await client.post(
        "/users/invitations",
        json={"email": email, "role": role, **extra},
        headers=auth_headers(admin_handle),
    )


@pytest.mark.asyncio
async def test_invited_person_gets_the_invited_role(client: AsyncClient, db_session):
    """Invitation for bob as Manager is honoured once, then the token is dead"""
    admin_handle = await login_admin(client)
    admin_id = (await client.get("/auth/me", headers=auth_headers(admin_handle))).json()["id"]

    created = await _invite(client, admin_handle, "bob@co.com", "Manager")
    assert created.status_code == 201
    invitation = created.json()
    assert invitation["status"] == "pending"
    assert invitation["invitation_url"] == (
        f"https://intranet.co.com/login?invitation={invitation['token']}"
    )

    response, handle = await login(client, "bob@co.com", "Bob", invitation=invitation["token"])
    assert response.status_code == 302
    assert response.headers["location"] == "https://intranet.co.com"

    me = (await client.get("/auth/me", headers=auth_headers(handle))).json()
    assert me["role"] == "Manager"
    assert me["is_provisioned"] is True

    account = await fetch_one(db_session, Account, Account.email == "bob@co.com")
    assert str(account.invited_by_id) == admin_id
    assert account.activated_at is not None

    stored = await fetch_one(db_session, Invitation, Invitation.id == UUID(invitation["id"]))
    assert stored.status == InvitationStatus.consumed
    assert stored.consumed_at is not None

    pending = await client.get("/users/pending-invitations", headers=auth_headers(admin_handle))
    assert pending.json()["total"] == 0

    # Replaying the consumed token directly is rejected
    uow = SqlAlchemyUnitOfWork(db_session)
    async with uow:
        replay = await InvitationLedger(uow).consume(invitation["token"], utcnow())
    assert replay.is_err()
    assert replay.err_value.code == "INVITATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_token_of_someone_else_grants_nothing(client: AsyncClient, db_session):
    admin_handle = await login_admin(client)
    invitation = (await _invite(client, admin_handle, "bob@co.com", "Manager")).json()

    _, handle = await login(client, "mallory@co.com", "Mallory", invitation=invitation["token"])

    me = (await client.get("/auth/me", headers=auth_headers(handle))).json()
    assert me["role"] == "Employee"
    stored = await fetch_one(db_session, Invitation, Invitation.id == UUID(invitation["id"]))
    assert stored.status == InvitationStatus.pending


@pytest.mark.asyncio
async def test_expired_invitation_is_not_honoured(client: AsyncClient, db_session):
    """carol's Manager invitation expired, she becomes an Employee"""
    admin_handle = await login_admin(client)
    invitation = (await _invite(client, admin_handle, "carol@co.com", "Manager")).json()

    await db_session.execute(
        update(Invitation)
        .where(Invitation.id == UUID(invitation["id"]))
        .values(expires_at=utcnow() - timedelta(days=1))
    )
    await db_session.commit()

    response, handle = await login(client, "carol@co.com", "Carol", invitation=invitation["token"])
    assert response.headers["location"] == "https://intranet.co.com/?notice=invitation_expired"

    me = (await client.get("/auth/me", headers=auth_headers(handle))).json()
    assert me["role"] == "Employee"

    account = await fetch_one(db_session, Account, Account.email == "carol@co.com")
    assert account.role == AccountRole.employee
    assert account.invited_by_id is None


@pytest.mark.asyncio
async def test_pending_invitations_flag_expired_ones(client: AsyncClient, db_session):
    admin_handle = await login_admin(client)
    live = (await _invite(client, admin_handle, "dan@co.com", "Employee")).json()
    stale = (await _invite(client, admin_handle, "erin@co.com", "Manager")).json()

    await db_session.execute(
        update(Invitation)
        .where(Invitation.id == UUID(stale["id"]))
        .values(expires_at=utcnow() - timedelta(hours=1))
    )
    await db_session.commit()

    response = await client.get(
        "/users/pending-invitations",
        params={"page_number": 1, "page_size": 10},
        headers=auth_headers(admin_handle),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    flags = {item["email"]: item["is_expired"] for item in data["items"]}
    assert flags == {live["email"]: False, stale["email"]: True}
    assert all("token" not in item for item in data["items"])


@pytest.mark.asyncio
async def test_second_live_invitation_is_a_duplicate(client: AsyncClient):
    admin_handle = await login_admin(client)
    assert (await _invite(client, admin_handle, "bob@co.com")).status_code == 201

    response = await _invite(client, admin_handle, "BOB@co.com", "Employee")

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "DUPLICATE_INVITATION"


@pytest.mark.asyncio
async def test_expired_invitation_can_be_replaced(client: AsyncClient, db_session):
    admin_handle = await login_admin(client)
    first = (await _invite(client, admin_handle, "bob@co.com")).json()
    await db_session.execute(
        update(Invitation)
        .where(Invitation.id == UUID(first["id"]))
        .values(expires_at=utcnow() - timedelta(days=1))
    )
    await db_session.commit()

    second = await _invite(client, admin_handle, "bob@co.com")

    assert second.status_code == 201
    superseded = await fetch_one(db_session, Invitation, Invitation.id == UUID(first["id"]))
    assert superseded.status == InvitationStatus.revoked


@pytest.mark.asyncio
async def test_invitation_for_active_account_is_rejected(client: AsyncClient):
    admin_handle = await login_admin(client)
    await login(client, "alice@co.com", "Alice")

    response = await _invite(client, admin_handle, "alice@co.com")

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ACCOUNT_ALREADY_ACTIVE"


@pytest.mark.asyncio
async def test_invitation_outside_allowed_domains_is_rejected(client: AsyncClient):
    admin_handle = await login_admin(client)

    response = await _invite(client, admin_handle, "eve@other.com")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "DOMAIN_NOT_ALLOWED"


@pytest.mark.asyncio
async def test_invalid_ttl_is_rejected(client: AsyncClient):
    admin_handle = await login_admin(client)

    response = await _invite(client, admin_handle, "bob@co.com", ttl_days=120)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TTL"


@pytest.mark.asyncio
async def test_non_admin_cannot_invite(client: AsyncClient):
    await login_admin(client)
    _, employee_handle = await login(client, "alice@co.com", "Alice")

    response = await _invite(client, employee_handle, "bob@co.com")

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ROLE_INSUFFICIENT"


@pytest.mark.asyncio
async def test_revoked_invitation_is_not_honoured(client: AsyncClient):
    admin_handle = await login_admin(client)
    invitation = (await _invite(client, admin_handle, "bob@co.com", "Manager")).json()

    revoked = await client.delete(
        f"/users/invitations/{invitation['id']}", headers=auth_headers(admin_handle)
    )
    assert revoked.status_code == 200
    assert revoked.json()["status"] == "revoked"

    again = await client.delete(
        f"/users/invitations/{invitation['id']}", headers=auth_headers(admin_handle)
    )
    assert again.status_code == 404

    _, handle = await login(client, "bob@co.com", "Bob", invitation=invitation["token"])
    me = (await client.get("/auth/me", headers=auth_headers(handle))).json()
    assert me["role"] == "Employee"


@pytest.mark.asyncio
async def test_consumed_invitation_cannot_be_revoked(client: AsyncClient):
    admin_handle = await login_admin(client)
    invitation = (await _invite(client, admin_handle, "bob@co.com", "Manager")).json()
    await login(client, "bob@co.com", "Bob", invitation=invitation["token"])

    response = await client.delete(
        f"/users/invitations/{invitation['id']}", headers=auth_headers(admin_handle)
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVITATION_ALREADY_CONSUMED"
