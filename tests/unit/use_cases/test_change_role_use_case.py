from uuid import uuid4

import pytest

from src.app.use_cases.users import ChangeRoleUseCase
from src.domain.entities import AccountRole


@pytest.mark.asyncio
async def test_admin_promotes_employee(mock_uow, make_account, now):
    admin = make_account(role=AccountRole.admin)
    target = make_account(role=AccountRole.employee)
    mock_uow.accounts.get_by_id.return_value = target

    result = await ChangeRoleUseCase(mock_uow).execute(admin, target.id, "Manager", now=now)

    assert result.is_ok()
    assert result.ok_value.role == "Manager"
    assert target.role == AccountRole.manager

    audit = mock_uow.audit_events.create.call_args.args[0]
    assert audit.action == "role_changed"
    assert audit.event_metadata == {"old_role": "Employee", "new_role": "Manager"}
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_non_admin_is_rejected_and_role_unchanged(mock_uow, make_account, now):
    manager = make_account(role=AccountRole.manager)
    target = make_account(role=AccountRole.employee)
    mock_uow.accounts.get_by_id.return_value = target

    result = await ChangeRoleUseCase(mock_uow).execute(manager, target.id, "Admin", now=now)

    assert result.is_err()
    assert result.err_value.code == "ROLE_INSUFFICIENT"
    assert target.role == AccountRole.employee
    mock_uow.accounts.update.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_last_admin_cannot_step_down(mock_uow, make_account, now):
    admin = make_account(role=AccountRole.admin)
    mock_uow.accounts.get_by_id.return_value = admin
    mock_uow.accounts.count_active_admins.return_value = 1

    result = await ChangeRoleUseCase(mock_uow).execute(admin, admin.id, "Employee", now=now)

    assert result.is_err()
    assert result.err_value.code == "LAST_ADMIN"
    assert admin.role == AccountRole.admin


@pytest.mark.asyncio
async def test_unknown_account(mock_uow, make_account, now):
    admin = make_account(role=AccountRole.admin)

    result = await ChangeRoleUseCase(mock_uow).execute(admin, uuid4(), "Manager", now=now)

    assert result.is_err()
    assert result.err_value.code == "ACCOUNT_NOT_FOUND"


@pytest.mark.asyncio
async def test_invalid_role_name(mock_uow, make_account, now):
    admin = make_account(role=AccountRole.admin)

    result = await ChangeRoleUseCase(mock_uow).execute(admin, uuid4(), "Superuser", now=now)

    assert result.is_err()
    assert result.err_value.code == "INVALID_ROLE"


@pytest.mark.asyncio
async def test_demotion_is_refused_when_guarded_write_loses(mock_uow, make_account, now):
    admin = make_account(role=AccountRole.admin)
    target = make_account(email="other@co.com", role=AccountRole.admin)
    mock_uow.accounts.get_by_id.return_value = target
    mock_uow.accounts.count_active_admins.return_value = 2
    mock_uow.accounts.update_unless_last_admin.side_effect = None
    mock_uow.accounts.update_unless_last_admin.return_value = None

    result = await ChangeRoleUseCase(mock_uow).execute(admin, target.id, "Manager", now=now)

    assert result.is_err()
    assert result.err_value.code == "LAST_ADMIN"
    assert target.role == AccountRole.admin
    mock_uow.audit_events.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_admin_demotion_goes_through_guarded_write(mock_uow, make_account, now):
    admin = make_account(role=AccountRole.admin)
    target = make_account(email="other@co.com", role=AccountRole.admin)
    mock_uow.accounts.get_by_id.return_value = target
    mock_uow.accounts.count_active_admins.return_value = 2

    result = await ChangeRoleUseCase(mock_uow).execute(admin, target.id, "Employee", now=now)

    assert result.is_ok()
    mock_uow.accounts.update_unless_last_admin.assert_called_once_with(
        target, role=AccountRole.employee
    )
    mock_uow.accounts.update.assert_not_called()
    mock_uow.accounts.count_active_admins.assert_called_once_with(lock=True)
