import pytest

from src.app.repositories.account_repository import AccountQuery
from src.app.use_cases.users import ListAccountsUseCase
from src.domain.entities import AccountRole


@pytest.mark.asyncio
async def test_filters_are_passed_to_repository(mock_uow, make_account):
    admin = make_account(role=AccountRole.admin)

    result = await ListAccountsUseCase(mock_uow).execute(
        admin,
        page_number=2,
        page_size=10,
        search="fin",
        role="manager",
        is_active=True,
        sort_by="name",
        descending=True,
    )

    assert result.is_ok()
    mock_uow.accounts.list_paginated.assert_called_once_with(
        10,
        10,
        AccountQuery(
            search="fin",
            role=AccountRole.manager,
            is_active=True,
            sort_by="name",
            descending=True,
        ),
    )


@pytest.mark.asyncio
async def test_unknown_role_filter_is_rejected(mock_uow, make_account):
    admin = make_account(role=AccountRole.admin)

    result = await ListAccountsUseCase(mock_uow).execute(admin, role="Owner")

    assert result.is_err()
    assert result.err_value.code == "INVALID_ROLE"
    mock_uow.accounts.list_paginated.assert_not_called()


@pytest.mark.asyncio
async def test_manager_cannot_list(mock_uow, make_account):
    manager = make_account(role=AccountRole.manager)

    result = await ListAccountsUseCase(mock_uow).execute(manager)

    assert result.is_err()
    assert result.err_value.code == "ROLE_INSUFFICIENT"


def test_sort_keys_accept_aliases():
    assert AccountQuery(sort_by=" FullName ").sort_column == "display_name"
    assert AccountQuery(sort_by="createdAt").sort_column == "created_at"
    assert AccountQuery(sort_by="shoe_size").sort_column is None
    assert AccountQuery().sort_column is None
