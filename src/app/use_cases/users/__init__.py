"""
User Management Use Cases

Account provisioning, listing, profiles, roles and activation.
"""

from .change_role_use_case import ChangeRoleUseCase
from .check_email_availability_use_case import CheckEmailAvailabilityUseCase
from .create_provisioned_account_use_case import CreateProvisionedAccountUseCase
from .dtos import AccountListResponse, EmailAvailabilityResponse
from .get_account_use_case import GetAccountUseCase
from .invite_account_use_case import InviteAccountUseCase
from .list_accounts_use_case import ListAccountsUseCase
from .set_account_active_use_case import SetAccountActiveUseCase
from .update_profile_use_case import UpdateProfileUseCase

__all__ = [
    "ListAccountsUseCase",
    "GetAccountUseCase",
    "CreateProvisionedAccountUseCase",
    "InviteAccountUseCase",
    "ChangeRoleUseCase",
    "SetAccountActiveUseCase",
    "UpdateProfileUseCase",
    "CheckEmailAvailabilityUseCase",
    "AccountListResponse",
    "EmailAvailabilityResponse",
]
