"""
Use Cases

Organized into domain folders:
- auth/: Federated login, sessions, logout
- users/: Account management
- invitations/: Invitation ledger operations
- audit/: Audit trail
- admin/: Maintenance

Import from subdirectories for better organization.
"""

from .admin import SweepStaleRecordsUseCase
from .audit import GetAccountAuditEventsUseCase
from .auth import (
    AuthenticateSessionUseCase,
    HandleLoginCallbackUseCase,
    LogoutUseCase,
)
from .invitations import (
    CreateInvitationUseCase,
    ListPendingInvitationsUseCase,
    RevokeInvitationUseCase,
)
from .users import (
    ChangeRoleUseCase,
    CheckEmailAvailabilityUseCase,
    CreateProvisionedAccountUseCase,
    GetAccountUseCase,
    InviteAccountUseCase,
    ListAccountsUseCase,
    SetAccountActiveUseCase,
    UpdateProfileUseCase,
)

__all__ = [
    # Auth
    "HandleLoginCallbackUseCase",
    "AuthenticateSessionUseCase",
    "LogoutUseCase",
    # Users
    "ListAccountsUseCase",
    "GetAccountUseCase",
    "CreateProvisionedAccountUseCase",
    "InviteAccountUseCase",
    "ChangeRoleUseCase",
    "SetAccountActiveUseCase",
    "UpdateProfileUseCase",
    "CheckEmailAvailabilityUseCase",
    # Invitations
    "CreateInvitationUseCase",
    "ListPendingInvitationsUseCase",
    "RevokeInvitationUseCase",
    # Audit
    "GetAccountAuditEventsUseCase",
    # Admin
    "SweepStaleRecordsUseCase",
]
