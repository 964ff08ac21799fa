"""
User Management API Routes

Account provisioning, invitations, profiles, roles and activation. Every endpoint
requires a valid session; the use cases enforce the role.
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import ClientError, ServerError
from src.app.services.domain_policy import DomainPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.audit import GetAccountAuditEventsUseCase
from src.app.use_cases.auth import AccountResponse
from src.app.use_cases.invitations import (
    CreateInvitationUseCase,
    InvitationResponse,
    ListPendingInvitationsUseCase,
    PendingInvitationsResponse,
    RevokeInvitationResponse,
    RevokeInvitationUseCase,
)
from src.app.use_cases.users import (
    AccountListResponse,
    ChangeRoleUseCase,
    CheckEmailAvailabilityUseCase,
    CreateProvisionedAccountUseCase,
    EmailAvailabilityResponse,
    GetAccountUseCase,
    InviteAccountUseCase,
    ListAccountsUseCase,
    SetAccountActiveUseCase,
    UpdateProfileUseCase,
)
from src.depends import get_config, get_current_account, get_domain_policy, get_unit_of_work
from src.domain.entities import Account
from src.domain.errors import Error

router = APIRouter(prefix="/users", tags=["Users"])

ERROR_STATUS = {
    "ROLE_INSUFFICIENT": status.HTTP_403_FORBIDDEN,
    "ACCOUNT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVITATION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DUPLICATE_EMAIL": status.HTTP_409_CONFLICT,
    "DUPLICATE_INVITATION": status.HTTP_409_CONFLICT,
    "ACCOUNT_ALREADY_ACTIVE": status.HTTP_409_CONFLICT,
    "INVITATION_ALREADY_CONSUMED": status.HTTP_409_CONFLICT,
    "LAST_ADMIN": status.HTTP_409_CONFLICT,
    "INVALID_ROLE": status.HTTP_400_BAD_REQUEST,
    "INVALID_TTL": status.HTTP_400_BAD_REQUEST,
    "DOMAIN_NOT_ALLOWED": status.HTTP_400_BAD_REQUEST,
    "CANNOT_DEACTIVATE_SELF": status.HTTP_400_BAD_REQUEST,
}


def _raise_for(error: Error):
    status_code = ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)


class CreateInvitationRequest(BaseModel):
    """POST /users/invitations request payload"""

    email: EmailStr = Field(..., description="E-mail address to invite")
    role: str = Field("Employee", description="Role granted on first login")
    ttl_days: Optional[int] = Field(None, description="Lifetime in days (1-90)")


class CreateAccountRequest(BaseModel):
    """POST /users request payload"""

    email: EmailStr = Field(..., description="E-mail address of the person")
    role: str = Field("Employee", description="Employee, Manager or Admin")
    display_name: str = Field("", max_length=255)


class InviteAccountRequest(BaseModel):
    """POST /users/{id}/invite request payload"""

    ttl_days: Optional[int] = Field(None, description="Lifetime in days (1-90)")


class ChangeRoleRequest(BaseModel):
    """PUT /users/{id}/role request payload"""

    role: str = Field(..., description="Employee, Manager or Admin")


class UpdateProfileRequest(BaseModel):
    """PUT /users/{id} request payload; omitted fields are left unchanged"""

    display_name: Optional[str] = Field(None, max_length=255)
    department: Optional[str] = Field(None, max_length=255)
    job_title: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = Field(None, description="Admins only")


class SetActiveRequest(BaseModel):
    """PUT /users/{id}/active request payload"""

    is_active: bool


class AuditEventResponse(BaseModel):
    """Single audit event in response"""

    action: str
    actor_email: Optional[str]
    timestamp: str
    metadata: Dict[str, Any]


class AuditEventsResponse(BaseModel):
    """GET /users/{id}/audit-events response payload"""

    events: List[AuditEventResponse]
    next_cursor: Optional[str]


@router.get("", status_code=status.HTTP_200_OK, response_model=AccountListResponse)
async def list_accounts(
    page_number: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Matches email, name, department, job title"),
    role: Optional[str] = Query(None, description="Employee, Manager or Admin"),
    is_active: Optional[bool] = Query(None),
    sort_by: Optional[str] = Query(None, description="email, name, role, department, ..."),
    sort_descending: bool = Query(False),
    current_account: Account = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List Accounts (Admin)

    Newest first unless sort_by is given.

    Raises:
        - 400 Bad Request: INVALID_ROLE
        - 401 Unauthorized: SESSION_INVALID
        - 403 Forbidden: ROLE_INSUFFICIENT
    """
    result = await ListAccountsUseCase(uow).execute(
        current_account,
        page_number,
        page_size,
        search=search,
        role=role,
        is_active=is_active,
        sort_by=sort_by,
        descending=sort_descending,
    )
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.get(
    "/validate-email",
    status_code=status.HTTP_200_OK,
    response_model=EmailAvailabilityResponse,
)
async def validate_email(
    email: str = Query(..., min_length=3),
    current_account: Account = Depends(get_current_account),
    domain_policy: DomainPolicy = Depends(get_domain_policy),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Check E-mail Availability (Admin)

    available=false comes with the reason code (DOMAIN_NOT_ALLOWED,
    DUPLICATE_EMAIL, DUPLICATE_INVITATION).
    """
    use_case = CheckEmailAvailabilityUseCase(uow, domain_policy)
    result = await use_case.execute(current_account, email)
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.get(
    "/pending-invitations",
    status_code=status.HTTP_200_OK,
    response_model=PendingInvitationsResponse,
)
async def list_pending_invitations(
    page_number: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_account: Account = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List Pending Invitations (Admin)

    Newest first. Expired invitations that are still pending are included
    with is_expired=true.
    """
    use_case = ListPendingInvitationsUseCase(uow)
    result = await use_case.execute(current_account, page_number, page_size)
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.post(
    "/invitations",
    status_code=status.HTTP_201_CREATED,
    response_model=InvitationResponse,
)
async def create_invitation(
    request: CreateInvitationRequest,
    current_account: Account = Depends(get_current_account),
    config=Depends(get_config),
    domain_policy: DomainPolicy = Depends(get_domain_policy),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Invite by E-mail (Admin)

    Returns the token and invitation URL for the mailer.

    Raises:
        - 400 Bad Request: INVALID_ROLE, INVALID_TTL, DOMAIN_NOT_ALLOWED
        - 403 Forbidden: ROLE_INSUFFICIENT
        - 409 Conflict: DUPLICATE_INVITATION, ACCOUNT_ALREADY_ACTIVE
    """
    use_case = CreateInvitationUseCase(
        uow,
        domain_policy,
        default_ttl=timedelta(days=config.INVITATION_TTL_DAYS),
        frontend_url=config.FRONTEND_URL,
    )
    result = await use_case.execute(
        current_account, request.email, request.role, request.ttl_days
    )
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.delete(
    "/invitations/{invitation_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeInvitationResponse,
)
async def revoke_invitation(
    invitation_id: UUID,
    current_account: Account = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Revoke Invitation (Admin)

    Raises:
        - 404 Not Found: INVITATION_NOT_FOUND
        - 409 Conflict: INVITATION_ALREADY_CONSUMED
    """
    result = await RevokeInvitationUseCase(uow).execute(current_account, invitation_id)
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AccountResponse)
async def create_account(
    request: CreateAccountRequest,
    current_account: Account = Depends(get_current_account),
    domain_policy: DomainPolicy = Depends(get_domain_policy),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Provision Account (Admin)

    Creates the account before the person's first login.

    Raises:
        - 400 Bad Request: INVALID_ROLE, DOMAIN_NOT_ALLOWED
        - 403 Forbidden: ROLE_INSUFFICIENT
        - 409 Conflict: DUPLICATE_EMAIL
    """
    use_case = CreateProvisionedAccountUseCase(uow, domain_policy)
    result = await use_case.execute(
        current_account, request.email, request.role, request.display_name
    )
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.get("/{account_id}", status_code=status.HTTP_200_OK, response_model=AccountResponse)
async def get_account(
    account_id: UUID,
    current_account: Account = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Account (own account, or Manager and above)

    Raises:
        - 403 Forbidden: ROLE_INSUFFICIENT
        - 404 Not Found: ACCOUNT_NOT_FOUND
    """
    result = await GetAccountUseCase(uow).execute(current_account, account_id)
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.put("/{account_id}", status_code=status.HTTP_200_OK, response_model=AccountResponse)
async def update_profile(
    account_id: UUID,
    request: UpdateProfileRequest,
    current_account: Account = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Update Profile (own account, or Admin for anyone)

    Raises:
        - 400 Bad Request: CANNOT_DEACTIVATE_SELF
        - 403 Forbidden: ROLE_INSUFFICIENT
        - 404 Not Found: ACCOUNT_NOT_FOUND
        - 409 Conflict: LAST_ADMIN
    """
    result = await UpdateProfileUseCase(uow).execute(
        current_account,
        account_id,
        display_name=request.display_name,
        department=request.department,
        job_title=request.job_title,
        is_active=request.is_active,
    )
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.post(
    "/{account_id}/invite",
    status_code=status.HTTP_200_OK,
    response_model=InvitationResponse,
)
async def invite_account(
    account_id: UUID,
    request: Optional[InviteAccountRequest] = None,
    current_account: Account = Depends(get_current_account),
    config=Depends(get_config),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Invite Provisioned Account (Admin)

    Creates the invitation, or re-sends the pending one with a new token
    and a new expiry (resent=true).

    Raises:
        - 404 Not Found: ACCOUNT_NOT_FOUND
        - 409 Conflict: ACCOUNT_ALREADY_ACTIVE
    """
    use_case = InviteAccountUseCase(
        uow,
        default_ttl=timedelta(days=config.INVITATION_TTL_DAYS),
        frontend_url=config.FRONTEND_URL,
    )
    ttl_days = request.ttl_days if request is not None else None
    result = await use_case.execute(current_account, account_id, ttl_days)
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.put("/{account_id}/role", status_code=status.HTTP_200_OK, response_model=AccountResponse)
async def change_role(
    account_id: UUID,
    request: ChangeRoleRequest,
    current_account: Account = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Change Role (Admin)

    Raises:
        - 400 Bad Request: INVALID_ROLE
        - 403 Forbidden: ROLE_INSUFFICIENT
        - 404 Not Found: ACCOUNT_NOT_FOUND
        - 409 Conflict: LAST_ADMIN
    """
    result = await ChangeRoleUseCase(uow).execute(current_account, account_id, request.role)
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.put("/{account_id}/active", status_code=status.HTTP_200_OK, response_model=AccountResponse)
async def set_active(
    account_id: UUID,
    request: SetActiveRequest,
    current_account: Account = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Activate / Deactivate Account (Admin)

    Deactivation revokes the account's sessions immediately.

    Raises:
        - 400 Bad Request: CANNOT_DEACTIVATE_SELF
        - 404 Not Found: ACCOUNT_NOT_FOUND
        - 409 Conflict: LAST_ADMIN
    """
    use_case = SetAccountActiveUseCase(uow)
    result = await use_case.execute(current_account, account_id, request.is_active)
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value


@router.get(
    "/{account_id}/audit-events",
    status_code=status.HTTP_200_OK,
    response_model=AuditEventsResponse,
)
async def get_audit_events(
    account_id: UUID,
    limit: int = Query(50, ge=1, le=100, description="Maximum number of events to return"),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
    current_account: Account = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Account Audit Trail (Admin)

    Returns:
        - events: newest first
        - next_cursor: cursor for the next page (null if no more events)
    """
    use_case = GetAccountAuditEventsUseCase(uow)
    result = await use_case.execute(current_account, account_id, limit=limit, cursor=cursor)
    if result.is_err():
        _raise_for(result.err_value)
    return result.ok_value
