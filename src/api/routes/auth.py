"""
Authentication API Routes

Federated login redirect and callback, the current account, logout.
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from src.api.error import ServerError
from src.api.utils.cookies import clear_session_cookie, set_session_cookie
from src.api.utils.identity import IdentityError, IdentityProvider
from src.app.services.domain_policy import DomainPolicy
from src.app.services.session_manager import SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    AccountResponse,
    HandleLoginCallbackUseCase,
    LogoutResponse,
    LogoutUseCase,
)
from src.depends import (
    get_config,
    get_current_account,
    get_domain_policy,
    get_identity_provider,
    get_session_settings,
    get_unit_of_work,
)
from src.domain.entities import Account

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

INVITATION_SESSION_KEY = "invitation_token"

# Error code -> reason shown on the frontend error page
LOGIN_FAILURE_REASONS = {
    "DOMAIN_NOT_ALLOWED": "domain_not_allowed",
    "USER_INACTIVE": "access_denied",
    "LOGIN_CONFLICT": "access_denied",
}


class ProviderInfo(BaseModel):
    name: str
    label: str


class ProvidersResponse(BaseModel):
    """GET /auth/providers response payload"""

    providers: List[ProviderInfo]


def _error_redirect(config, reason: str) -> RedirectResponse:
    url = f"{config.FRONTEND_URL.rstrip('/')}/auth/error?{urlencode({'reason': reason})}"
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("/providers", status_code=status.HTTP_200_OK, response_model=ProvidersResponse)
async def list_providers(identity_provider: IdentityProvider = Depends(get_identity_provider)):
    """Configured login providers, for rendering the login buttons"""
    providers: List[Dict[str, str]] = identity_provider.enabled_providers()
    return {"providers": providers}


@router.get("/login/{provider}")
async def login(
    request: Request,
    provider: str,
    invitation: Optional[str] = Query(None, description="Invitation token to honour"),
    config=Depends(get_config),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    """
    Start Federated Login

    Redirects to the provider's consent page. An optional ?invitation=<token>
    is kept in the signed session until the callback.
    """
    if not identity_provider.is_enabled(provider):
        logger.warning("Login attempted with unknown provider %r", provider)
        return _error_redirect(config, "oauth_failed")

    if invitation:
        request.session[INVITATION_SESSION_KEY] = invitation
    else:
        request.session.pop(INVITATION_SESSION_KEY, None)

    redirect_uri = str(request.url_for("oauth_callback", provider=provider))
    return await identity_provider.authorize_redirect(request, provider, redirect_uri)


@router.get("/callback/{provider}", name="oauth_callback")
async def oauth_callback(
    request: Request,
    provider: str,
    config=Depends(get_config),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    domain_policy: DomainPolicy = Depends(get_domain_policy),
    session_settings: SessionSettings = Depends(get_session_settings),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Complete Federated Login

    Flow:
      1. Exchange the authorization code (authlib checks the state)
      2. Normalize the provider claims to a verified identity
      3. Run the login callback use case
      4. Set the session cookie and redirect to the frontend

    Failures redirect to FRONTEND_URL/auth/error?reason=<reason> with reason
    domain_not_allowed, access_denied or oauth_failed.
    """
    if not identity_provider.is_enabled(provider):
        return _error_redirect(config, "oauth_failed")

    try:
        identity = await identity_provider.fetch_identity(request, provider)
    except IdentityError as exc:
        logger.warning("OAuth login rejected: %s", exc)
        return _error_redirect(config, "oauth_failed")

    invitation_token = request.session.pop(INVITATION_SESSION_KEY, None)

    use_case = HandleLoginCallbackUseCase(
        uow, domain_policy, session_settings, admin_email=config.ADMIN_EMAIL
    )
    result = await use_case.execute(identity, invitation_token)

    if result.is_err():
        error = result.err_value
        reason = LOGIN_FAILURE_REASONS.get(error.code)
        if reason is None:
            logger.error("Login callback failed unexpectedly: %s", error.code)
            reason = "oauth_failed"
        return _error_redirect(config, reason)

    outcome = result.ok_value
    target = config.FRONTEND_URL
    if "INVITATION_EXPIRED" in outcome.warnings:
        target = f"{target.rstrip('/')}/?{urlencode({'notice': 'invitation_expired'})}"

    response = RedirectResponse(target, status_code=status.HTTP_302_FOUND)
    set_session_cookie(response, config, outcome.session_handle)
    response.headers["Cache-Control"] = "no-store"
    return response


@router.get("/me", status_code=status.HTTP_200_OK, response_model=AccountResponse)
async def get_me(current_account: Account = Depends(get_current_account)):
    """
    Current Account

    Raises:
        - 401 Unauthorized: SESSION_INVALID
    """
    return AccountResponse.from_entity(current_account)


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: Request,
    response: Response,
    config=Depends(get_config),
    session_settings: SessionSettings = Depends(get_session_settings),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Logout

    Revokes the session server-side and clears the cookie. Always succeeds.
    """
    handle = request.cookies.get(config.SESSION_COOKIE_NAME)

    use_case = LogoutUseCase(uow, session_settings)
    result = await use_case.execute(handle)

    if result.is_err():
        raise ServerError(result.err_value)

    clear_session_cookie(response, config)
    return result.ok_value
