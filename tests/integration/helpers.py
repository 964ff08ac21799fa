"""Shared helpers for the API tests: test configuration, fake provider, login."""

import re
from typing import Optional

from fastapi.responses import RedirectResponse
from httpx import AsyncClient
from starlette.requests import Request

from config import ApplicationConfig
from src.api.utils.identity import IdentityError
from src.app.use_cases.auth import VerifiedIdentity

COOKIE_NAME = "intranet_session"


class IntegrationConfig(ApplicationConfig):
    ALLOWED_DOMAINS = ["co.com"]
    REQUIRE_DOMAIN_RESTRICTION = True
    ADMIN_EMAIL = "root@co.com"
    FRONTEND_URL = "https://intranet.co.com"
    SESSION_COOKIE_NAME = COOKIE_NAME
    SESSION_COOKIE_SECURE = True
    SESSION_IDLE_TIMEOUT_MINUTES = 30
    SESSION_ABSOLUTE_TTL_HOURS = 12
    INVITATION_TTL_DAYS = 7
    OAUTH_STATE_SECRET = "integration-state-secret"
    ADMIN_API_KEY = "integration-admin-key"


class FakeIdentityProvider:
    """Skips the provider round trip: the callback query carries the verified identity"""

    def enabled_providers(self):
        return [{"name": "google", "label": "Google"}]

    def is_enabled(self, provider: str) -> bool:
        return provider == "google"

    async def authorize_redirect(self, request: Request, provider: str, redirect_uri: str):
        return RedirectResponse(redirect_uri, status_code=302)

    async def fetch_identity(self, request: Request, provider: str) -> VerifiedIdentity:
        if request.query_params.get("error"):
            raise IdentityError("access_denied by provider")
        return VerifiedIdentity(
            email=request.query_params["email"],
            display_name=request.query_params.get("name", ""),
        )


def session_cookie_header(response) -> Optional[str]:
    """The raw Set-Cookie header of the session cookie, if the response sets one"""
    for header in response.headers.get_list("set-cookie"):
        if header.startswith(f"{COOKIE_NAME}="):
            return header
    return None


def session_handle(response) -> Optional[str]:
    header = session_cookie_header(response)
    if header is None:
        return None
    match = re.match(rf"{COOKIE_NAME}=([^;]*)", header)
    return match.group(1).strip('"') if match else None


async def login(
    client: AsyncClient,
    email: str,
    name: str = "",
    invitation: Optional[str] = None,
):
    """
    Run the login redirect and callback, return (callback response, handle).

    The cookie jar is cleared afterwards; authenticated calls pass the handle
    explicitly through auth_headers().
    """
    params = {"invitation": invitation} if invitation else None
    start = await client.get("/auth/login/google", params=params)
    assert start.status_code == 302

    callback = await client.get("/auth/callback/google", params={"email": email, "name": name})
    handle = session_handle(callback)
    client.cookies.clear()
    return callback, handle


def auth_headers(handle: str) -> dict:
    return {"Cookie": f"{COOKIE_NAME}={handle}"}


async def fetch_one(db_session, model, *criteria):
    """Fresh read of a single row, bypassing stale identity-map state"""
    from sqlmodel import select

    stmt = select(model).where(*criteria).execution_options(populate_existing=True)
    result = await db_session.exec(stmt)
    return result.one_or_none()


async def login_admin(client: AsyncClient) -> str:
    """Log in the configured admin e-mail and return its session handle"""
    response, handle = await login(client, IntegrationConfig.ADMIN_EMAIL, "Root")
    assert response.status_code == 302
    assert handle
    return handle
