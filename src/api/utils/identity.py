"""
Federated identity boundary.

Wraps the authlib Starlette OAuth client for the supported providers and
normalizes whatever each provider returns into a VerifiedIdentity. Everything
behind this module only ever sees a lower-cased, verified e-mail and a name.

The OAuth state parameter (CSRF protection) is kept by authlib in the signed
Starlette session between the redirect and the callback.

Supported providers:
  google -- OIDC discovery
  azure  -- Microsoft identity platform v2.0 OIDC discovery for one tenant
"""

import logging
from typing import Dict, List, Optional

from authlib.integrations.starlette_client import OAuth, OAuthError
from starlette.requests import Request
from starlette.responses import Response

from src.app.use_cases.auth.dtos import VerifiedIdentity
from src.domain.base import normalize_email

logger = logging.getLogger(__name__)

GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"
AZURE_METADATA_URL = "https://login.microsoftonline.com/{tenant}/v2.0/.well-known/openid-configuration"

PROVIDER_LABELS = {"google": "Google", "azure": "Microsoft"}


class IdentityError(Exception):
    """The provider handshake failed or did not yield a verified identity"""


def build_oauth(config) -> OAuth:
    """Register every provider whose client ID and secret are configured"""
    oauth = OAuth()

    if config.GOOGLE_CLIENT_ID and config.GOOGLE_CLIENT_SECRET:
        oauth.register(
            name="google",
            client_id=config.GOOGLE_CLIENT_ID,
            client_secret=config.GOOGLE_CLIENT_SECRET,
            server_metadata_url=GOOGLE_METADATA_URL,
            client_kwargs={"scope": "openid email profile"},
        )
        logger.info("Google OAuth provider registered")

    if config.AZURE_CLIENT_ID and config.AZURE_CLIENT_SECRET:
        oauth.register(
            name="azure",
            client_id=config.AZURE_CLIENT_ID,
            client_secret=config.AZURE_CLIENT_SECRET,
            server_metadata_url=AZURE_METADATA_URL.format(tenant=config.AZURE_TENANT_ID),
            client_kwargs={"scope": "openid email profile"},
        )
        logger.info("Azure AD OAuth provider registered (tenant %s)", config.AZURE_TENANT_ID)

    return oauth


def get_verified_identity(provider: str, token: dict) -> VerifiedIdentity:
    """
    Extract the verified identity from a provider token response.

    Google must assert email_verified. Azure AD work accounts are managed by
    the tenant and usually carry no email_verified claim; when present it
    must be true. Azure must send the email claim itself: preferred_username
    is a sign-in hint the user or tenant can set, never an identity.

    Raises:
        ValueError: no userinfo, no e-mail, or an unverified e-mail
    """
    userinfo = token.get("userinfo")
    if not userinfo:
        raise ValueError(f"{provider}: no userinfo in token response")

    if provider == "google":
        if not userinfo.get("email_verified", False):
            raise ValueError("google: email is not verified")
        email = userinfo.get("email")
    elif provider == "azure":
        if userinfo.get("email_verified") is False:
            raise ValueError("azure: email is not verified")
        email = userinfo.get("email")
    else:
        raise ValueError(f"Unknown OAuth provider: {provider!r}")

    if not email or "@" not in email:
        raise ValueError(f"{provider}: missing email claim")

    name = (userinfo.get("name") or "").strip()
    return VerifiedIdentity(email=normalize_email(email), display_name=name)


class IdentityProvider:
    """Redirects to and completes the handshake with the configured providers"""

    def __init__(self, config, oauth: Optional[OAuth] = None):
        self.config = config
        self.oauth = oauth or build_oauth(config)

    def enabled_providers(self) -> List[Dict[str, str]]:
        providers = []
        if self.config.GOOGLE_CLIENT_ID and self.config.GOOGLE_CLIENT_SECRET:
            providers.append({"name": "google", "label": PROVIDER_LABELS["google"]})
        if self.config.AZURE_CLIENT_ID and self.config.AZURE_CLIENT_SECRET:
            providers.append({"name": "azure", "label": PROVIDER_LABELS["azure"]})
        return providers

    def is_enabled(self, provider: str) -> bool:
        return any(p["name"] == provider for p in self.enabled_providers())

    async def authorize_redirect(
        self, request: Request, provider: str, redirect_uri: str
    ) -> Response:
        client = self.oauth.create_client(provider)
        return await client.authorize_redirect(request, redirect_uri)

    async def fetch_identity(self, request: Request, provider: str) -> VerifiedIdentity:
        client = self.oauth.create_client(provider)
        try:
            token = await client.authorize_access_token(request)
        except OAuthError as exc:
            raise IdentityError(f"{provider}: token exchange failed") from exc

        try:
            return get_verified_identity(provider, token)
        except ValueError as exc:
            raise IdentityError(str(exc)) from exc
