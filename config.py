import logging
import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

logger = logging.getLogger(__name__)

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ConfigurationError(Exception):
    """Raised at startup when the access configuration is unsafe or malformed."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Configuration error for '{key}': {message}")


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./intranet_access.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Access policy
    ALLOWED_DOMAINS = data.get("ALLOWED_DOMAINS", [])
    REQUIRE_DOMAIN_RESTRICTION = bool(data.get("REQUIRE_DOMAIN_RESTRICTION", False))
    ADMIN_EMAIL = data.get("ADMIN_EMAIL", "")

    # Invitations
    INVITATION_TTL_DAYS = int(data.get("INVITATION_TTL_DAYS", 7))
    INVITATION_RETENTION_DAYS = int(data.get("INVITATION_RETENTION_DAYS", 90))

    # Sessions
    SESSION_IDLE_TIMEOUT_MINUTES = int(data.get("SESSION_IDLE_TIMEOUT_MINUTES", 30))
    SESSION_ABSOLUTE_TTL_HOURS = int(data.get("SESSION_ABSOLUTE_TTL_HOURS", 12))
    SESSION_COOKIE_NAME = data.get("SESSION_COOKIE_NAME", "intranet_session")
    SESSION_COOKIE_SECURE = bool(data.get("SESSION_COOKIE_SECURE", True))

    # OAuth providers
    OAUTH_STATE_SECRET = data.get("OAUTH_STATE_SECRET", "dev-oauth-state-secret-change-me")
    FRONTEND_URL = data.get("FRONTEND_URL", "http://localhost:5173")
    GOOGLE_CLIENT_ID = data.get("GOOGLE_CLIENT_ID", "")
    GOOGLE_CLIENT_SECRET = data.get("GOOGLE_CLIENT_SECRET", "")
    AZURE_CLIENT_ID = data.get("AZURE_CLIENT_ID", "")
    AZURE_CLIENT_SECRET = data.get("AZURE_CLIENT_SECRET", "")
    AZURE_TENANT_ID = data.get("AZURE_TENANT_ID", "")

    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")


def validate_config(config) -> None:
    """
    Validate the access-control settings before the app starts serving.

    An empty allow-list means "allow any domain", so a deployment that meant
    to restrict logins but lost its ALLOWED_DOMAINS would silently accept
    everyone. REQUIRE_DOMAIN_RESTRICTION turns that case into a hard failure.

    Raises:
        ConfigurationError: on an unsafe or malformed value
    """
    domains = config.ALLOWED_DOMAINS or []
    if isinstance(domains, str):
        raise ConfigurationError(
            "ALLOWED_DOMAINS", "must be a list of domains, not a string"
        )

    for domain in domains:
        if not domain or "@" in domain or domain.strip() != domain:
            raise ConfigurationError("ALLOWED_DOMAINS", f"invalid domain {domain!r}")

    if not domains:
        if config.REQUIRE_DOMAIN_RESTRICTION:
            raise ConfigurationError(
                "ALLOWED_DOMAINS",
                "domain restriction is required but no domain is configured",
            )
        logger.warning("No ALLOWED_DOMAINS configured: any e-mail domain may log in")

    admin_email = (config.ADMIN_EMAIL or "").strip().lower()
    if admin_email:
        if "@" not in admin_email:
            raise ConfigurationError("ADMIN_EMAIL", "must be an e-mail address")
        admin_domain = admin_email.rsplit("@", 1)[1]
        if domains and admin_domain not in {d.lower() for d in domains}:
            raise ConfigurationError(
                "ADMIN_EMAIL", "is outside ALLOWED_DOMAINS and could never log in"
            )

    # Multi-tenant endpoints cannot pass the id_token issuer check
    if config.AZURE_CLIENT_ID and config.AZURE_TENANT_ID in ("", "common", "organizations", "consumers"):
        raise ConfigurationError("AZURE_TENANT_ID", "must name the organisation's own tenant")

    if config.INVITATION_TTL_DAYS < 1:
        raise ConfigurationError("INVITATION_TTL_DAYS", "must be at least 1")
    if config.SESSION_IDLE_TIMEOUT_MINUTES < 1:
        raise ConfigurationError("SESSION_IDLE_TIMEOUT_MINUTES", "must be at least 1")
    if config.SESSION_ABSOLUTE_TTL_HOURS < 1:
        raise ConfigurationError("SESSION_ABSOLUTE_TTL_HOURS", "must be at least 1")
