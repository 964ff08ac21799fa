import logging

import pytest

from config import ApplicationConfig, ConfigurationError, validate_config


def _config(**overrides):
    return type("Config", (ApplicationConfig,), overrides)


def test_valid_restricted_config():
    validate_config(_config(ALLOWED_DOMAINS=["co.com"], ADMIN_EMAIL="root@co.com"))


def test_required_restriction_without_domains_fails():
    with pytest.raises(ConfigurationError) as exc_info:
        validate_config(_config(ALLOWED_DOMAINS=[], REQUIRE_DOMAIN_RESTRICTION=True))

    assert exc_info.value.key == "ALLOWED_DOMAINS"


def test_unrestricted_config_only_warns(caplog):
    with caplog.at_level(logging.WARNING):
        validate_config(_config(ALLOWED_DOMAINS=[], REQUIRE_DOMAIN_RESTRICTION=False))

    assert "any e-mail domain" in caplog.text


def test_domains_given_as_string_fail():
    with pytest.raises(ConfigurationError):
        validate_config(_config(ALLOWED_DOMAINS="co.com"))


@pytest.mark.parametrize("domain", ["@co.com", " co.com", ""])
def test_malformed_domain_fails(domain):
    with pytest.raises(ConfigurationError):
        validate_config(_config(ALLOWED_DOMAINS=[domain]))


def test_admin_email_outside_allow_list_fails():
    with pytest.raises(ConfigurationError) as exc_info:
        validate_config(_config(ALLOWED_DOMAINS=["co.com"], ADMIN_EMAIL="root@other.com"))

    assert exc_info.value.key == "ADMIN_EMAIL"


def test_non_positive_session_timeout_fails():
    with pytest.raises(ConfigurationError):
        validate_config(_config(ALLOWED_DOMAINS=["co.com"], SESSION_IDLE_TIMEOUT_MINUTES=0))


@pytest.mark.parametrize("tenant", ["", "common"])
def test_azure_requires_a_concrete_tenant(tenant):
    with pytest.raises(ConfigurationError) as exc_info:
        validate_config(
            _config(ALLOWED_DOMAINS=["co.com"], AZURE_CLIENT_ID="client", AZURE_TENANT_ID=tenant)
        )

    assert exc_info.value.key == "AZURE_TENANT_ID"
