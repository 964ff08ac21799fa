"""
Domain Policy

Decides whether an e-mail address may authenticate at all.
"""

from typing import Iterable


class DomainPolicy:
    """
    Allow-list of organizational e-mail domains.

    Pure predicate: no I/O, no side effects. An empty allow-list allows any
    domain; startup validation (config.validate_config) is where a missing
    allow-list is caught, not here.
    """

    def __init__(self, allowed_domains: Iterable[str] = ()):
        self._allowed = frozenset(
            domain.strip().lower() for domain in allowed_domains or () if domain.strip()
        )

    @classmethod
    def from_config(cls, config) -> "DomainPolicy":
        return cls(config.ALLOWED_DOMAINS or ())

    @property
    def restricted(self) -> bool:
        return bool(self._allowed)

    @property
    def allowed_domains(self) -> frozenset:
        return self._allowed

    def is_allowed(self, email: str) -> bool:
        if not self._allowed:
            return True
        _, at, domain = email.strip().rpartition("@")
        if not at:
            return False
        return domain.lower() in self._allowed
