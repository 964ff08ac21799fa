"""
Intranet Access Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AccountRole(str, Enum):
    """
    Account role, totally ordered: employee < manager < admin.

    Authorization checks compare ranks ("at least"), never names, so a new
    role only needs a slot in _ROLE_ORDER.
    """

    employee = "Employee"
    manager = "Manager"
    admin = "Admin"

    @property
    def rank(self) -> int:
        return _ROLE_ORDER.index(self)

    def at_least(self, minimum: "AccountRole") -> bool:
        return self.rank >= minimum.rank

    @classmethod
    def parse(cls, value: str) -> "AccountRole":
        """Accept either the display value ("Manager") or the name ("manager")"""
        for role in cls:
            if value in (role.value, role.name):
                return role
        raise ValueError(f"Invalid role: {value}")

    @classmethod
    def lowest(cls) -> "AccountRole":
        return _ROLE_ORDER[0]


_ROLE_ORDER = (AccountRole.employee, AccountRole.manager, AccountRole.admin)


class InvitationStatus(str, Enum):
    """Invitation status; expiry is derived from expires_at, not stored"""

    pending = "pending"
    consumed = "consumed"
    revoked = "revoked"
