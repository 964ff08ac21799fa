"""
Authorization Resolver

Role checks for protected operations and the rules for who may change whose role.
"""

from uuid import UUID

from result import Err, Ok, Result

from src.domain.entities import Account, AccountRole
from src.domain.errors import Error


class AuthorizationResolver:
    """
    Business Rules:
    - Role order is total: Employee < Manager < Admin
    - Checks are "at least" rank comparisons, never name equality
    - Only an active Admin may change roles (so an Admin is never demoted by a non-Admin)
    - The last active Admin cannot be demoted, which would lock everyone out
    - Every active account may read and edit its own profile
    """

    def require_role(self, account: Account, minimum: AccountRole) -> Result[Account, Error]:
        if not account.is_active or not account.role.at_least(minimum):
            return Err(
                Error(
                    "ROLE_INSUFFICIENT",
                    f"This operation requires the {minimum.value} role",
                )
            )
        return Ok(account)

    def require_self_or_role(
        self, account: Account, target_id: UUID, minimum: AccountRole
    ) -> Result[Account, Error]:
        """An active account may always act on itself; anyone else needs minimum"""
        if account.id == target_id:
            return self.require_role(account, AccountRole.lowest())
        return self.require_role(account, minimum)

    def check_role_change(
        self,
        acting: Account,
        target: Account,
        new_role: AccountRole,
        active_admin_count: int,
    ) -> Result[None, Error]:
        """
        Decide whether acting may set target's role to new_role.

        Args:
            acting: Account performing the change
            target: Account whose role changes
            new_role: Role to assign
            active_admin_count: Current number of active admins

        Returns:
            Ok(None) when allowed, or Error (ROLE_INSUFFICIENT, LAST_ADMIN)
        """
        allowed = self.require_role(acting, AccountRole.admin)
        if allowed.is_err():
            return Err(Error("ROLE_INSUFFICIENT", "Only admins can change roles"))

        demotes_admin = (
            target.role == AccountRole.admin
            and target.is_active
            and new_role != AccountRole.admin
        )
        if demotes_admin and active_admin_count <= 1:
            return Err(
                Error("LAST_ADMIN", "The last remaining admin cannot be demoted")
            )

        return Ok(None)

    def can_change_role(
        self,
        acting: Account,
        target: Account,
        new_role: AccountRole,
        active_admin_count: int,
    ) -> bool:
        return self.check_role_change(acting, target, new_role, active_admin_count).is_ok()
