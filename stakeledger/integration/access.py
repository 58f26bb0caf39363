"""
Role-based access control for ledger administration.

Roles:
- `DEFAULT_ADMIN`: grants and revokes roles,
- `OWNER`: changes configuration (reward source, cap, unstaking delay) while paused,
- `PAUSER`: pauses and unpauses the ledger,
- `REWARDS_DISTRIBUTOR`: triggers reward distribution.

The account that creates a ledger holds all four.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Dict, Iterable, Set

from ..core.staking.errors import UnauthorizedError


@unique
class Role(Enum):
    DEFAULT_ADMIN = "default_admin"
    OWNER = "owner"
    PAUSER = "pauser"
    REWARDS_DISTRIBUTOR = "rewards_distributor"


class RoleRegistry:
    def __init__(self) -> None:
        self._members: Dict[Role, Set[str]] = {role: set() for role in Role}

    @classmethod
    def with_admin(cls, admin: str) -> "RoleRegistry":
        if not isinstance(admin, str) or not admin:
            raise ValueError("admin must be a non-empty str")
        registry = cls()
        for role in Role:
            registry.grant(role, admin)
        return registry

    def has(self, role: Role, account: str) -> bool:
        return account in self._members[role]

    def require(self, role: Role, account: str) -> None:
        if not self.has(role, account):
            raise UnauthorizedError(f"{account} lacks role {role.value}")

    def grant(self, role: Role, account: str) -> bool:
        """Add *account* to *role*. Returns False if it was already a member."""
        if account in self._members[role]:
            return False
        self._members[role].add(account)
        return True

    def revoke(self, role: Role, account: str) -> bool:
        """Remove *account* from *role*. Returns False if it was not a member."""
        if account not in self._members[role]:
            return False
        self._members[role].discard(account)
        return True

    def members(self, role: Role) -> list[str]:
        return sorted(self._members[role])

    def to_dict(self) -> dict[str, list[str]]:
        return {role.value: self.members(role) for role in Role}

    @classmethod
    def from_dict(cls, d: Dict[str, Iterable[str]]) -> "RoleRegistry":
        registry = cls()
        for role in Role:
            for account in d.get(role.value, ()):
                registry.grant(role, str(account))
        return registry
