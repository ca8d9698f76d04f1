"""Users, roles and feature access control lists.

Plain dataclasses with value equality. Grantee ids are not checked against
existing users or roles: a dangling id simply never matches.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from vexilla.foundation.domain.permissions import Permission


@dataclass
class Role:
    """Named set of granted permissions.

    Attributes:
        uid: Role identifier.
        permissions: Permissions granted to every member of the role.
    """

    uid: str
    permissions: set[Permission] = field(default_factory=set)

    def grant(self, permission: Permission) -> None:
        self.permissions.add(permission)

    def revoke(self, permission: Permission) -> None:
        self.permissions.discard(permission)


@dataclass
class User:
    """User with role memberships and direct permission grants.

    Attributes:
        uid: User identifier.
        first_name: Optional first name.
        last_name: Optional last name.
        description: Optional free text.
        roles: Uids of the roles the user belongs to.
        permissions: Permissions granted directly to the user.
    """

    uid: str
    first_name: str | None = None
    last_name: str | None = None
    description: str | None = None
    roles: set[str] = field(default_factory=set)
    permissions: set[Permission] = field(default_factory=set)


@dataclass
class Grantees:
    """Users and roles allowed a given permission on one feature."""

    users: set[str] = field(default_factory=set)
    roles: set[str] = field(default_factory=set)

    def includes(self, user: User) -> bool:
        """True if the user, or one of its roles, is a grantee."""
        return user.uid in self.users or bool(user.roles & self.roles)


@dataclass
class Acl:
    """Feature level access control list: permission -> grantees."""

    permissions: dict[Permission, Grantees] = field(default_factory=dict)

    def grant_user(self, permission: Permission, user_uid: str) -> None:
        self.permissions.setdefault(permission, Grantees()).users.add(user_uid)

    def grant_role(self, permission: Permission, role_uid: str) -> None:
        self.permissions.setdefault(permission, Grantees()).roles.add(role_uid)

    def grantees(self, permission: Permission) -> Grantees | None:
        return self.permissions.get(permission)

    def is_empty(self) -> bool:
        return not self.permissions
