"""Permission tokens granted to users, roles and feature ACL grantees.

Permissions are opaque: there is no hierarchy and no partial grant, each
token is granted independently. Ordering is the lexical order of the token
values, which keeps exported documents stable.
"""

from __future__ import annotations

from enum import StrEnum


class Permission(StrEnum):
    """Permission tokens understood by the access controller."""

    ADMIN = "ADMIN"

    READ_FEATURES = "READ_FEATURES"
    CREATE_FEATURE = "CREATE_FEATURE"
    UPDATE_FEATURE = "UPDATE_FEATURE"
    DELETE_FEATURE = "DELETE_FEATURE"
    TOGGLE_FEATURE = "TOGGLE_FEATURE"

    READ_PROPERTIES = "READ_PROPERTIES"
    CREATE_PROPERTY = "CREATE_PROPERTY"
    UPDATE_PROPERTY = "UPDATE_PROPERTY"
    DELETE_PROPERTY = "DELETE_PROPERTY"

    READ_USERS = "READ_USERS"
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    DELETE_USER = "DELETE_USER"

    READ_ROLES = "READ_ROLES"
    CREATE_ROLE = "CREATE_ROLE"
    UPDATE_ROLE = "UPDATE_ROLE"
    DELETE_ROLE = "DELETE_ROLE"

    @classmethod
    def parse(cls, token: str) -> Permission:
        """Resolve a permission from its token value.

        Raises:
            ValueError: If the token is not a known permission.
        """
        return cls(str(token).strip())


def sorted_permissions(permissions: set[Permission] | frozenset[Permission]) -> list[str]:
    """Return permission tokens in their total order (used for export)."""
    return sorted(p.value for p in permissions)
