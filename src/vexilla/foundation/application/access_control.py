"""Permission grant resolution for users, roles and feature ACLs.

Resolution for ``(user, permission, feature acl)``:

1. Granted if the permission is granted directly to the user.
2. Else granted if any of the user's roles grants it.
3. Else granted if the feature ACL lists the user, or one of its roles,
   as grantee of that permission.
4. Otherwise denied.

Dangling role or grantee ids are treated as "not granted", never as errors.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vexilla.foundation.domain.exceptions import PermissionDeniedError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from vexilla.foundation.domain.permissions import Permission
    from vexilla.foundation.domain.ports import Repository
    from vexilla.foundation.domain.security import Acl, Role, User

logger = logging.getLogger(__name__)


def is_granted(
    user: User,
    permission: Permission,
    roles: Mapping[str, Role],
    acl: Acl | None = None,
) -> bool:
    """Decide whether ``user`` holds ``permission``.

    Args:
        user: User being checked.
        permission: Required permission token.
        roles: Known roles keyed by uid; missing uids grant nothing.
        acl: Optional feature ACL consulted last.

    Returns:
        True if granted by any of the three sources.
    """
    if permission in user.permissions:
        return True

    for role_uid in user.roles:
        role = roles.get(role_uid)
        if role is not None and permission in role.permissions:
            return True

    if acl is not None:
        grantees = acl.grantees(permission)
        if grantees is not None and grantees.includes(user):
            return True

    return False


class AccessController:
    """Resolves users and roles from repositories and checks permissions.

    Args:
        users: Repository of users.
        roles: Repository of roles.
    """

    def __init__(self, users: Repository[User], roles: Repository[Role]) -> None:
        self._users = users
        self._roles = roles

    def is_granted(
        self,
        user_uid: str | None,
        permission: Permission,
        acl: Acl | None = None,
    ) -> bool:
        """Check ``permission`` for the user with uid ``user_uid``.

        An unknown user, or no user at all, is denied.
        """
        if user_uid is None:
            return False
        user = self._users.find(user_uid)
        if user is None:
            return False
        roles: dict[str, Role] = {}
        for role_uid in user.roles:
            role = self._roles.find(role_uid)
            if role is not None:
                roles[role_uid] = role
        return is_granted(user, permission, roles, acl)

    def check(
        self,
        user_uid: str | None,
        permission: Permission,
        acl: Acl | None = None,
        **context: str,
    ) -> None:
        """Raise unless the user holds ``permission``.

        Raises:
            PermissionDeniedError: If the permission is not granted.
        """
        if not self.is_granted(user_uid, permission, acl):
            logger.info(
                "permission_denied",
                extra={"user_uid": user_uid, "permission": str(permission), **context},
            )
            raise PermissionDeniedError(user_uid, permission, **context)
