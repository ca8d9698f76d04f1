"""Repositories wrapped with access control and mutation listeners.

Every mutating call follows the same sequence:

1. Check the permission for the acting user (when an access controller is
   configured). A denied call raises before anything is touched.
2. Apply the mutation on the underlying repository.
3. Notify listeners, in registration order (audit listeners emit events).

Reads are passed through unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from vexilla.foundation.application.context import get_current_actor
from vexilla.foundation.application.strategies import (
    CONTEXT_USER,
    StrategyPolicy,
    StrategyRegistry,
    default_strategy_registry,
)
from vexilla.foundation.domain.exceptions import FeatureNotFoundError, NotFoundError
from vexilla.foundation.domain.features import Feature
from vexilla.foundation.domain.permissions import Permission

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    from vexilla.foundation.application.access_control import AccessController
    from vexilla.foundation.domain.ports import Repository
    from vexilla.foundation.domain.properties import Property
    from vexilla.foundation.domain.security import Acl

logger = logging.getLogger(__name__)

E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class OperationPermissions:
    """Permissions required by the mutating operations of one entity family."""

    create: Permission
    update: Permission
    delete: Permission


FEATURE_PERMISSIONS = OperationPermissions(
    Permission.CREATE_FEATURE, Permission.UPDATE_FEATURE, Permission.DELETE_FEATURE
)
PROPERTY_PERMISSIONS = OperationPermissions(
    Permission.CREATE_PROPERTY, Permission.UPDATE_PROPERTY, Permission.DELETE_PROPERTY
)
ROLE_PERMISSIONS = OperationPermissions(
    Permission.CREATE_ROLE, Permission.UPDATE_ROLE, Permission.DELETE_ROLE
)
USER_PERMISSIONS = OperationPermissions(
    Permission.CREATE_USER, Permission.UPDATE_USER, Permission.DELETE_USER
)


class ManagedRepository(Generic[E]):
    """Repository decorator adding permission checks and listener callbacks.

    Args:
        repository: Underlying storage.
        permissions: Permissions required per mutating operation.
        access: Optional access controller. Without one, no checks run.
        listeners: Listeners notified after each successful mutation.
        actor_getter: Returns the acting user uid.
    """

    def __init__(
        self,
        repository: Repository[E],
        permissions: OperationPermissions,
        *,
        access: AccessController | None = None,
        listeners: list[Any] | None = None,
        actor_getter: Callable[[], str | None] = get_current_actor,
    ) -> None:
        self._repository = repository
        self._permissions = permissions
        self._access = access
        self._listeners: list[Any] = list(listeners or [])
        self._actor_getter = actor_getter

    @property
    def repository(self) -> Repository[E]:
        return self._repository

    def add_listener(self, listener: Any) -> None:
        """Append a listener; it is notified after those already registered."""
        self._listeners.append(listener)

    # -- Reads --

    def exists(self, uid: str) -> bool:
        return self._repository.exists(uid)

    def find(self, uid: str) -> E | None:
        return self._repository.find(uid)

    def read(self, uid: str) -> E:
        return self._repository.read(uid)

    def find_all(self) -> Iterator[E]:
        return self._repository.find_all()

    def find_all_ids(self) -> Iterator[str]:
        return self._repository.find_all_ids()

    def count(self) -> int:
        return self._repository.count()

    # -- Mutations --

    def save(self, entity: E) -> None:
        """Create or update ``entity`` (CREATE or UPDATE permission).

        An update is checked against the stored entity's ACL and a create
        against no ACL, so the incoming entity never grants its own save.
        """
        uid = self._uid(entity)
        stored = self._repository.find(uid)
        existed = stored is not None
        if stored is None:
            self._check(self._permissions.create, None, uid=uid)
        else:
            self._check(self._permissions.update, self._acl_for(stored), uid=uid)
        self._repository.save(entity)
        self._notify("on_update" if existed else "on_create", entity)

    def delete(self, uid: str) -> None:
        """Delete by uid (DELETE permission).

        Raises:
            NotFoundError: If absent; nothing is changed.
        """
        entity = self._repository.read(uid)
        self._check(self._permissions.delete, self._acl_for(entity), uid=uid)
        self._repository.delete(uid)
        self._notify("on_delete", uid)

    def delete_all(self) -> None:
        """Delete every entity (DELETE permission)."""
        self._check(self._permissions.delete, None)
        self._repository.delete_all()
        self._notify("on_delete_all")

    # -- Helpers --

    def _uid(self, entity: E) -> str:
        return str(entity.uid)  # type: ignore[attr-defined]

    def _acl_for(self, entity: E) -> Acl | None:
        return None

    def _check(self, permission: Permission, acl: Acl | None, **context: str) -> None:
        if self._access is None:
            return
        self._access.check(self._actor_getter(), permission, acl, **context)

    def _notify(self, callback_name: str, *args: Any) -> None:
        for listener in self._listeners:
            callback = getattr(listener, callback_name, None)
            if callback is not None:
                callback(*args)


class FeatureManager(ManagedRepository[Feature]):
    """Managed feature repository with toggles, groups and evaluation.

    Permission checks on a feature take its ACL into account.

    Args:
        repository: Underlying feature storage.
        strategies: Evaluator registry used by ``is_enabled``.
        policy: Default strategy combination policy.
        auto_create: Create unknown features (disabled) on ``is_enabled``.
        **kwargs: Forwarded to ``ManagedRepository``.
    """

    def __init__(
        self,
        repository: Repository[Feature],
        *,
        strategies: StrategyRegistry | None = None,
        policy: StrategyPolicy = StrategyPolicy.ALL,
        auto_create: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(repository, FEATURE_PERMISSIONS, **kwargs)
        self._strategies = strategies or default_strategy_registry()
        self._policy = policy
        self._auto_create = auto_create

    @property
    def auto_create(self) -> bool:
        """Whether ``is_enabled`` creates unknown features."""
        return self._auto_create

    def _acl_for(self, entity: Feature) -> Acl | None:
        return entity.acl

    def toggle_on(self, uid: str) -> None:
        feature = self._repository.read(uid)
        self._check(Permission.TOGGLE_FEATURE, feature.acl, uid=uid)
        feature.toggle_on()
        self._repository.save(feature)
        self._notify("on_toggle_on", uid)

    def toggle_off(self, uid: str) -> None:
        feature = self._repository.read(uid)
        self._check(Permission.TOGGLE_FEATURE, feature.acl, uid=uid)
        feature.toggle_off()
        self._repository.save(feature)
        self._notify("on_toggle_off", uid)

    def list_groups(self) -> set[str]:
        return {f.group for f in self._repository.find_all() if f.group}

    def exists_group(self, group: str) -> bool:
        return any(f.group == group for f in self._repository.find_all())

    def read_group(self, group: str) -> dict[str, Feature]:
        """Features belonging to ``group``, keyed by uid.

        Raises:
            NotFoundError: If no feature belongs to the group.
        """
        members = {f.uid: f for f in self._repository.find_all() if f.group == group}
        if not members:
            raise NotFoundError("FeatureGroup", group)
        return members

    def toggle_on_group(self, group: str) -> None:
        self._toggle_group(group, enabled=True)
        self._notify("on_toggle_on_group", group)

    def toggle_off_group(self, group: str) -> None:
        self._toggle_group(group, enabled=False)
        self._notify("on_toggle_off_group", group)

    def _toggle_group(self, group: str, *, enabled: bool) -> None:
        members = self.read_group(group)
        for feature in members.values():
            self._check(Permission.TOGGLE_FEATURE, feature.acl, uid=feature.uid, group=group)
        for feature in members.values():
            feature.enabled = enabled
            self._repository.save(feature)

    def add_to_group(self, uid: str, group: str) -> None:
        feature = self._repository.read(uid)
        self._check(Permission.UPDATE_FEATURE, feature.acl, uid=uid, group=group)
        feature.group = group
        self._repository.save(feature)
        self._notify("on_add_to_group", uid, group)

    def remove_from_group(self, uid: str, group: str) -> None:
        """Detach a feature from ``group``.

        Raises:
            NotFoundError: If the feature is not in that group.
        """
        feature = self._repository.read(uid)
        if feature.group != group:
            raise NotFoundError("FeatureGroup", group, feature_uid=uid)
        self._check(Permission.UPDATE_FEATURE, feature.acl, uid=uid, group=group)
        feature.group = None
        self._repository.save(feature)
        self._notify("on_remove_from_group", uid, group)

    def is_enabled(
        self,
        uid: str,
        context: Mapping[str, Any] | None = None,
        policy: StrategyPolicy | None = None,
    ) -> bool:
        """Effective toggle decision for a feature.

        The acting user is added to the evaluation context under ``user``
        unless the caller provides one.

        Raises:
            FeatureNotFoundError: If unknown and auto-create is off.
        """
        feature = self._repository.find(uid)
        if feature is None:
            if not self._auto_create:
                raise FeatureNotFoundError(uid)
            feature = Feature(uid=uid, enabled=False)
            self._repository.save(feature)
            self._notify("on_create", feature)
            logger.info("feature_auto_created", extra={"feature_uid": uid})
            return False
        evaluation_context = {CONTEXT_USER: self._actor_getter(), **(context or {})}
        return self._strategies.evaluate_feature(
            feature, evaluation_context, policy or self._policy
        )


class PropertyManager(ManagedRepository["Property[Any]"]):
    """Managed property repository with in-place value updates."""

    def __init__(self, repository: Repository[Property[Any]], **kwargs: Any) -> None:
        super().__init__(repository, PROPERTY_PERMISSIONS, **kwargs)

    def update_value(self, uid: str, raw: str) -> None:
        """Validate and store a new value given in string form.

        Raises:
            PropertyNotFoundError: If the property does not exist.
            InvalidPropertyValueError: If the value is rejected; nothing changes.
        """
        prop = self._repository.read(uid)
        self._check(Permission.UPDATE_PROPERTY, None, uid=uid)
        prop.from_string(raw)
        self._repository.save(prop)
        self._notify("on_update_value", uid, prop.as_string())
