"""Tests for managed repositories: permission checks, listeners and feature operations."""

from __future__ import annotations

from unittest.mock import MagicMock, call

import pytest

from vexilla.foundation.application.access_control import AccessController
from vexilla.foundation.application.context import acting_as
from vexilla.foundation.application.managed import (
    ROLE_PERMISSIONS,
    FeatureManager,
    ManagedRepository,
    PropertyManager,
)
from vexilla.foundation.application.strategies import StrategyPolicy, StrategyRegistry
from vexilla.foundation.domain.exceptions import (
    FeatureNotFoundError,
    InvalidPropertyValueError,
    NotFoundError,
    PermissionDeniedError,
    PropertyNotFoundError,
    RoleNotFoundError,
)
from vexilla.foundation.domain.features import Feature
from vexilla.foundation.domain.permissions import Permission
from vexilla.foundation.domain.properties import create_property
from vexilla.foundation.domain.security import Acl, Role, User
from vexilla.infra.persistence.memory import (
    InMemoryFeatureRepository,
    InMemoryPropertyRepository,
    InMemoryRoleRepository,
    InMemoryUserRepository,
)


def _access() -> AccessController:
    users = InMemoryUserRepository(
        [
            User(uid="admin", permissions=set(Permission)),
            User(uid="toggler", roles={"ops"}),
            User(uid="guest"),
        ]
    )
    roles = InMemoryRoleRepository([Role(uid="ops", permissions={Permission.TOGGLE_FEATURE})])
    return AccessController(users, roles)


@pytest.mark.unit
class TestManagedRepository:
    def test_reads_pass_through(self) -> None:
        repo = InMemoryRoleRepository([Role(uid="admin")])
        managed: ManagedRepository[Role] = ManagedRepository(repo, ROLE_PERMISSIONS)
        assert managed.exists("admin")
        assert managed.read("admin") == Role(uid="admin")
        assert managed.find("nope") is None
        assert list(managed.find_all_ids()) == ["admin"]
        assert managed.count() == 1

    def test_save_notifies_create_then_update(self) -> None:
        listener = MagicMock()
        managed: ManagedRepository[Role] = ManagedRepository(
            InMemoryRoleRepository(), ROLE_PERMISSIONS, listeners=[listener]
        )
        role = Role(uid="admin")
        managed.save(role)
        managed.save(role)
        assert listener.mock_calls == [call.on_create(role), call.on_update(role)]

    def test_listeners_notified_in_registration_order(self) -> None:
        order: list[str] = []
        first = MagicMock()
        first.on_delete.side_effect = lambda uid: order.append("first")
        second = MagicMock()
        second.on_delete.side_effect = lambda uid: order.append("second")
        managed: ManagedRepository[Role] = ManagedRepository(
            InMemoryRoleRepository([Role(uid="admin")]), ROLE_PERMISSIONS, listeners=[first]
        )
        managed.add_listener(second)
        managed.delete("admin")
        assert order == ["first", "second"]

    def test_delete_missing_raises_and_does_not_notify(self) -> None:
        listener = MagicMock()
        managed: ManagedRepository[Role] = ManagedRepository(
            InMemoryRoleRepository(), ROLE_PERMISSIONS, listeners=[listener]
        )
        with pytest.raises(RoleNotFoundError):
            managed.delete("ghost")
        listener.on_delete.assert_not_called()

    def test_delete_all(self) -> None:
        listener = MagicMock()
        managed: ManagedRepository[Role] = ManagedRepository(
            InMemoryRoleRepository([Role(uid="a"), Role(uid="b")]),
            ROLE_PERMISSIONS,
            listeners=[listener],
        )
        managed.delete_all()
        assert managed.count() == 0
        listener.on_delete_all.assert_called_once_with()

    def test_permission_denied_leaves_store_untouched(self) -> None:
        listener = MagicMock()
        repo = InMemoryRoleRepository()
        managed: ManagedRepository[Role] = ManagedRepository(
            repo, ROLE_PERMISSIONS, access=_access(), listeners=[listener]
        )
        with acting_as("guest"), pytest.raises(PermissionDeniedError) as exc_info:
            managed.save(Role(uid="admin"))
        assert exc_info.value.permission == Permission.CREATE_ROLE
        assert repo.count() == 0
        listener.on_create.assert_not_called()

    def test_update_requires_update_permission(self) -> None:
        repo = InMemoryRoleRepository([Role(uid="admin")])
        managed: ManagedRepository[Role] = ManagedRepository(
            repo, ROLE_PERMISSIONS, access=_access(), actor_getter=lambda: "toggler"
        )
        with pytest.raises(PermissionDeniedError) as exc_info:
            managed.save(Role(uid="admin", permissions={Permission.ADMIN}))
        assert exc_info.value.permission == Permission.UPDATE_ROLE

    def test_granted_actor_can_mutate(self) -> None:
        managed: ManagedRepository[Role] = ManagedRepository(
            InMemoryRoleRepository(), ROLE_PERMISSIONS, access=_access()
        )
        with acting_as("admin"):
            managed.save(Role(uid="ops2"))
        assert managed.exists("ops2")


@pytest.mark.unit
class TestFeatureManager:
    def _manager(self, *features: Feature, **kwargs: object) -> FeatureManager:
        return FeatureManager(InMemoryFeatureRepository(features), **kwargs)  # type: ignore[arg-type]

    def test_toggle_on_and_off(self) -> None:
        listener = MagicMock()
        manager = self._manager(Feature(uid="flag-A"), listeners=[listener])
        manager.toggle_on("flag-A")
        assert manager.read("flag-A").enabled is True
        manager.toggle_off("flag-A")
        assert manager.read("flag-A").enabled is False
        assert listener.mock_calls == [call.on_toggle_on("flag-A"), call.on_toggle_off("flag-A")]

    def test_toggle_missing_feature(self) -> None:
        with pytest.raises(FeatureNotFoundError):
            self._manager().toggle_on("ghost")

    def test_toggle_uses_feature_acl(self) -> None:
        acl = Acl()
        acl.grant_user(Permission.TOGGLE_FEATURE, "guest")
        manager = self._manager(
            Feature(uid="flag-A", acl=acl), Feature(uid="flag-B"), access=_access()
        )
        with acting_as("guest"):
            manager.toggle_on("flag-A")
            with pytest.raises(PermissionDeniedError):
                manager.toggle_on("flag-B")
        assert manager.read("flag-A").enabled is True
        assert manager.read("flag-B").enabled is False

    def test_create_ignores_acl_carried_by_new_feature(self) -> None:
        acl = Acl()
        acl.grant_user(Permission.CREATE_FEATURE, "guest")
        manager = self._manager(access=_access())
        with acting_as("guest"), pytest.raises(PermissionDeniedError) as exc_info:
            manager.save(Feature(uid="flag-C", acl=acl))
        assert exc_info.value.permission == Permission.CREATE_FEATURE
        assert not manager.exists("flag-C")

    def test_update_ignores_acl_carried_by_incoming_feature(self) -> None:
        acl = Acl()
        acl.grant_user(Permission.UPDATE_FEATURE, "guest")
        manager = self._manager(Feature(uid="flag-A"), access=_access())
        with acting_as("guest"), pytest.raises(PermissionDeniedError) as exc_info:
            manager.save(Feature(uid="flag-A", enabled=True, acl=acl))
        assert exc_info.value.permission == Permission.UPDATE_FEATURE
        stored = manager.read("flag-A")
        assert stored.enabled is False
        assert stored.acl.is_empty()

    def test_update_resolves_against_stored_acl(self) -> None:
        acl = Acl()
        acl.grant_user(Permission.UPDATE_FEATURE, "guest")
        manager = self._manager(Feature(uid="flag-A", acl=acl), access=_access())
        with acting_as("guest"):
            manager.save(Feature(uid="flag-A", description="revoked"))
        assert manager.read("flag-A").description == "revoked"
        with acting_as("guest"), pytest.raises(PermissionDeniedError):
            manager.save(Feature(uid="flag-A", acl=acl))

    def test_groups(self) -> None:
        manager = self._manager(
            Feature(uid="a", group="beta"),
            Feature(uid="b", group="beta"),
            Feature(uid="c", group="gamma"),
            Feature(uid="d"),
        )
        assert manager.list_groups() == {"beta", "gamma"}
        assert manager.exists_group("beta")
        assert not manager.exists_group("delta")
        assert set(manager.read_group("beta")) == {"a", "b"}

    def test_read_missing_group(self) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            self._manager(Feature(uid="a")).read_group("beta")
        assert exc_info.value.resource_type == "FeatureGroup"

    def test_toggle_group(self) -> None:
        listener = MagicMock()
        manager = self._manager(
            Feature(uid="a", group="beta"),
            Feature(uid="b", group="beta"),
            Feature(uid="c"),
            listeners=[listener],
        )
        manager.toggle_on_group("beta")
        assert manager.read("a").enabled and manager.read("b").enabled
        assert not manager.read("c").enabled
        manager.toggle_off_group("beta")
        assert not manager.read("a").enabled
        assert listener.mock_calls == [call.on_toggle_on_group("beta"), call.on_toggle_off_group("beta")]

    def test_toggle_group_checks_every_member_first(self) -> None:
        acl = Acl()
        acl.grant_user(Permission.TOGGLE_FEATURE, "guest")
        manager = self._manager(
            Feature(uid="a", group="beta", acl=acl),
            Feature(uid="b", group="beta"),
            access=_access(),
        )
        with acting_as("guest"), pytest.raises(PermissionDeniedError):
            manager.toggle_on_group("beta")
        assert not manager.read("a").enabled

    def test_add_and_remove_group(self) -> None:
        listener = MagicMock()
        manager = self._manager(Feature(uid="a"), listeners=[listener])
        manager.add_to_group("a", "beta")
        assert manager.read("a").group == "beta"
        manager.remove_from_group("a", "beta")
        assert manager.read("a").group is None
        assert listener.mock_calls == [
            call.on_add_to_group("a", "beta"),
            call.on_remove_from_group("a", "beta"),
        ]

    def test_remove_from_other_group_raises(self) -> None:
        manager = self._manager(Feature(uid="a", group="gamma"))
        with pytest.raises(NotFoundError):
            manager.remove_from_group("a", "beta")
        assert manager.read("a").group == "gamma"

    def test_is_enabled_unknown_feature(self) -> None:
        with pytest.raises(FeatureNotFoundError):
            self._manager().is_enabled("ghost")

    def test_is_enabled_auto_create(self) -> None:
        listener = MagicMock()
        manager = self._manager(auto_create=True, listeners=[listener])
        assert manager.is_enabled("fresh") is False
        assert manager.read("fresh") == Feature(uid="fresh", enabled=False)
        listener.on_create.assert_called_once()

    def test_is_enabled_with_strategies(self) -> None:
        registry = StrategyRegistry()
        registry.register("vip", lambda properties, context: context.get("user") == "alice")
        feature = Feature(uid="flag-A", enabled=True)
        feature.add_toggle_strategy("vip")
        manager = self._manager(feature, strategies=registry)

        with acting_as("alice"):
            assert manager.is_enabled("flag-A")
        assert not manager.is_enabled("flag-A", {"user": "bob"})

    def test_is_enabled_policy_override(self) -> None:
        registry = StrategyRegistry()
        registry.register("yes", lambda properties, context: True)
        registry.register("no", lambda properties, context: False)
        feature = Feature(uid="flag-A", enabled=True)
        feature.add_toggle_strategy("no")
        feature.add_toggle_strategy("yes")
        manager = self._manager(feature, strategies=registry, policy=StrategyPolicy.ANY)
        assert manager.is_enabled("flag-A")
        assert not manager.is_enabled("flag-A", policy=StrategyPolicy.FIRST)


@pytest.mark.unit
class TestPropertyManager:
    def test_update_value(self) -> None:
        listener = MagicMock()
        manager = PropertyManager(
            InMemoryPropertyRepository(
                [create_property("threshold", "10", kind="int", fixed_values=["5", "10", "15"])]
            ),
            listeners=[listener],
        )
        manager.update_value("threshold", "15")
        assert manager.read("threshold").value == 15
        listener.on_update_value.assert_called_once_with("threshold", "15")

    def test_rejected_value_changes_nothing(self) -> None:
        listener = MagicMock()
        manager = PropertyManager(
            InMemoryPropertyRepository(
                [create_property("threshold", "10", kind="int", fixed_values=["5", "10", "15"])]
            ),
            listeners=[listener],
        )
        with pytest.raises(InvalidPropertyValueError):
            manager.update_value("threshold", "7")
        assert manager.read("threshold").value == 10
        listener.on_update_value.assert_not_called()

    def test_update_missing_property(self) -> None:
        with pytest.raises(PropertyNotFoundError):
            PropertyManager(InMemoryPropertyRepository()).update_value("ghost", "1")
