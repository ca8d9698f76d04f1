"""Shared fixtures for vexilla tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from vexilla.foundation.domain.configuration import Configuration
from vexilla.foundation.domain.features import Feature
from vexilla.foundation.domain.permissions import Permission
from vexilla.foundation.domain.properties import create_property
from vexilla.foundation.domain.security import Acl, Role, User
from vexilla.infra.persistence.database import DatabaseManager, DatabaseSettings
from vexilla.infra.persistence.schema import FlagTables, build_tables

if TYPE_CHECKING:
    from collections.abc import Iterator

FLAG_A_YAML = """\
vexilla:
  audit: true
  autocreate: false
  roles:
    - name: admin
      permissions: [ADMIN, TOGGLE_FEATURE]
  users:
    - uid: alice
      firstname: Alice
      roles: [admin]
  properties:
    - name: maxConnections
      type: int
      value: 20
  features:
    - uid: flag-A
      enable: true
      description: First flag
      groupName: beta
      properties:
        - name: threshold
          type: int
          value: "10"
          fixedValues: [5, 10, 15]
"""


@pytest.fixture()
def flag_a_yaml() -> str:
    return FLAG_A_YAML


@pytest.fixture()
def sample_configuration() -> Configuration:
    """Configuration exercising every section of the document format."""
    config = Configuration(audit=True, auto_create=False)
    config.add_role(Role(uid="admin", permissions={Permission.ADMIN, Permission.TOGGLE_FEATURE}))
    config.add_role(Role(uid="reader", permissions={Permission.READ_FEATURES}))
    config.add_user(
        User(
            uid="alice",
            first_name="Alice",
            last_name="Martin",
            description="Operator",
            roles={"admin"},
        )
    )
    config.add_user(User(uid="bob", permissions={Permission.READ_PROPERTIES}))
    config.add_property(create_property("maxConnections", "20", kind="int"))
    config.add_property(
        create_property("level", "INFO", kind="loglevel", fixed_values=["INFO", "DEBUG"])
    )

    feature = Feature(uid="flag-A", enabled=True, description="First flag", group="beta")
    feature.add_property(create_property("threshold", "10", kind="int", fixed_values=["5", "10", "15"]))
    feature.add_toggle_strategy("percentage", [create_property("weight", "50", kind="int")])
    acl = Acl()
    acl.grant_role(Permission.TOGGLE_FEATURE, "reader")
    acl.grant_user(Permission.UPDATE_FEATURE, "bob")
    feature.acl = acl
    config.add_feature(feature)
    config.add_feature(Feature(uid="flag-B"))
    return config


@pytest.fixture()
def sqlite_manager() -> Iterator[DatabaseManager]:
    """DatabaseManager over a private in-memory SQLite database."""
    manager = DatabaseManager(DatabaseSettings(url="sqlite:///:memory:"))
    yield manager
    manager.dispose()


@pytest.fixture()
def flag_tables(sqlite_manager: DatabaseManager) -> FlagTables:
    tables = build_tables("test_")
    tables.create_all(sqlite_manager.get_engine())
    return tables
