"""Root aggregate of a feature-flag configuration.

Built by the codec or assembled from repositories; it has no persistence
of its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from vexilla.foundation.domain.features import Feature
from vexilla.foundation.domain.properties import Property
from vexilla.foundation.domain.security import Role, User


@dataclass
class Configuration:
    """In-memory feature-flag configuration, compared by value.

    Attributes:
        audit: Whether mutations should be audited.
        auto_create: Whether unknown features are created on first check.
        roles: Roles keyed by uid.
        users: Users keyed by uid.
        properties: Global properties keyed by uid.
        features: Features keyed by uid.
    """

    audit: bool = False
    auto_create: bool = False
    roles: dict[str, Role] = field(default_factory=dict)
    users: dict[str, User] = field(default_factory=dict)
    properties: dict[str, Property[Any]] = field(default_factory=dict)
    features: dict[str, Feature] = field(default_factory=dict)

    def add_role(self, role: Role) -> None:
        self.roles[role.uid] = role

    def add_user(self, user: User) -> None:
        self.users[user.uid] = user

    def add_property(self, prop: Property[Any]) -> None:
        self.properties[prop.uid] = prop

    def add_feature(self, feature: Feature) -> None:
        self.features[feature.uid] = feature
