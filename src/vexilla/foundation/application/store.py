"""Composition of the managed repositories into one flag store.

``FlagStore`` wires the four managed repositories to a shared access
controller and audit emitter. All collaborators are passed in explicitly;
``FlagStore.create`` builds the standard wiring from plain repositories.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from vexilla.foundation.application.access_control import AccessController
from vexilla.foundation.application.audit import (
    AuditEmitter,
    FeatureAuditListener,
    PropertyAuditListener,
    RepositoryAuditListener,
)
from vexilla.foundation.application.managed import (
    ROLE_PERMISSIONS,
    USER_PERMISSIONS,
    FeatureManager,
    ManagedRepository,
    PropertyManager,
)
from vexilla.foundation.application.strategies import StrategyPolicy, StrategyRegistry
from vexilla.foundation.domain.configuration import Configuration
from vexilla.foundation.domain.events import Scope

if TYPE_CHECKING:
    from vexilla.foundation.domain.features import Feature
    from vexilla.foundation.domain.ports import Repository
    from vexilla.foundation.domain.properties import Property
    from vexilla.foundation.domain.security import Role, User

logger = logging.getLogger(__name__)


@dataclass
class FlagStore:
    """Entry point to features, properties, roles and users.

    Attributes:
        features: Managed feature repository.
        properties: Managed property repository.
        roles: Managed role repository.
        users: Managed user repository.
        emitter: Audit emitter, None when auditing is off.
        access: Access controller, None when permissions are not enforced.
    """

    features: FeatureManager
    properties: PropertyManager
    roles: ManagedRepository[Role]
    users: ManagedRepository[User]
    emitter: AuditEmitter | None = None
    access: AccessController | None = None

    @classmethod
    def create(
        cls,
        *,
        features: Repository[Feature],
        properties: Repository[Property[Any]],
        roles: Repository[Role],
        users: Repository[User],
        emitter: AuditEmitter | None = None,
        secured: bool = False,
        auto_create: bool = False,
        strategies: StrategyRegistry | None = None,
        policy: StrategyPolicy = StrategyPolicy.ALL,
    ) -> FlagStore:
        """Wire managed repositories over the given storage.

        Args:
            features: Feature storage.
            properties: Global property storage.
            roles: Role storage.
            users: User storage.
            emitter: Audit emitter; when given, audit listeners are attached.
            secured: Enforce permissions using ``users`` and ``roles``.
            auto_create: Create unknown features on ``is_enabled``.
            strategies: Toggle strategy registry.
            policy: Default strategy combination policy.
        """
        access = AccessController(users, roles) if secured else None

        feature_manager = FeatureManager(
            features,
            strategies=strategies,
            policy=policy,
            auto_create=auto_create,
            access=access,
        )
        property_manager = PropertyManager(properties, access=access)
        role_manager: ManagedRepository[Role] = ManagedRepository(
            roles, ROLE_PERMISSIONS, access=access
        )
        user_manager: ManagedRepository[User] = ManagedRepository(
            users, USER_PERMISSIONS, access=access
        )

        if emitter is not None:
            feature_manager.add_listener(FeatureAuditListener(emitter))
            property_manager.add_listener(PropertyAuditListener(emitter))
            role_manager.add_listener(RepositoryAuditListener(emitter, Scope.ROLE))
            user_manager.add_listener(RepositoryAuditListener(emitter, Scope.USER))

        return cls(
            features=feature_manager,
            properties=property_manager,
            roles=role_manager,
            users=user_manager,
            emitter=emitter,
            access=access,
        )

    def import_configuration(self, config: Configuration) -> None:
        """Save every entity of ``config`` through the managed repositories.

        Roles and users go first so that permission checks on the following
        entities can resolve them.
        """
        for role in config.roles.values():
            self.roles.save(role)
        for user in config.users.values():
            self.users.save(user)
        for prop in config.properties.values():
            self.properties.save(prop)
        for feature in config.features.values():
            self.features.save(feature)
        logger.info(
            "configuration_imported",
            extra={
                "roles": len(config.roles),
                "users": len(config.users),
                "properties": len(config.properties),
                "features": len(config.features),
            },
        )

    def to_configuration(
        self, *, audit: bool | None = None, auto_create: bool | None = None
    ) -> Configuration:
        """Assemble a Configuration from the current repository contents.

        ``audit`` and ``auto_create`` default to how the store is wired.
        """
        config = Configuration(
            audit=self.emitter is not None if audit is None else audit,
            auto_create=self.features.auto_create if auto_create is None else auto_create,
        )
        for role in self.roles.find_all():
            config.add_role(role)
        for user in self.users.find_all():
            config.add_user(user)
        for prop in self.properties.find_all():
            config.add_property(prop)
        for feature in self.features.find_all():
            config.add_feature(feature)
        return config
