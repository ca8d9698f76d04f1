"""Vexilla Foundation Domain -- pure Python feature-flag model.

This package provides the domain building blocks of the flag system:
exceptions, permissions, typed properties and their kind registry,
features and toggle strategy bindings, users/roles/ACLs, the configuration
aggregate, audit events and port interfaces.
"""

from vexilla.foundation.domain.configuration import Configuration
from vexilla.foundation.domain.events import Action, Event, Scope
from vexilla.foundation.domain.exceptions import (
    AuditDeliveryError,
    DomainError,
    FeatureNotFoundError,
    InvalidPropertyValueError,
    NotFoundError,
    ParseError,
    PermissionDeniedError,
    PersistenceError,
    PropertyNotFoundError,
    PropertyTypeError,
    RoleNotFoundError,
    UnknownStrategyError,
    UserNotFoundError,
)
from vexilla.foundation.domain.features import Feature, ToggleStrategy
from vexilla.foundation.domain.permissions import Permission
from vexilla.foundation.domain.ports import (
    AuditSinkPort,
    FeatureRepositoryListener,
    PropertyRepositoryListener,
    Repository,
    RepositoryListener,
)
from vexilla.foundation.domain.properties import (
    BigIntegerProperty,
    BooleanProperty,
    ByteProperty,
    DateProperty,
    DateTimeProperty,
    DecimalProperty,
    DoubleProperty,
    FloatProperty,
    IntegerProperty,
    ListProperty,
    LogLevel,
    LogLevelProperty,
    LongProperty,
    Property,
    ShortProperty,
    StringProperty,
    create_property,
    kind_of,
    register_property_kind,
    resolve_kind,
)
from vexilla.foundation.domain.security import Acl, Grantees, Role, User

__all__ = [
    "Acl",
    "Action",
    "AuditDeliveryError",
    "AuditSinkPort",
    "BigIntegerProperty",
    "BooleanProperty",
    "ByteProperty",
    "Configuration",
    "DateProperty",
    "DateTimeProperty",
    "DecimalProperty",
    "DomainError",
    "DoubleProperty",
    "Event",
    "Feature",
    "FeatureNotFoundError",
    "FeatureRepositoryListener",
    "FloatProperty",
    "Grantees",
    "IntegerProperty",
    "InvalidPropertyValueError",
    "ListProperty",
    "LogLevel",
    "LogLevelProperty",
    "LongProperty",
    "NotFoundError",
    "ParseError",
    "Permission",
    "PermissionDeniedError",
    "PersistenceError",
    "Property",
    "PropertyNotFoundError",
    "PropertyRepositoryListener",
    "PropertyTypeError",
    "Repository",
    "RepositoryListener",
    "Role",
    "RoleNotFoundError",
    "Scope",
    "ShortProperty",
    "StringProperty",
    "ToggleStrategy",
    "UnknownStrategyError",
    "User",
    "UserNotFoundError",
    "create_property",
    "kind_of",
    "register_property_kind",
    "resolve_kind",
]
