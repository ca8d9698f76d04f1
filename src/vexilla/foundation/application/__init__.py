"""Vexilla Foundation Application -- access control, audit and managed stores."""

from vexilla.foundation.application.access_control import AccessController, is_granted
from vexilla.foundation.application.audit import (
    AuditEmitter,
    FeatureAuditListener,
    InMemoryAuditTrail,
    PropertyAuditListener,
    RepositoryAuditListener,
)
from vexilla.foundation.application.context import acting_as, get_current_actor
from vexilla.foundation.application.managed import (
    FEATURE_PERMISSIONS,
    PROPERTY_PERMISSIONS,
    ROLE_PERMISSIONS,
    USER_PERMISSIONS,
    FeatureManager,
    ManagedRepository,
    OperationPermissions,
    PropertyManager,
)
from vexilla.foundation.application.store import FlagStore
from vexilla.foundation.application.strategies import (
    StrategyEvaluator,
    StrategyPolicy,
    StrategyRegistry,
    default_strategy_registry,
)

__all__ = [
    "FEATURE_PERMISSIONS",
    "PROPERTY_PERMISSIONS",
    "ROLE_PERMISSIONS",
    "USER_PERMISSIONS",
    "AccessController",
    "AuditEmitter",
    "FeatureAuditListener",
    "FeatureManager",
    "FlagStore",
    "InMemoryAuditTrail",
    "ManagedRepository",
    "OperationPermissions",
    "PropertyAuditListener",
    "PropertyManager",
    "RepositoryAuditListener",
    "StrategyEvaluator",
    "StrategyPolicy",
    "StrategyRegistry",
    "acting_as",
    "default_strategy_registry",
    "get_current_actor",
    "is_granted",
]
