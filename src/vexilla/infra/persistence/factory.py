"""Flag store wiring over the SQL and in-memory backends."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vexilla.foundation.application.audit import AuditEmitter, InMemoryAuditTrail
from vexilla.foundation.application.store import FlagStore
from vexilla.foundation.application.strategies import StrategyPolicy
from vexilla.foundation.domain.configuration import Configuration
from vexilla.infra.persistence.memory import (
    InMemoryFeatureRepository,
    InMemoryPropertyRepository,
    InMemoryRoleRepository,
    InMemoryUserRepository,
)
from vexilla.infra.persistence.schema import FlagTables, build_tables
from vexilla.infra.persistence.sql_repositories import (
    SqlFeatureRepository,
    SqlPropertyRepository,
    SqlRoleRepository,
    SqlUserRepository,
)

if TYPE_CHECKING:
    from vexilla.foundation.application.strategies import StrategyRegistry
    from vexilla.infra.persistence.database import DatabaseManager

logger = logging.getLogger(__name__)


def create_sql_store(
    manager: DatabaseManager,
    *,
    tables: FlagTables | None = None,
    emitter: AuditEmitter | None = None,
    secured: bool = False,
    auto_create: bool = False,
    strategies: StrategyRegistry | None = None,
    policy: StrategyPolicy = StrategyPolicy.ALL,
) -> FlagStore:
    """Build a FlagStore over the SQL backend of ``manager``.

    Tables are named after ``manager.settings.table_prefix`` unless given,
    and created when ``manager.settings.create_schema`` is set.

    Args:
        manager: Database manager providing engine and sessions.
        tables: Table definitions to use instead of the prefixed defaults.
        emitter: Audit emitter; None disables auditing.
        secured: Enforce permissions.
        auto_create: Create unknown features on ``is_enabled``.
        strategies: Toggle strategy registry.
        policy: Default strategy combination policy.
    """
    settings = manager.settings
    tables = tables or build_tables(settings.table_prefix)
    if settings.create_schema:
        tables.create_all(manager.get_engine())

    session_factory = manager.get_session_factory()
    store = FlagStore.create(
        features=SqlFeatureRepository(session_factory, tables.feature),
        properties=SqlPropertyRepository(session_factory, tables.property),
        roles=SqlRoleRepository(session_factory, tables.role),
        users=SqlUserRepository(session_factory, tables.user),
        emitter=emitter,
        secured=secured,
        auto_create=auto_create,
        strategies=strategies,
        policy=policy,
    )
    logger.info(
        "sql_store_created",
        extra={"table_prefix": settings.table_prefix, "secured": secured},
    )
    return store


def create_in_memory_store(
    config: Configuration | None = None,
    *,
    emitter: AuditEmitter | None = None,
    secured: bool = False,
    strategies: StrategyRegistry | None = None,
    policy: StrategyPolicy = StrategyPolicy.ALL,
) -> FlagStore:
    """Build a FlagStore over dict-backed repositories.

    The configuration is loaded straight into the repositories, so loading
    emits no audit events. When the configuration has ``audit`` set and no
    emitter is given, events go to an in-memory trail.
    """
    config = config or Configuration()
    if emitter is None and config.audit:
        emitter = AuditEmitter(InMemoryAuditTrail())

    return FlagStore.create(
        features=InMemoryFeatureRepository(config.features.values()),
        properties=InMemoryPropertyRepository(config.properties.values()),
        roles=InMemoryRoleRepository(config.roles.values()),
        users=InMemoryUserRepository(config.users.values()),
        emitter=emitter,
        secured=secured,
        auto_create=config.auto_create,
        strategies=strategies,
        policy=policy,
    )
