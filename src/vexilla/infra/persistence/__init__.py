"""Vexilla Infra Persistence -- SQL and in-memory repositories."""

from vexilla.infra.persistence.database import DatabaseManager, DatabaseSettings
from vexilla.infra.persistence.factory import create_in_memory_store, create_sql_store
from vexilla.infra.persistence.memory import (
    InMemoryFeatureRepository,
    InMemoryPropertyRepository,
    InMemoryRepository,
    InMemoryRoleRepository,
    InMemoryUserRepository,
)
from vexilla.infra.persistence.schema import FlagTables, build_tables
from vexilla.infra.persistence.sql_repositories import (
    SqlFeatureRepository,
    SqlPropertyRepository,
    SqlRepository,
    SqlRoleRepository,
    SqlUserRepository,
)
from vexilla.infra.persistence.statements import StatementBuilder

__all__ = [
    "DatabaseManager",
    "DatabaseSettings",
    "FlagTables",
    "InMemoryFeatureRepository",
    "InMemoryPropertyRepository",
    "InMemoryRepository",
    "InMemoryRoleRepository",
    "InMemoryUserRepository",
    "SqlFeatureRepository",
    "SqlPropertyRepository",
    "SqlRepository",
    "SqlRoleRepository",
    "SqlUserRepository",
    "StatementBuilder",
    "build_tables",
    "create_in_memory_store",
    "create_sql_store",
]
