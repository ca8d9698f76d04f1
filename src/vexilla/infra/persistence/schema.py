"""Table definitions of the SQL backend.

One table per entity family, keyed by ``uid``. Nested feature parts
(local properties, toggle strategies, ACL) are stored as JSON documents in
the feature row, so a feature is always written and read as one row.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Engine,
    MetaData,
    String,
    Table,
    Text,
)

UID_COLUMN = "uid"


@dataclass(frozen=True)
class FlagTables:
    """The tables of one flag schema, sharing a MetaData."""

    metadata: MetaData
    property: Table
    feature: Table
    role: Table
    user: Table
    audit: Table

    def create_all(self, engine: Engine) -> None:
        """Create missing tables (existing ones are left untouched)."""
        self.metadata.create_all(engine, checkfirst=True)

    def drop_all(self, engine: Engine) -> None:
        self.metadata.drop_all(engine, checkfirst=True)


def build_tables(prefix: str = "vx_") -> FlagTables:
    """Define the flag tables with names ``{prefix}{entity}``."""
    metadata = MetaData()
    return FlagTables(
        metadata=metadata,
        property=Table(
            f"{prefix}property",
            metadata,
            Column(UID_COLUMN, String(100), primary_key=True),
            Column("kind", String(100), nullable=False),
            Column("value", Text, nullable=False),
            Column("description", Text, nullable=True),
            Column("fixed_values", JSON, nullable=True),
        ),
        feature=Table(
            f"{prefix}feature",
            metadata,
            Column(UID_COLUMN, String(100), primary_key=True),
            Column("enabled", Boolean, nullable=False, default=False),
            Column("description", Text, nullable=True),
            Column("group_name", String(100), nullable=True, index=True),
            Column("properties", JSON, nullable=False),
            Column("strategies", JSON, nullable=False),
            Column("acl", JSON, nullable=False),
        ),
        role=Table(
            f"{prefix}role",
            metadata,
            Column(UID_COLUMN, String(100), primary_key=True),
            Column("permissions", JSON, nullable=False),
        ),
        user=Table(
            f"{prefix}user",
            metadata,
            Column(UID_COLUMN, String(100), primary_key=True),
            Column("first_name", String(100), nullable=True),
            Column("last_name", String(100), nullable=True),
            Column("description", Text, nullable=True),
            Column("roles", JSON, nullable=False),
            Column("permissions", JSON, nullable=False),
        ),
        audit=Table(
            f"{prefix}audit",
            metadata,
            Column(UID_COLUMN, String(36), primary_key=True),
            Column("action", String(30), nullable=False),
            Column("scope", String(30), nullable=False),
            Column("entity_ref", String(100), nullable=False, index=True),
            Column("actor", String(100), nullable=True),
            Column("value", Text, nullable=True),
            Column("timestamp", DateTime(timezone=True), nullable=False),
        ),
    )
