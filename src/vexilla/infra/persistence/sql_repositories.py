"""SQL repositories for features, properties, roles and users.

Sync repositories over SQLAlchemy Core. A session is opened per operation
and closed on every exit path; uncommitted work is rolled back on close.
``save`` replaces a row by deleting then inserting it inside a single
transaction, so readers never observe the entity missing.

Usage:
    from vexilla.infra.persistence import DatabaseManager, DatabaseSettings
    from vexilla.infra.persistence import SqlFeatureRepository, build_tables

    manager = DatabaseManager(DatabaseSettings(url="sqlite:///flags.db"))
    tables = build_tables()
    features = SqlFeatureRepository(manager.get_session_factory(), tables.feature)
    features.create_schema()
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from vexilla.foundation.domain.exceptions import (
    FeatureNotFoundError,
    NotFoundError,
    PersistenceError,
    PropertyNotFoundError,
    RoleNotFoundError,
    UserNotFoundError,
)
from vexilla.foundation.domain.features import Feature
from vexilla.foundation.domain.properties import Property
from vexilla.foundation.domain.security import Role, User
from vexilla.infra.persistence import mappers
from vexilla.infra.persistence.statements import StatementBuilder

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    from sqlalchemy import Table
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

E = TypeVar("E")


class SqlRepository(ABC, Generic[E]):
    """Repository contract over one flag table.

    Args:
        session_factory: Callable returning a SQLAlchemy Session context manager.
        table: Table holding the entities, keyed by ``uid``.
    """

    not_found_error: ClassVar[type[NotFoundError]] = NotFoundError

    def __init__(self, session_factory: Callable[[], Session], table: Table) -> None:
        self._session_factory = session_factory
        self._table = table
        self._statements = StatementBuilder(table)

    @property
    def table(self) -> Table:
        return self._table

    @abstractmethod
    def to_row(self, entity: E) -> dict[str, Any]:
        """Column values for ``entity``."""

    @abstractmethod
    def from_row(self, row: Mapping[str, Any]) -> E:
        """Entity rebuilt from a table row."""

    def _not_found(self, uid: str) -> NotFoundError:
        if self.not_found_error is NotFoundError:
            return NotFoundError(self._table.name, uid)
        return self.not_found_error(uid)  # type: ignore[call-arg]

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        """Open a session, mapping backend failures to PersistenceError."""
        try:
            with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error(
                "persistence_failed",
                extra={"operation": operation, "table": self._table.name, "error": str(exc)},
            )
            raise PersistenceError(operation, str(exc), table=self._table.name) from exc

    # -- Schema --

    def create_schema(self) -> None:
        """Create the table if it does not exist."""
        with self._session("create_schema") as session:
            self._table.create(session.connection(), checkfirst=True)
            session.commit()

    # -- Reads --

    def exists(self, uid: str) -> bool:
        with self._session("exists") as session:
            return bool(session.execute(self._statements.exists(uid)).scalar())

    def find(self, uid: str) -> E | None:
        with self._session("find") as session:
            row = session.execute(self._statements.select_by_id(uid)).mappings().fetchone()
        return None if row is None else self.from_row(row)

    def read(self, uid: str) -> E:
        entity = self.find(uid)
        if entity is None:
            raise self._not_found(uid)
        return entity

    def find_all(self) -> Iterator[E]:
        with self._session("find_all") as session:
            rows = session.execute(self._statements.select_all()).mappings().fetchall()
        return (self.from_row(row) for row in rows)

    def find_all_ids(self) -> Iterator[str]:
        with self._session("find_all_ids") as session:
            ids = session.execute(self._statements.select_all_ids()).scalars().all()
        return iter(ids)

    def count(self) -> int:
        with self._session("count") as session:
            return int(session.execute(self._statements.count()).scalar() or 0)

    # -- Writes --

    def save(self, entity: E) -> None:
        """Insert or replace ``entity`` in one transaction."""
        row = self.to_row(entity)
        with self._session("save") as session:
            session.execute(self._statements.delete_by_id(row["uid"]))
            session.execute(self._statements.insert(row))
            session.commit()
        logger.debug("entity_saved", extra={"table": self._table.name, "uid": row["uid"]})

    def delete(self, uid: str) -> None:
        """Delete by uid.

        Raises:
            NotFoundError: Entity specific subtype when no row matched.
        """
        with self._session("delete") as session:
            result = session.execute(self._statements.delete_by_id(uid))
            row_count: int = getattr(result, "rowcount", 0)
            if row_count == 0:
                session.rollback()
                raise self._not_found(uid)
            session.commit()

    def delete_all(self) -> None:
        with self._session("delete_all") as session:
            session.execute(self._statements.delete_all())
            session.commit()


class SqlFeatureRepository(SqlRepository[Feature]):
    """Features, with local properties, strategies and ACL in JSON columns."""

    not_found_error = FeatureNotFoundError

    def to_row(self, entity: Feature) -> dict[str, Any]:
        return mappers.feature_to_row(entity)

    def from_row(self, row: Mapping[str, Any]) -> Feature:
        return mappers.feature_from_row(row)


class SqlPropertyRepository(SqlRepository["Property[Any]"]):
    """Global properties, stored with their canonical kind and string value."""

    not_found_error = PropertyNotFoundError

    def to_row(self, entity: Property[Any]) -> dict[str, Any]:
        return mappers.property_to_row(entity)

    def from_row(self, row: Mapping[str, Any]) -> Property[Any]:
        return mappers.property_from_row(row)

    def update_value(self, uid: str, raw: str) -> None:
        """Validate ``raw`` against the stored property then persist it.

        Raises:
            PropertyNotFoundError: If the property does not exist.
            InvalidPropertyValueError: If the value is rejected; nothing changes.
        """
        prop = self.read(uid)
        prop.from_string(raw)
        with self._session("update_value") as session:
            session.execute(self._statements.update_by_id(uid, {"value": prop.as_string()}))
            session.commit()


class SqlRoleRepository(SqlRepository[Role]):
    not_found_error = RoleNotFoundError

    def to_row(self, entity: Role) -> dict[str, Any]:
        return mappers.role_to_row(entity)

    def from_row(self, row: Mapping[str, Any]) -> Role:
        return mappers.role_from_row(row)


class SqlUserRepository(SqlRepository[User]):
    not_found_error = UserNotFoundError

    def to_row(self, entity: User) -> dict[str, Any]:
        return mappers.user_to_row(entity)

    def from_row(self, row: Mapping[str, Any]) -> User:
        return mappers.user_from_row(row)
