"""Audit sinks writing events to the log stream or to the audit table."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from vexilla.foundation.domain.events import Action, Event, Scope
from vexilla.foundation.domain.exceptions import PersistenceError
from vexilla.infra.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from sqlalchemy import Table
    from sqlalchemy.orm import Session


class LoggingAuditSink:
    """Writes each event as one structured ``audit_event`` log entry."""

    def __init__(self, logger_name: str = "vexilla.audit") -> None:
        self._logger = get_logger(logger_name)

    def append(self, event: Event) -> None:
        self._logger.info("audit_event", **event.to_dict())


class SqlAuditTrail:
    """Audit events persisted in the audit table, one row per event.

    Args:
        session_factory: Callable returning a SQLAlchemy Session context manager.
        table: Audit table (see ``build_tables``).
    """

    def __init__(self, session_factory: Callable[[], Session], table: Table) -> None:
        self._session_factory = session_factory
        self._table = table

    def append(self, event: Event) -> None:
        try:
            with self._session_factory() as session:
                session.execute(
                    self._table.insert().values(
                        uid=event.uid,
                        action=event.action.value,
                        scope=event.scope.value,
                        entity_ref=event.entity_ref,
                        actor=event.actor,
                        value=event.value,
                        timestamp=event.timestamp,
                    )
                )
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError("audit_append", str(exc), table=self._table.name) from exc

    def find_all(self, entity_ref: str | None = None) -> list[Event]:
        """Stored events in timestamp order, optionally for one entity."""
        statement = select(self._table).order_by(self._table.c.timestamp)
        if entity_ref is not None:
            statement = statement.where(self._table.c.entity_ref == entity_ref)
        try:
            with self._session_factory() as session:
                rows = session.execute(statement).mappings().fetchall()
        except SQLAlchemyError as exc:
            raise PersistenceError("audit_find_all", str(exc), table=self._table.name) from exc
        return [_event_from_row(row) for row in rows]


def _event_from_row(row: Mapping[str, Any]) -> Event:
    return Event(
        uid=row["uid"],
        action=Action(row["action"]),
        scope=Scope(row["scope"]),
        entity_ref=row["entity_ref"],
        actor=row["actor"],
        value=row["value"],
        timestamp=row["timestamp"],
    )
