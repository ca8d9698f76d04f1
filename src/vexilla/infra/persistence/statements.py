"""Parameterized statements for the seven repository operations.

Statements are SQLAlchemy Core constructs: every value is sent as a bound
parameter, never interpolated into SQL text. Only the id column is
addressed by name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Delete, Insert, Select, Update, delete, func, insert, select, update

from vexilla.infra.persistence.schema import UID_COLUMN

if TYPE_CHECKING:
    from sqlalchemy import Table


class StatementBuilder:
    """Builds statements against one table keyed by ``id_column``.

    Args:
        table: Target table.
        id_column: Name of the identifier column.
    """

    def __init__(self, table: Table, id_column: str = UID_COLUMN) -> None:
        self._table = table
        self._id = table.c[id_column]

    @property
    def table(self) -> Table:
        return self._table

    def exists(self, uid: str) -> Select[Any]:
        """Count of rows with this id (0 or 1)."""
        return select(func.count()).select_from(self._table).where(self._id == uid)

    def count(self) -> Select[Any]:
        return select(func.count()).select_from(self._table)

    def select_by_id(self, uid: str) -> Select[Any]:
        return select(self._table).where(self._id == uid)

    def select_all(self) -> Select[Any]:
        return select(self._table).order_by(self._id)

    def select_all_ids(self) -> Select[Any]:
        return select(self._id).order_by(self._id)

    def insert(self, row: dict[str, Any]) -> Insert:
        return insert(self._table).values(**row)

    def delete_by_id(self, uid: str) -> Delete:
        return delete(self._table).where(self._id == uid)

    def delete_all(self) -> Delete:
        return delete(self._table)

    def update_by_id(self, uid: str, values: dict[str, Any]) -> Update:
        return update(self._table).where(self._id == uid).values(**values)
