"""Port interfaces for entity storage and mutation listeners.

``Repository`` is the storage-agnostic CRUD contract every backend (SQL,
in-memory, ...) satisfies. Listeners are notified synchronously, in
registration order, after a mutation has succeeded.

Example:
    >>> from vexilla.foundation.domain.ports import Repository
    >>> def feature_count(repo: Repository[Feature]) -> int:
    ...     return repo.count()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

E = TypeVar("E")
E_contra = TypeVar("E_contra", contravariant=True)


@runtime_checkable
class Repository(Protocol[E]):
    """CRUD contract over entities identified by a string uid.

    ``find_all`` and ``find_all_ids`` return finite iterators that can be
    consumed once; order is backend specific. ``save`` is an upsert: an
    existing entity with the same uid is replaced.
    """

    def exists(self, uid: str) -> bool:
        """Check whether an entity with this uid is stored."""
        ...

    def find(self, uid: str) -> E | None:
        """Return the entity, or None if absent."""
        ...

    def read(self, uid: str) -> E:
        """Return the entity.

        Raises:
            NotFoundError: If absent (entity specific subtype).
        """
        ...

    def find_all(self) -> Iterator[E]:
        """Iterate over every stored entity."""
        ...

    def find_all_ids(self) -> Iterator[str]:
        """Iterate over every stored uid."""
        ...

    def save(self, entity: E) -> None:
        """Insert or replace the entity."""
        ...

    def count(self) -> int:
        """Number of stored entities."""
        ...

    def delete(self, uid: str) -> None:
        """Remove the entity.

        Raises:
            NotFoundError: If absent (entity specific subtype).
        """
        ...

    def delete_all(self) -> None:
        """Remove every entity."""
        ...


class RepositoryListener(Protocol[E_contra]):
    """Observer of successful repository mutations."""

    def on_create(self, entity: E_contra) -> None: ...

    def on_update(self, entity: E_contra) -> None: ...

    def on_delete(self, uid: str) -> None: ...

    def on_delete_all(self) -> None: ...


class FeatureRepositoryListener(RepositoryListener[E_contra], Protocol[E_contra]):
    """Observer of feature mutations, including toggles and group changes."""

    def on_toggle_on(self, uid: str) -> None: ...

    def on_toggle_off(self, uid: str) -> None: ...

    def on_toggle_on_group(self, group: str) -> None: ...

    def on_toggle_off_group(self, group: str) -> None: ...

    def on_add_to_group(self, uid: str, group: str) -> None: ...

    def on_remove_from_group(self, uid: str, group: str) -> None: ...


class PropertyRepositoryListener(RepositoryListener[E_contra], Protocol[E_contra]):
    """Observer of property mutations, including in-place value updates."""

    def on_update_value(self, uid: str, value: str) -> None: ...
