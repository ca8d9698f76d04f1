"""Dict-backed repositories.

Entities are deep-copied on the way in and out, so callers never share
mutable state with the store (the same behavior a SQL round trip gives).
"""

from __future__ import annotations

import copy
import threading
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from vexilla.foundation.domain.exceptions import (
    FeatureNotFoundError,
    NotFoundError,
    PropertyNotFoundError,
    RoleNotFoundError,
    UserNotFoundError,
)
from vexilla.foundation.domain.features import Feature
from vexilla.foundation.domain.properties import Property
from vexilla.foundation.domain.security import Role, User

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

E = TypeVar("E")


class InMemoryRepository(Generic[E]):
    """Repository contract over a dict keyed by uid.

    Args:
        entities: Initial content.
    """

    resource_type: ClassVar[str] = "Entity"
    not_found_error: ClassVar[type[NotFoundError] | None] = None

    def __init__(self, entities: Iterable[E] = ()) -> None:
        self._lock = threading.Lock()
        self._entities: dict[str, E] = {}
        for entity in entities:
            self.save(entity)

    def _not_found(self, uid: str) -> NotFoundError:
        if self.not_found_error is None:
            return NotFoundError(self.resource_type, uid)
        return self.not_found_error(uid)  # type: ignore[call-arg]

    def exists(self, uid: str) -> bool:
        return uid in self._entities

    def find(self, uid: str) -> E | None:
        entity = self._entities.get(uid)
        return None if entity is None else copy.deepcopy(entity)

    def read(self, uid: str) -> E:
        entity = self.find(uid)
        if entity is None:
            raise self._not_found(uid)
        return entity

    def find_all(self) -> Iterator[E]:
        with self._lock:
            snapshot = list(self._entities.values())
        return (copy.deepcopy(entity) for entity in snapshot)

    def find_all_ids(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._entities))

    def save(self, entity: E) -> None:
        uid = str(entity.uid)  # type: ignore[attr-defined]
        with self._lock:
            self._entities[uid] = copy.deepcopy(entity)

    def count(self) -> int:
        return len(self._entities)

    def delete(self, uid: str) -> None:
        with self._lock:
            if uid not in self._entities:
                raise self._not_found(uid)
            del self._entities[uid]

    def delete_all(self) -> None:
        with self._lock:
            self._entities.clear()


class InMemoryFeatureRepository(InMemoryRepository[Feature]):
    not_found_error = FeatureNotFoundError


class InMemoryPropertyRepository(InMemoryRepository["Property[Any]"]):
    not_found_error = PropertyNotFoundError

    def update_value(self, uid: str, raw: str) -> None:
        """Validate and store a new value given in string form."""
        prop = self.read(uid)
        prop.from_string(raw)
        self.save(prop)


class InMemoryRoleRepository(InMemoryRepository[Role]):
    not_found_error = RoleNotFoundError


class InMemoryUserRepository(InMemoryRepository[User]):
    not_found_error = UserNotFoundError
