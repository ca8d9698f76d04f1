"""Audit events emitted after successful mutations.

Events are immutable once created (frozen dataclass). The core only ever
appends them to an audit sink; it never mutates or deletes them.

Example:
    >>> event = Event(action=Action.CREATE, scope=Scope.ROLE, entity_ref="admin")
    >>> event.to_dict()["action"]
    'CREATE'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from uuid import uuid4


class Action(StrEnum):
    """Kind of mutation recorded by an event."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    DELETE_ALL = "DELETE_ALL"
    TOGGLE_ON = "TOGGLE_ON"
    TOGGLE_OFF = "TOGGLE_OFF"
    ADD_TO_GROUP = "ADD_TO_GROUP"
    REMOVE_FROM_GROUP = "REMOVE_FROM_GROUP"
    UPDATE_VALUE = "UPDATE_VALUE"


class Scope(StrEnum):
    """Entity family the mutated entity belongs to."""

    FEATURE = "FEATURE"
    FEATURE_GROUP = "FEATURE_GROUP"
    PROPERTY = "PROPERTY"
    ROLE = "ROLE"
    USER = "USER"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, kw_only=True)
class Event:
    """Immutable audit record of a mutating action.

    Attributes:
        action: What happened.
        scope: Which entity family it happened to.
        entity_ref: Uid of the mutated entity (group name for group toggles).
        timestamp: UTC time of emission.
        uid: Unique event identifier.
        actor: Acting user uid, when one was bound.
        value: Extra detail (e.g., group name, new property value).
    """

    action: Action
    scope: Scope
    entity_ref: str
    timestamp: datetime = field(default_factory=_utcnow)
    uid: str = field(default_factory=lambda: str(uuid4()))
    actor: str | None = None
    value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the event to a JSON compatible dictionary."""
        return {
            "uid": self.uid,
            "action": self.action.value,
            "scope": self.scope.value,
            "entity_ref": self.entity_ref,
            "timestamp": self.timestamp.isoformat(),
            "actor": self.actor,
            "value": self.value,
        }
