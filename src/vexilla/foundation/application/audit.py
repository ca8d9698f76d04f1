"""Audit emission for repository mutations.

``AuditEmitter`` forwards events to a sink. Delivery is best effort by
default: a failing sink is logged and the mutation stands. With
``strict=True`` a failure surfaces as ``AuditDeliveryError`` instead, still
without undoing the mutation.

The audit listeners adapt repository callbacks into events, one event per
successful mutation.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from vexilla.foundation.application.context import get_current_actor
from vexilla.foundation.domain.events import Action, Event, Scope
from vexilla.foundation.domain.exceptions import AuditDeliveryError

if TYPE_CHECKING:
    from collections.abc import Callable

    from vexilla.foundation.domain.ports import AuditSinkPort

logger = logging.getLogger(__name__)


class InMemoryAuditTrail:
    """Audit sink keeping events in memory, in emission order."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._lock = threading.Lock()

    def append(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    def find_all(self) -> list[Event]:
        with self._lock:
            return list(self._events)

    def count(self) -> int:
        with self._lock:
            return len(self._events)


class AuditEmitter:
    """Delivers audit events to a sink after mutations succeed.

    Args:
        sink: Destination for events.
        strict: Raise ``AuditDeliveryError`` when the sink fails instead of
            only logging the failure.
        actor_getter: Returns the acting user stamped on events. Defaults to
            the actor context.
    """

    def __init__(
        self,
        sink: AuditSinkPort,
        *,
        strict: bool = False,
        actor_getter: Callable[[], str | None] = get_current_actor,
    ) -> None:
        self._sink = sink
        self._strict = strict
        self._actor_getter = actor_getter

    @property
    def sink(self) -> AuditSinkPort:
        return self._sink

    def emit(
        self,
        action: Action,
        scope: Scope,
        entity_ref: str,
        value: str | None = None,
    ) -> Event:
        """Build an event and append it to the sink.

        Returns:
            The emitted event.

        Raises:
            AuditDeliveryError: If the sink fails and the emitter is strict.
        """
        event = Event(
            action=action,
            scope=scope,
            entity_ref=entity_ref,
            actor=self._actor_getter(),
            value=value,
        )
        try:
            self._sink.append(event)
        except Exception as exc:
            logger.warning(
                "audit_delivery_failed",
                extra={
                    "event_uid": event.uid,
                    "action": event.action.value,
                    "scope": event.scope.value,
                    "entity_ref": entity_ref,
                    "error": repr(exc),
                },
            )
            if self._strict:
                raise AuditDeliveryError(
                    f"Audit sink rejected event {event.uid}",
                    context={"action": event.action.value, "entity_ref": entity_ref},
                ) from exc
        return event


class RepositoryAuditListener:
    """Turns generic repository callbacks into audit events for one scope.

    Args:
        emitter: Emitter receiving the events.
        scope: Scope stamped on every event.
        uid_getter: Extracts the uid from an entity.
    """

    def __init__(
        self,
        emitter: AuditEmitter,
        scope: Scope,
        uid_getter: Callable[[Any], str] = lambda entity: entity.uid,
    ) -> None:
        self._emitter = emitter
        self._scope = scope
        self._uid_getter = uid_getter

    def on_create(self, entity: Any) -> None:
        self._emitter.emit(Action.CREATE, self._scope, self._uid_getter(entity))

    def on_update(self, entity: Any) -> None:
        self._emitter.emit(Action.UPDATE, self._scope, self._uid_getter(entity))

    def on_delete(self, uid: str) -> None:
        self._emitter.emit(Action.DELETE, self._scope, uid)

    def on_delete_all(self) -> None:
        self._emitter.emit(Action.DELETE_ALL, self._scope, "*")


class FeatureAuditListener(RepositoryAuditListener):
    """Audit listener for features, including toggles and group changes."""

    def __init__(self, emitter: AuditEmitter) -> None:
        super().__init__(emitter, Scope.FEATURE)

    def on_toggle_on(self, uid: str) -> None:
        self._emitter.emit(Action.TOGGLE_ON, Scope.FEATURE, uid)

    def on_toggle_off(self, uid: str) -> None:
        self._emitter.emit(Action.TOGGLE_OFF, Scope.FEATURE, uid)

    def on_toggle_on_group(self, group: str) -> None:
        self._emitter.emit(Action.TOGGLE_ON, Scope.FEATURE_GROUP, group)

    def on_toggle_off_group(self, group: str) -> None:
        self._emitter.emit(Action.TOGGLE_OFF, Scope.FEATURE_GROUP, group)

    def on_add_to_group(self, uid: str, group: str) -> None:
        self._emitter.emit(Action.ADD_TO_GROUP, Scope.FEATURE, uid, value=group)

    def on_remove_from_group(self, uid: str, group: str) -> None:
        self._emitter.emit(Action.REMOVE_FROM_GROUP, Scope.FEATURE, uid, value=group)


class PropertyAuditListener(RepositoryAuditListener):
    """Audit listener for properties, including in-place value updates."""

    def __init__(self, emitter: AuditEmitter) -> None:
        super().__init__(emitter, Scope.PROPERTY)

    def on_update_value(self, uid: str, value: str) -> None:
        self._emitter.emit(Action.UPDATE_VALUE, Scope.PROPERTY, uid, value=value)
