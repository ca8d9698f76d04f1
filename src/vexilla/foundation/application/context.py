"""Acting user context for access checks and audit attribution.

Provides a ContextVar-based mechanism for propagating the acting user uid
across the call stack without explicit parameter passing. Managed
repositories read it to check permissions and to stamp audit events.

Usage:
    from vexilla.foundation.application.context import acting_as

    with acting_as("alice"):
        store.features.toggle_on("flag-A")
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

# ContextVar for the acting user - None when no actor is bound
actor_context: ContextVar[str | None] = ContextVar("actor_context", default=None)


def get_current_actor() -> str | None:
    """Get the acting user uid, or None when no actor is bound."""
    return actor_context.get()


@contextmanager
def acting_as(user_uid: str) -> Iterator[str]:
    """Bind ``user_uid`` as the acting user for the enclosed block.

    Args:
        user_uid: Uid of the user performing the operations.

    Yields:
        The bound user uid.
    """
    token = actor_context.set(user_uid)
    try:
        yield user_uid
    finally:
        actor_context.reset(token)
