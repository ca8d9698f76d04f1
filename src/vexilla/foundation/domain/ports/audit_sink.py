"""Port interface for audit event sinks.

A sink receives every audit event emitted by the core. It may fail
independently of the mutation that triggered the event, and it may hand the
event off asynchronously as long as ``append`` returns.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from vexilla.foundation.domain.events import Event


@runtime_checkable
class AuditSinkPort(Protocol):
    """Append-only destination for audit events.

    Example:
        >>> class PrintSink:
        ...     def append(self, event: Event) -> None:
        ...         print(event.to_dict())
        >>> isinstance(PrintSink(), AuditSinkPort)
        True
    """

    def append(self, event: Event) -> None:
        """Record one event."""
        ...
