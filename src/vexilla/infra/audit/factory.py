"""Audit emitter construction from settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vexilla.foundation.application.audit import AuditEmitter, InMemoryAuditTrail
from vexilla.infra.audit.settings import AuditSettings, AuditSinkKind
from vexilla.infra.audit.sinks import LoggingAuditSink, SqlAuditTrail

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.orm import Session

    from vexilla.foundation.domain.ports import AuditSinkPort
    from vexilla.infra.persistence.schema import FlagTables

logger = logging.getLogger(__name__)


def build_audit_emitter(
    settings: AuditSettings,
    *,
    session_factory: Callable[[], Session] | None = None,
    tables: FlagTables | None = None,
) -> AuditEmitter | None:
    """Build the emitter described by ``settings``.

    Returns:
        None when auditing is disabled.

    Raises:
        ValueError: If the database sink is selected without a session
            factory and tables.
    """
    if not settings.enabled:
        return None

    sink: AuditSinkPort
    if settings.sink is AuditSinkKind.MEMORY:
        sink = InMemoryAuditTrail()
    elif settings.sink is AuditSinkKind.LOGGING:
        sink = LoggingAuditSink()
    else:
        if session_factory is None or tables is None:
            msg = "The database audit sink needs a session factory and tables"
            raise ValueError(msg)
        sink = SqlAuditTrail(session_factory, tables.audit)

    logger.debug("audit_emitter_built", extra={"sink": settings.sink.value, "strict": settings.strict})
    return AuditEmitter(sink, strict=settings.strict)
