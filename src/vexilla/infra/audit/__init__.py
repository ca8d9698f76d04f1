"""Vexilla Infra Audit -- audit sinks and emitter wiring."""

from vexilla.infra.audit.factory import build_audit_emitter
from vexilla.infra.audit.settings import AuditSettings, AuditSinkKind, get_audit_settings
from vexilla.infra.audit.sinks import LoggingAuditSink, SqlAuditTrail

__all__ = [
    "AuditSettings",
    "AuditSinkKind",
    "LoggingAuditSink",
    "SqlAuditTrail",
    "build_audit_emitter",
    "get_audit_settings",
]
