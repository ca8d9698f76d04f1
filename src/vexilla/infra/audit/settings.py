"""Audit configuration from environment variables."""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuditSinkKind(StrEnum):
    """Destination of audit events."""

    MEMORY = "memory"
    LOGGING = "logging"
    DATABASE = "database"


class AuditSettings(BaseSettings):
    """Audit configuration.

    Loads configuration from environment variables with ``AUDIT_`` prefix:
    - AUDIT_ENABLED: Emit audit events (default: True)
    - AUDIT_STRICT: Raise when the sink fails (default: False)
    - AUDIT_SINK: memory, logging or database (default: logging)

    Example:
        >>> AuditSettings(sink="memory").sink
        <AuditSinkKind.MEMORY: 'memory'>
    """

    model_config = SettingsConfigDict(
        env_prefix="AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Emit audit events")
    strict: bool = Field(default=False, description="Raise when the sink rejects an event")
    sink: AuditSinkKind = Field(default=AuditSinkKind.LOGGING, description="Event destination")


@lru_cache(maxsize=1)
def get_audit_settings() -> AuditSettings:
    """Get cached AuditSettings instance.

    Clear cache with ``get_audit_settings.cache_clear()`` for testing.
    """
    return AuditSettings()
