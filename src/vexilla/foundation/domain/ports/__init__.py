"""Domain port interfaces for hexagonal architecture.

Ports define abstract interfaces that the domain layer uses to interact
with storage and audit destinations. Implementations (adapters) live in
infrastructure.
"""

from vexilla.foundation.domain.ports.audit_sink import AuditSinkPort
from vexilla.foundation.domain.ports.repository import (
    FeatureRepositoryListener,
    PropertyRepositoryListener,
    Repository,
    RepositoryListener,
)

__all__ = [
    "AuditSinkPort",
    "FeatureRepositoryListener",
    "PropertyRepositoryListener",
    "Repository",
    "RepositoryListener",
]
