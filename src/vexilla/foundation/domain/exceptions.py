"""Domain exception hierarchy for type-safe error handling.

Every error raised by the flag model, the codec, the repositories and the
managed operations derives from ``DomainError``. Exceptions carry a
machine-readable error code and structured context for logging.

Example:
    >>> from vexilla.foundation.domain.exceptions import FeatureNotFoundError
    >>> raise FeatureNotFoundError("flag-A")
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "AuditDeliveryError",
    "DomainError",
    "FeatureNotFoundError",
    "InvalidPropertyValueError",
    "NotFoundError",
    "ParseError",
    "PermissionDeniedError",
    "PersistenceError",
    "PropertyNotFoundError",
    "PropertyTypeError",
    "RoleNotFoundError",
    "UnknownStrategyError",
    "UserNotFoundError",
]


class DomainError(Exception):
    """Base class for all domain errors.

    Attributes:
        error_code: Machine-readable error code.
        message: Human-readable error description.
        context: Structured debugging information (entity ids, field names).

    Example:
        >>> raise DomainError("Operation failed", context={"uid": "flag-A"})
        DomainError: Operation failed (uid=flag-A)
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize domain error with message and optional context.

        Args:
            message: Human-readable error description.
            context: Structured debugging information. Keys should be snake_case.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """String representation including context for logging."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ParseError(DomainError):
    """Raised when a configuration document is malformed.

    Attributes:
        error_code: "PARSE_ERROR" (class constant).
        field: Document field (dot path) that is missing or invalid.
        reason: Human-readable failure reason.

    Example:
        >>> raise ParseError("properties.value", "'value' is expected for properties")
        ParseError: Invalid document at 'properties.value': 'value' is expected for properties
    """

    error_code: str = "PARSE_ERROR"

    def __init__(self, field: str, reason: str, **extra_context: Any) -> None:
        self.field = field
        self.reason = reason
        message = f"Invalid document at '{field}': {reason}"
        context = {"field": field, "reason": reason, **extra_context}
        super().__init__(message, context)


class PropertyTypeError(DomainError):
    """Raised when a property kind cannot be resolved or instantiated.

    The underlying failure is available both as ``cause`` and through
    exception chaining (``__cause__``) when raised with ``from``.

    Attributes:
        error_code: "PROPERTY_TYPE_ERROR" (class constant).
        kind: Kind name that was attempted (after alias resolution).
        cause: Underlying exception, if any.
    """

    error_code: str = "PROPERTY_TYPE_ERROR"

    def __init__(self, kind: str, cause: BaseException | None = None) -> None:
        self.kind = kind
        self.cause = cause
        message = f"Cannot instantiate property kind '{kind}'"
        context: dict[str, Any] = {"kind": kind}
        if cause is not None:
            context["cause"] = repr(cause)
        super().__init__(message, context)


class InvalidPropertyValueError(DomainError):
    """Raised when a property value violates its kind or its fixed values.

    Attributes:
        error_code: "INVALID_PROPERTY_VALUE" (class constant).
        uid: Property uid.
        value: Offending value (as given).
        allowed: Declared fixed values, when that is the violated rule.
    """

    error_code: str = "INVALID_PROPERTY_VALUE"

    def __init__(
        self,
        uid: str,
        value: Any,
        allowed: list[str] | None = None,
        reason: str | None = None,
    ) -> None:
        self.uid = uid
        self.value = value
        self.allowed = allowed
        if reason is None:
            reason = f"expected one of {allowed}"
        message = f"Cannot create property <{uid}> invalid value <{value}>: {reason}"
        context: dict[str, Any] = {"uid": uid, "value": str(value)}
        if allowed is not None:
            context["allowed"] = allowed
        super().__init__(message, context)


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist.

    Attributes:
        error_code: "RESOURCE_NOT_FOUND" (class constant).
        resource_type: Type of missing entity.
        resource_id: Identifier of missing entity.

    Example:
        >>> raise NotFoundError("Feature", "flag-A")
        NotFoundError: Feature not found: flag-A
    """

    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: str, **extra_context: Any) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type} not found: {resource_id}"
        context = {
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            **extra_context,
        }
        super().__init__(message, context)


class FeatureNotFoundError(NotFoundError):
    """Raised when a feature uid is unknown to the repository."""

    error_code: str = "FEATURE_NOT_FOUND"

    def __init__(self, uid: str, **extra_context: Any) -> None:
        super().__init__("Feature", uid, **extra_context)


class PropertyNotFoundError(NotFoundError):
    """Raised when a property uid is unknown to the repository."""

    error_code: str = "PROPERTY_NOT_FOUND"

    def __init__(self, uid: str, **extra_context: Any) -> None:
        super().__init__("Property", uid, **extra_context)


class RoleNotFoundError(NotFoundError):
    """Raised when a role uid is unknown to the repository."""

    error_code: str = "ROLE_NOT_FOUND"

    def __init__(self, uid: str, **extra_context: Any) -> None:
        super().__init__("Role", uid, **extra_context)


class UserNotFoundError(NotFoundError):
    """Raised when a user uid is unknown to the repository."""

    error_code: str = "USER_NOT_FOUND"

    def __init__(self, uid: str, **extra_context: Any) -> None:
        super().__init__("User", uid, **extra_context)


class PersistenceError(DomainError):
    """Raised when the backing store cannot complete an operation.

    No guarantee is made beyond the backend's own commit state.

    Attributes:
        error_code: "PERSISTENCE_ERROR" (class constant).
        operation: Repository operation that failed (e.g., "save").
    """

    error_code: str = "PERSISTENCE_ERROR"

    def __init__(self, operation: str, reason: str, **extra_context: Any) -> None:
        self.operation = operation
        message = f"Cannot {operation}: {reason}"
        context = {"operation": operation, **extra_context}
        super().__init__(message, context)


class PermissionDeniedError(DomainError):
    """Raised when the acting user lacks the permission for an operation.

    The protected operation is not attempted.

    Attributes:
        error_code: "PERMISSION_DENIED" (class constant).
        user_uid: Acting user (None when no actor is bound).
        permission: Permission token that was required.
    """

    error_code: str = "PERMISSION_DENIED"

    def __init__(
        self,
        user_uid: str | None,
        permission: str,
        **extra_context: Any,
    ) -> None:
        self.user_uid = user_uid
        self.permission = permission
        message = f"User '{user_uid}' is not granted '{permission}'"
        context = {"user_uid": user_uid, "permission": str(permission), **extra_context}
        super().__init__(message, context)


class UnknownStrategyError(DomainError):
    """Raised when no evaluator is registered for a toggle strategy kind."""

    error_code: str = "UNKNOWN_STRATEGY"

    def __init__(self, kind: str, **extra_context: Any) -> None:
        self.kind = kind
        super().__init__(
            f"No toggle strategy registered for kind '{kind}'",
            {"kind": kind, **extra_context},
        )


class AuditDeliveryError(DomainError):
    """Raised by a strict audit emitter when its sink rejects an event.

    The triggering mutation has already been applied when this is raised.
    """

    error_code: str = "AUDIT_DELIVERY_ERROR"
