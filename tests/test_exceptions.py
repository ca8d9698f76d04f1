"""Tests for the domain exception hierarchy."""

from __future__ import annotations

import pytest

from vexilla.foundation.domain.exceptions import (
    AuditDeliveryError,
    DomainError,
    FeatureNotFoundError,
    InvalidPropertyValueError,
    NotFoundError,
    ParseError,
    PermissionDeniedError,
    PersistenceError,
    PropertyNotFoundError,
    PropertyTypeError,
    RoleNotFoundError,
    UnknownStrategyError,
    UserNotFoundError,
)


@pytest.mark.unit
class TestDomainError:
    """Tests for base DomainError."""

    def test_message_and_code(self) -> None:
        err = DomainError("Something failed")
        assert err.message == "Something failed"
        assert err.error_code == "DOMAIN_ERROR"
        assert err.context == {}

    def test_str_with_context(self) -> None:
        err = DomainError("Failed", context={"uid": "flag-A"})
        assert str(err) == "Failed (uid=flag-A)"

    def test_repr(self) -> None:
        err = DomainError("Failed", context={"a": "1"})
        assert "DomainError" in repr(err)
        assert "Failed" in repr(err)


@pytest.mark.unit
class TestParseError:
    def test_cites_field(self) -> None:
        err = ParseError("properties.value", "'value' is expected for properties")
        assert err.error_code == "PARSE_ERROR"
        assert err.field == "properties.value"
        assert "properties.value" in str(err)
        assert "'value' is expected" in err.message

    def test_extra_context(self) -> None:
        err = ParseError("document", "invalid JSON", line=3)
        assert err.context["line"] == 3


@pytest.mark.unit
class TestPropertyTypeError:
    def test_keeps_cause(self) -> None:
        cause = LookupError("unregistered kind")
        err = PropertyTypeError("not.a.real.Type", cause)
        assert err.kind == "not.a.real.Type"
        assert err.cause is cause
        assert err.error_code == "PROPERTY_TYPE_ERROR"
        assert "not.a.real.Type" in str(err)

    def test_without_cause(self) -> None:
        err = PropertyTypeError("integer")
        assert err.cause is None
        assert "cause" not in err.context


@pytest.mark.unit
class TestInvalidPropertyValueError:
    def test_allowed_values_in_message(self) -> None:
        err = InvalidPropertyValueError("threshold", "7", allowed=["10", "15", "5"])
        assert err.uid == "threshold"
        assert err.value == "7"
        assert err.context["allowed"] == ["10", "15", "5"]
        assert "<threshold>" in err.message

    def test_explicit_reason(self) -> None:
        err = InvalidPropertyValueError("threshold", "abc", reason="not a valid integer value")
        assert "not a valid integer value" in err.message
        assert "allowed" not in err.context


@pytest.mark.unit
class TestNotFoundErrors:
    def test_message_format(self) -> None:
        err = NotFoundError("FeatureGroup", "beta")
        assert str(err).startswith("FeatureGroup not found: beta")
        assert err.error_code == "RESOURCE_NOT_FOUND"

    @pytest.mark.parametrize(
        ("error_cls", "resource_type", "code"),
        [
            (FeatureNotFoundError, "Feature", "FEATURE_NOT_FOUND"),
            (PropertyNotFoundError, "Property", "PROPERTY_NOT_FOUND"),
            (RoleNotFoundError, "Role", "ROLE_NOT_FOUND"),
            (UserNotFoundError, "User", "USER_NOT_FOUND"),
        ],
    )
    def test_entity_subtypes(
        self, error_cls: type[NotFoundError], resource_type: str, code: str
    ) -> None:
        err = error_cls("x1")  # type: ignore[call-arg]
        assert isinstance(err, NotFoundError)
        assert err.resource_type == resource_type
        assert err.resource_id == "x1"
        assert err.error_code == code


@pytest.mark.unit
class TestOtherErrors:
    def test_persistence_error(self) -> None:
        err = PersistenceError("save", "database is locked", table="vx_feature")
        assert err.operation == "save"
        assert err.context["table"] == "vx_feature"
        assert err.message == "Cannot save: database is locked"

    def test_permission_denied(self) -> None:
        err = PermissionDeniedError("bob", "TOGGLE_FEATURE", uid="flag-A")
        assert err.user_uid == "bob"
        assert err.permission == "TOGGLE_FEATURE"
        assert err.context["uid"] == "flag-A"
        assert err.error_code == "PERMISSION_DENIED"

    def test_unknown_strategy(self) -> None:
        err = UnknownStrategyError("ponies", feature_uid="flag-A")
        assert err.kind == "ponies"
        assert err.context == {"kind": "ponies", "feature_uid": "flag-A"}

    def test_all_inherit_domain_error(self) -> None:
        for cls in (
            ParseError,
            PropertyTypeError,
            InvalidPropertyValueError,
            NotFoundError,
            PersistenceError,
            PermissionDeniedError,
            UnknownStrategyError,
            AuditDeliveryError,
        ):
            assert issubclass(cls, DomainError)
