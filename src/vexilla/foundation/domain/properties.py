"""Typed configuration properties and the property kind registry.

Uses Pydantic models for type-safe property values, the same way the
configuration value objects discriminate on ``type``. Each property kind
declares a canonical ``kind`` name; short aliases (``int``, ``bool``...)
resolve to canonical names before lookup.

Every kind is constructible from two strings::

    prop = create_property("threshold", "10", kind="int")
    prop.value            # 10
    prop.as_string()      # "10"
    prop.from_string("15")

Fixed values restrict the property to an allowed set. The invariant
``value in fixed_values`` is checked at construction and on every update;
a property violating it is never handed out.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from vexilla.foundation.domain.exceptions import (
    InvalidPropertyValueError,
    PropertyTypeError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
LIST_SEPARATOR = ","


class LogLevel(StrEnum):
    """Log level values accepted by ``LogLevelProperty``."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"


class Property(BaseModel, Generic[T]):
    """Named, typed and optionally value-constrained configuration entry.

    Attributes:
        uid: Property identifier, unique within its owner.
        value: Typed value.
        description: Optional free text.
        fixed_values: Allowed values. ``None`` or empty means unconstrained.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: ClassVar[str] = ""

    uid: str
    value: T
    description: str | None = None
    fixed_values: frozenset[T] | None = None

    @classmethod
    def of(cls, uid: str, value: str) -> Property[Any]:
        """Build a property of this kind from its uid and string value."""
        return cls(uid=uid, value=value)

    @model_validator(mode="after")
    def _check_fixed_values(self) -> Property[T]:
        if self.fixed_values and self.value not in self.fixed_values:
            raise InvalidPropertyValueError(
                self.uid, self.as_string(), allowed=self.fixed_values_as_strings()
            )
        return self

    def format_value(self, value: T) -> str:
        """Canonical string form of a value of this kind."""
        return str(value)

    def as_string(self) -> str:
        """Canonical string form of the current value."""
        return self.format_value(self.value)

    def fixed_values_as_strings(self) -> list[str]:
        """Fixed values in canonical string form, sorted."""
        if not self.fixed_values:
            return []
        return sorted(self.format_value(v) for v in self.fixed_values)

    def from_string(self, raw: str) -> None:
        """Update the value in place from its string form.

        The new value is parsed and checked against ``fixed_values`` before
        the property is touched.

        Raises:
            InvalidPropertyValueError: If ``raw`` cannot be parsed by this kind
                or is outside the fixed values.
        """
        try:
            checked = self.__class__(
                uid=self.uid,
                value=raw,
                description=self.description,
                fixed_values=self.fixed_values,
            )
        except PydanticValidationError as exc:
            raise InvalidPropertyValueError(
                self.uid, raw, reason=f"not a valid {self.kind} value"
            ) from exc
        self.value = checked.value

    def add_fixed_value_from_string(self, raw: str) -> None:
        """Declare an additional allowed value given in string form."""
        parsed = self.__class__(uid=self.uid, value=raw).value
        self.fixed_values = frozenset(self.fixed_values or ()) | {parsed}


class StringProperty(Property[str]):
    """Free text property."""

    kind: ClassVar[str] = "string"


class _IntegerPropertyBase(Property[int]):
    min_value: ClassVar[int | None] = None
    max_value: ClassVar[int | None] = None

    @field_validator("value")
    @classmethod
    def _check_range(cls, v: int) -> int:
        if cls.min_value is not None and v < cls.min_value:
            raise ValueError(f"{v} is below {cls.min_value}")
        if cls.max_value is not None and v > cls.max_value:
            raise ValueError(f"{v} is above {cls.max_value}")
        return v


class IntegerProperty(_IntegerPropertyBase):
    """32-bit signed integer property."""

    kind: ClassVar[str] = "integer"
    min_value: ClassVar[int | None] = -(2**31)
    max_value: ClassVar[int | None] = 2**31 - 1


class LongProperty(_IntegerPropertyBase):
    """64-bit signed integer property."""

    kind: ClassVar[str] = "long"
    min_value: ClassVar[int | None] = -(2**63)
    max_value: ClassVar[int | None] = 2**63 - 1


class ShortProperty(_IntegerPropertyBase):
    """16-bit signed integer property."""

    kind: ClassVar[str] = "short"
    min_value: ClassVar[int | None] = -(2**15)
    max_value: ClassVar[int | None] = 2**15 - 1


class ByteProperty(_IntegerPropertyBase):
    """8-bit signed integer property."""

    kind: ClassVar[str] = "byte"
    min_value: ClassVar[int | None] = -(2**7)
    max_value: ClassVar[int | None] = 2**7 - 1


class BigIntegerProperty(_IntegerPropertyBase):
    """Unbounded integer property."""

    kind: ClassVar[str] = "big_integer"


class DoubleProperty(Property[float]):
    """Double precision floating point property."""

    kind: ClassVar[str] = "double"

    @field_validator("value")
    @classmethod
    def _reject_nan(cls, v: float) -> float:
        if math.isnan(v):
            raise ValueError("NaN is not a comparable value")
        return v

    def format_value(self, value: float) -> str:
        return repr(float(value))


class FloatProperty(DoubleProperty):
    """Floating point property (stored with double precision)."""

    kind: ClassVar[str] = "float"


class DecimalProperty(Property[Decimal]):
    """Arbitrary precision decimal property."""

    kind: ClassVar[str] = "decimal"

    @field_validator("value", mode="before")
    @classmethod
    def _parse_decimal(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                return Decimal(v.strip())
            except InvalidOperation as exc:
                raise ValueError(f"'{v}' is not a decimal") from exc
        return v

    @field_validator("value")
    @classmethod
    def _reject_nan(cls, v: Decimal) -> Decimal:
        if v.is_nan():
            raise ValueError("NaN is not a comparable value")
        return v


class BooleanProperty(Property[bool]):
    """Boolean property (``true``/``false`` canonical form)."""

    kind: ClassVar[str] = "boolean"

    def format_value(self, value: bool) -> str:
        return "true" if value else "false"


class DateProperty(Property[date]):
    """Calendar date property (``YYYY-MM-DD``)."""

    kind: ClassVar[str] = "date"

    @field_validator("value", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            return datetime.strptime(v.strip(), DATE_FORMAT).date()
        return v

    def format_value(self, value: date) -> str:
        return value.strftime(DATE_FORMAT)


class DateTimeProperty(Property[datetime]):
    """Timestamp property (ISO 8601 with a space separator)."""

    kind: ClassVar[str] = "datetime"

    @field_validator("value", mode="before")
    @classmethod
    def _parse_datetime(cls, v: Any) -> Any:
        if isinstance(v, str):
            raw = v.strip()
            try:
                return datetime.strptime(raw, DATETIME_FORMAT)
            except ValueError:
                return datetime.fromisoformat(raw)
        return v

    def format_value(self, value: datetime) -> str:
        return value.isoformat(sep=" ")


class LogLevelProperty(Property[LogLevel]):
    """Log level property restricted to ``LogLevel`` values."""

    kind: ClassVar[str] = "log_level"

    @field_validator("value", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    def format_value(self, value: LogLevel) -> str:
        return LogLevel(value).value


class ListProperty(Property[tuple[str, ...]]):
    """Comma separated list of strings."""

    kind: ClassVar[str] = "list"

    @field_validator("value", mode="before")
    @classmethod
    def _split(cls, v: Any) -> Any:
        if isinstance(v, str):
            return tuple(item.strip() for item in v.split(LIST_SEPARATOR) if item.strip())
        if isinstance(v, list):
            return tuple(str(item) for item in v)
        return v

    def format_value(self, value: tuple[str, ...]) -> str:
        return LIST_SEPARATOR.join(value)


# ---------------------------------------------------------------------------
# Kind registry
# ---------------------------------------------------------------------------

PropertyFactory = Callable[[str, str], Property[Any]]

_FACTORIES: dict[str, PropertyFactory] = {}
_ALIASES: dict[str, str] = {}


def register_property_kind(
    kind: str,
    factory: PropertyFactory,
    *aliases: str,
) -> None:
    """Register a property kind under its canonical name and aliases.

    The properties the factory builds must declare the same ``kind``, since
    that is the name written on export. ``create_property`` rejects any
    property whose ``kind`` differs from the name it was resolved under.

    Args:
        kind: Canonical kind name written on export.
        factory: Callable building the property from ``(uid, value)``.
        *aliases: Short identifiers accepted on parse.

    Raises:
        ValueError: If ``kind`` is empty, or ``factory`` is a classmethod of
            a property class declaring another kind.
    """
    if not kind:
        raise ValueError("A property kind needs a non-empty name")
    owner = getattr(factory, "__self__", None)
    if isinstance(owner, type) and issubclass(owner, Property) and owner.kind != kind:
        raise ValueError(
            f"{owner.__name__} declares kind '{owner.kind}', cannot register it as '{kind}'"
        )
    _FACTORIES[kind] = factory
    for alias in aliases:
        _ALIASES[alias] = kind


def resolve_kind(identifier: str) -> str:
    """Map a type identifier to its canonical kind name.

    Aliases are substituted; anything else is taken as the canonical name.
    """
    return _ALIASES.get(identifier, identifier)


def registered_kinds() -> list[str]:
    """Canonical names of all registered kinds."""
    return sorted(_FACTORIES)


def create_property(
    uid: str,
    value: str,
    kind: str | None = None,
    description: str | None = None,
    fixed_values: list[str] | None = None,
) -> Property[Any]:
    """Build a validated property from string inputs.

    Args:
        uid: Property identifier.
        value: Value in string form.
        kind: Type identifier or alias. Defaults to ``string``.
        description: Optional description.
        fixed_values: Allowed values in string form.

    Returns:
        A property whose value satisfies its fixed values.

    Raises:
        PropertyTypeError: If the kind is unknown or cannot build the property.
        InvalidPropertyValueError: If the value is outside ``fixed_values``.
    """
    canonical = resolve_kind(kind) if kind else StringProperty.kind
    factory = _FACTORIES.get(canonical)
    if factory is None:
        raise PropertyTypeError(canonical, LookupError(f"unregistered kind '{canonical}'"))
    try:
        prop = factory(uid, value)
    except InvalidPropertyValueError:
        raise
    except Exception as exc:
        raise PropertyTypeError(canonical, exc) from exc
    if kind_of(prop) != canonical:
        mismatch = TypeError(f"factory built a '{kind_of(prop)}' property")
        raise PropertyTypeError(canonical, mismatch)

    if description is not None:
        prop.description = description
    if fixed_values:
        try:
            for raw in fixed_values:
                prop.add_fixed_value_from_string(str(raw))
        except PydanticValidationError as exc:
            raise InvalidPropertyValueError(
                uid, value, allowed=[str(v) for v in fixed_values], reason=str(exc)
            ) from exc
        if prop.value not in (prop.fixed_values or ()):
            raise InvalidPropertyValueError(
                uid, prop.as_string(), allowed=prop.fixed_values_as_strings()
            )
    logger.debug("property_created", extra={"uid": uid, "kind": canonical})
    return prop


def kind_of(prop: Property[Any]) -> str:
    """Canonical kind name of a property instance."""
    return type(prop).kind


for _cls, _aliases in (
    (StringProperty, ("str",)),
    (IntegerProperty, ("int",)),
    (LongProperty, ()),
    (ShortProperty, ()),
    (ByteProperty, ()),
    (BigIntegerProperty, ("biginteger",)),
    (DoubleProperty, ()),
    (FloatProperty, ()),
    (DecimalProperty, ("bigdecimal",)),
    (BooleanProperty, ("bool",)),
    (DateProperty, ()),
    (DateTimeProperty, ()),
    (LogLevelProperty, ("loglevel",)),
    (ListProperty, ()),
):
    register_property_kind(_cls.kind, _cls.of, *_aliases)
