"""
==============================
Typed record values.
==============================

A record is a mapping from logical field name to an AirbyteValue. AirbyteValue
is a closed tagged variant: one frozen dataclass carrying a ValueType tag and a
payload. Backends switch on ``value.type`` to encode; there are no subclasses.

Payload types per tag:
    NULL                       None
    BOOLEAN                    bool
    INTEGER                    int (not bool)
    NUMBER                     int, float or Decimal
    STRING                     str
    DATE                       datetime.date
    TIME_WITH_TIMEZONE         datetime.time with tzinfo
    TIME_WITHOUT_TIMEZONE      datetime.time without tzinfo
    TIMESTAMP_WITH_TIMEZONE    datetime.datetime with tzinfo
    TIMESTAMP_WITHOUT_TIMEZONE datetime.datetime without tzinfo
    OBJECT                     dict[str, AirbyteValue]
    ARRAY                      list[AirbyteValue]

Example:
    >>> from models.values import AirbyteValue
    >>>
    >>> record = {
    ...     'id': AirbyteValue.integer(1),
    ...     'name': AirbyteValue.string('alice'),
    ...     'tags': AirbyteValue.array([AirbyteValue.string('vip')]),
    ... }
    >>> AirbyteValue.from_python({'a': 1}).type
    <ValueType.OBJECT: 'object'>
"""

import datetime
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping


class ValueType(Enum):
    """Tag of an AirbyteValue."""

    NULL = 'null'
    BOOLEAN = 'boolean'
    INTEGER = 'integer'
    NUMBER = 'number'
    STRING = 'string'
    DATE = 'date'
    TIME_WITH_TIMEZONE = 'time_with_timezone'
    TIME_WITHOUT_TIMEZONE = 'time_without_timezone'
    TIMESTAMP_WITH_TIMEZONE = 'timestamp_with_timezone'
    TIMESTAMP_WITHOUT_TIMEZONE = 'timestamp_without_timezone'
    OBJECT = 'object'
    ARRAY = 'array'


def _is_aware(value) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def _check_payload(value_type: ValueType, value: Any) -> bool:
    if value_type is ValueType.NULL:
        return value is None
    if value_type is ValueType.BOOLEAN:
        return isinstance(value, bool)
    if value_type is ValueType.INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if value_type is ValueType.NUMBER:
        return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)
    if value_type is ValueType.STRING:
        return isinstance(value, str)
    if value_type is ValueType.DATE:
        return isinstance(value, datetime.date) and not isinstance(value, datetime.datetime)
    if value_type is ValueType.TIME_WITH_TIMEZONE:
        return isinstance(value, datetime.time) and value.tzinfo is not None
    if value_type is ValueType.TIME_WITHOUT_TIMEZONE:
        return isinstance(value, datetime.time) and value.tzinfo is None
    if value_type is ValueType.TIMESTAMP_WITH_TIMEZONE:
        return isinstance(value, datetime.datetime) and _is_aware(value)
    if value_type is ValueType.TIMESTAMP_WITHOUT_TIMEZONE:
        return isinstance(value, datetime.datetime) and not _is_aware(value)
    if value_type is ValueType.OBJECT:
        return isinstance(value, dict) and all(
            isinstance(k, str) and isinstance(v, AirbyteValue) for k, v in value.items()
        )
    if value_type is ValueType.ARRAY:
        return isinstance(value, list) and all(isinstance(v, AirbyteValue) for v in value)
    return False


@dataclass(frozen=True)
class AirbyteValue:
    """Typed scalar or structured value of a record field.

    Attributes:
        type: Variant tag
        value: Payload matching the tag (see module docstring)

    Raises:
        TypeError: If the payload does not match the tag
    """

    type: ValueType
    value: Any = None

    def __post_init__(self):
        if not isinstance(self.type, ValueType):
            raise TypeError(f"AirbyteValue tag must be a ValueType, got {self.type!r}")
        if not _check_payload(self.type, self.value):
            raise TypeError(
                f"Payload {self.value!r} ({type(self.value).__name__}) "
                f"is not valid for {self.type.name}"
            )

    @property
    def is_null(self) -> bool:
        return self.type is ValueType.NULL

    # ----- constructors -----

    @classmethod
    def null(cls) -> 'AirbyteValue':
        return cls(ValueType.NULL, None)

    @classmethod
    def boolean(cls, value: bool) -> 'AirbyteValue':
        return cls(ValueType.BOOLEAN, value)

    @classmethod
    def integer(cls, value: int) -> 'AirbyteValue':
        return cls(ValueType.INTEGER, value)

    @classmethod
    def number(cls, value) -> 'AirbyteValue':
        return cls(ValueType.NUMBER, value)

    @classmethod
    def string(cls, value: str) -> 'AirbyteValue':
        return cls(ValueType.STRING, value)

    @classmethod
    def date(cls, value: datetime.date) -> 'AirbyteValue':
        return cls(ValueType.DATE, value)

    @classmethod
    def time(cls, value: datetime.time) -> 'AirbyteValue':
        tag = ValueType.TIME_WITH_TIMEZONE if value.tzinfo is not None else ValueType.TIME_WITHOUT_TIMEZONE
        return cls(tag, value)

    @classmethod
    def timestamp(cls, value: datetime.datetime) -> 'AirbyteValue':
        tag = (
            ValueType.TIMESTAMP_WITH_TIMEZONE if _is_aware(value)
            else ValueType.TIMESTAMP_WITHOUT_TIMEZONE
        )
        return cls(tag, value)

    @classmethod
    def object(cls, fields: Mapping[str, 'AirbyteValue']) -> 'AirbyteValue':
        return cls(ValueType.OBJECT, dict(fields))

    @classmethod
    def array(cls, items: List['AirbyteValue']) -> 'AirbyteValue':
        return cls(ValueType.ARRAY, list(items))

    @classmethod
    def from_python(cls, value: Any) -> 'AirbyteValue':
        """Infer the variant for a plain Python value.

        AirbyteValue instances are returned unchanged; dicts and lists are
        converted recursively.

        Raises:
            TypeError: For unsupported Python types
        """
        if isinstance(value, AirbyteValue):
            return value
        if value is None:
            return cls.null()
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, int):
            return cls.integer(value)
        if isinstance(value, (float, Decimal)):
            return cls.number(value)
        if isinstance(value, str):
            return cls.string(value)
        # datetime is a date subclass, check it first
        if isinstance(value, datetime.datetime):
            return cls.timestamp(value)
        if isinstance(value, datetime.date):
            return cls.date(value)
        if isinstance(value, datetime.time):
            return cls.time(value)
        if isinstance(value, dict):
            return cls.object({str(k): cls.from_python(v) for k, v in value.items()})
        if isinstance(value, (list, tuple)):
            return cls.array([cls.from_python(v) for v in value])
        raise TypeError(f"Cannot convert {type(value).__name__} to AirbyteValue")

    def to_python(self) -> Any:
        """Unwrap into plain Python values (recursively for OBJECT and ARRAY)."""
        if self.type is ValueType.OBJECT:
            return {k: v.to_python() for k, v in self.value.items()}
        if self.type is ValueType.ARRAY:
            return [v.to_python() for v in self.value]
        return self.value


Record = Dict[str, AirbyteValue]
