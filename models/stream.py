"""
=====================================
Stream descriptors and creation modes.
=====================================

A StreamDescriptor declares how a stream lands in the warehouse: its field
types, its import mode and, for deduplicated streams, the primary key and
cursor used by the merge engine.

Classes:
    FieldType: Declared type of a stream field (drives physical column type)
    ImportMode: APPEND or DEDUPED
    StreamDescriptor: Namespace, name, schema, import mode, primary key, cursor
    TableCreateMode: CREATE_FRESH or CREATE_OR_REPLACE_ATOMICALLY

Example:
    >>> from models.stream import FieldType, dedupe_stream
    >>>
    >>> stream = dedupe_stream(
    ...     namespace='raw',
    ...     name='users',
    ...     schema={'id': FieldType.INTEGER, 'updated': FieldType.INTEGER},
    ...     primary_key=[['id']],
    ...     cursor=['updated'],
    ... )
    >>> stream.primary_key_fields()
    ['id']
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Mapping, Optional

from core.exceptions import InvalidStreamDescriptorError

FieldPath = List[str]


class FieldType(Enum):
    """Declared type of a stream field."""

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
    UNKNOWN = 'unknown'


class ImportMode(Enum):
    """How incoming rows relate to rows already in the table."""

    APPEND = 'append'
    DEDUPED = 'deduped'


class TableCreateMode(Enum):
    """Behaviour of create_table when the table already exists."""

    CREATE_FRESH = 'create_fresh'
    CREATE_OR_REPLACE_ATOMICALLY = 'create_or_replace_atomically'

    @classmethod
    def from_replace_flag(cls, replace: bool) -> 'TableCreateMode':
        return cls.CREATE_OR_REPLACE_ATOMICALLY if replace else cls.CREATE_FRESH


@dataclass(frozen=True)
class StreamDescriptor:
    """Declared shape and import mode of a stream.

    Attributes:
        namespace: Namespace the stream is written to
        name: Stream name
        schema: Ordered mapping of logical field -> FieldType
        import_mode: APPEND or DEDUPED
        primary_key: Ordered list of field-paths (composite keys allowed)
        cursor: Field-path ordering versions of the same key (may be empty)
    """

    namespace: str
    name: str
    schema: Mapping[str, FieldType] = field(default_factory=OrderedDict)
    import_mode: ImportMode = ImportMode.APPEND
    primary_key: List[FieldPath] = field(default_factory=list)
    cursor: FieldPath = field(default_factory=list)

    @property
    def is_deduped(self) -> bool:
        return self.import_mode is ImportMode.DEDUPED

    def field_type(self, name: str) -> FieldType:
        """Declared type of a field, UNKNOWN when the schema does not list it."""
        return self.schema.get(name, FieldType.UNKNOWN)

    def primary_key_fields(self) -> List[str]:
        """Top-level primary key fields in declaration order.

        Raises:
            InvalidStreamDescriptorError: If a key path is empty or nested
        """
        fields = []
        for path in self.primary_key:
            fields.append(_top_level(path, 'primary key'))
        return fields

    def cursor_field(self) -> Optional[str]:
        """Top-level cursor field, or None when no cursor is declared."""
        if not self.cursor:
            return None
        return _top_level(self.cursor, 'cursor')

    def validate_for_upsert(self) -> None:
        """Check the descriptor can drive a deduplicating merge.

        Raises:
            InvalidStreamDescriptorError: Wrong import mode, missing or nested keys
        """
        if not self.is_deduped:
            raise InvalidStreamDescriptorError(
                f"Upsert requires import mode DEDUPED, stream {self.namespace}.{self.name} "
                f"is {self.import_mode.name}"
            )
        if not self.primary_key:
            raise InvalidStreamDescriptorError(
                f"Upsert requires a primary key, stream {self.namespace}.{self.name} declares none"
            )
        self.primary_key_fields()
        self.cursor_field()


def _top_level(path: FieldPath, role: str) -> str:
    if not path:
        raise InvalidStreamDescriptorError(f"Empty {role} field path")
    if len(path) > 1:
        raise InvalidStreamDescriptorError(
            f"Nested {role} field path {'.'.join(path)} is not supported"
        )
    return path[0]


def append_stream(
    namespace: str,
    name: str,
    schema: Mapping[str, FieldType] = None
) -> StreamDescriptor:
    """Descriptor for an append-only stream."""
    return StreamDescriptor(
        namespace=namespace,
        name=name,
        schema=OrderedDict(schema or {}),
        import_mode=ImportMode.APPEND,
    )


def dedupe_stream(
    namespace: str,
    name: str,
    schema: Mapping[str, FieldType],
    primary_key: List[FieldPath],
    cursor: FieldPath = None
) -> StreamDescriptor:
    """Descriptor for a primary-key deduplicated stream."""
    return StreamDescriptor(
        namespace=namespace,
        name=name,
        schema=OrderedDict(schema),
        import_mode=ImportMode.DEDUPED,
        primary_key=[list(path) for path in primary_key],
        cursor=list(cursor or []),
    )
