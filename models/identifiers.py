"""
=========================================
Namespace, table and column identifiers.
=========================================

Identity is exact-string: no case folding or trimming is applied to
namespaces, table names or physical column names. Quoting for the warehouse
happens in sql/ at statement-generation time.

Classes:
    TableName: (namespace, name) pair
    ColumnNameMapping: ordered logical field -> physical column mapping

Example:
    >>> from models.identifiers import ColumnNameMapping, TableName
    >>>
    >>> table = TableName('raw', 'users')
    >>> mapping = ColumnNameMapping({'id': 'id', 'Full Name': 'full_name'})
    >>> mapping.physical('Full Name')
    'full_name'
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Mapping, Tuple

from core.exceptions import InvalidIdentifierError, SchemaMismatchError
from models.meta import is_meta_column

Namespace = str


def validate_identifier(value: str, kind: str) -> str:
    """Reject identifiers PostgreSQL cannot represent.

    Raises:
        InvalidIdentifierError: If empty, not a string, or containing NUL
    """
    if not isinstance(value, str) or not value:
        raise InvalidIdentifierError(f"{kind} must be a non-empty string, got {value!r}")
    if '\x00' in value:
        raise InvalidIdentifierError(f"{kind} {value!r} contains a NUL character")
    return value


@dataclass(frozen=True)
class TableName:
    """Fully qualified table reference.

    Attributes:
        namespace: Schema the table lives in
        name: Table name within the namespace
    """

    namespace: Namespace
    name: str

    def __post_init__(self):
        validate_identifier(self.namespace, 'namespace')
        validate_identifier(self.name, 'table name')

    def __str__(self) -> str:
        return f"{self.namespace}.{self.name}"

    def qualified(self) -> str:
        """Quoted ``"namespace"."name"`` form used in generated SQL."""
        from sql.ddl import quote_table
        return quote_table(self)

    @classmethod
    def parse(cls, reference: str, default_namespace: str = 'public') -> 'TableName':
        """Build a TableName from ``"namespace.table"`` or a bare ``"table"``.

        Only the first dot separates namespace from name.
        """
        if '.' in reference:
            namespace, name = reference.split('.', 1)
            return cls(namespace, name)
        return cls(default_namespace, reference)


class ColumnNameMapping(Mapping[str, str]):
    """Ordered, unique-keyed mapping from logical field to physical column.

    Invariants checked at construction:
        - physical names are unique within the mapping
        - a user field never lands on a reserved metadata column; a reserved
          name may only be mapped to itself

    Example:
        >>> mapping = ColumnNameMapping.identity(['id', 'test'])
        >>> list(mapping.physical_columns())
        ['id', 'test']
    """

    def __init__(self, mapping: Mapping[str, str] = None):
        entries = OrderedDict()
        seen_physical = {}

        for logical, physical in (mapping or {}).items():
            validate_identifier(logical, 'field name')
            validate_identifier(physical, 'column name')

            if is_meta_column(physical) and logical != physical:
                raise SchemaMismatchError(
                    f"Field '{logical}' cannot map to reserved column '{physical}'"
                )
            if is_meta_column(logical) and logical != physical:
                raise SchemaMismatchError(
                    f"Reserved field '{logical}' must map to itself, not '{physical}'"
                )
            if physical in seen_physical:
                raise SchemaMismatchError(
                    f"Fields '{seen_physical[physical]}' and '{logical}' "
                    f"both map to column '{physical}'"
                )

            seen_physical[physical] = logical
            entries[logical] = physical

        self._entries = entries

    @classmethod
    def identity(cls, fields: Iterable[str]) -> 'ColumnNameMapping':
        return cls(OrderedDict((field, field) for field in fields))

    def __getitem__(self, logical: str) -> str:
        return self._entries[logical]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ColumnNameMapping({dict(self._entries)!r})"

    def __eq__(self, other) -> bool:
        if isinstance(other, ColumnNameMapping):
            return list(self._entries.items()) == list(other._entries.items())
        return NotImplemented

    __hash__ = None

    def physical(self, logical: str) -> str:
        """Translate a logical field into its physical column.

        Reserved metadata fields resolve to themselves without an entry.

        Raises:
            SchemaMismatchError: If the field is neither mapped nor reserved
        """
        if logical in self._entries:
            return self._entries[logical]
        if is_meta_column(logical):
            return logical
        raise SchemaMismatchError(
            f"Field '{logical}' is not present in the column mapping",
            details={'field': logical, 'mapped_fields': list(self._entries)}
        )

    def user_columns(self) -> List[Tuple[str, str]]:
        """(logical, physical) pairs for user data, metadata entries excluded."""
        return [
            (logical, physical) for logical, physical in self._entries.items()
            if not is_meta_column(physical)
        ]

    def physical_columns(self) -> List[str]:
        """Physical user-data column names in mapping order."""
        return [physical for _, physical in self.user_columns()]
