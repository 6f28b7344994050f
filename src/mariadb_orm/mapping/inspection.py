"""
Introspection helpers: read table and column metadata off an entity class.

Nothing here is cached. Every call re-walks the dataclass fields, so the result always
reflects the class as it is declared.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import get_type_hints

from mariadb_orm.exceptions.base import ConfigurationError, InvalidFieldError
from .metadata import COLUMN_METADATA_KEY, TABLE_ATTRIBUTE, Column, Table
from .types import INTEGER_KINDS, ColumnKind, resolve_kind, sql_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MappedColumn:
    """A dataclass field bound to its Column descriptor and resolved column kind."""
    field_name: str
    info: Column
    kind: ColumnKind
    # Python type values are coerced to when read back (e.g. the Enum class)
    python_type: type

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def sql_type(self) -> str:
        return sql_type(self.kind, self.info.length)

    @property
    def is_auto_increment(self) -> bool:
        return self.info.primary_key and self.info.auto_increment and self.kind in INTEGER_KINDS

    @property
    def is_primary_key(self) -> bool:
        return self.info.primary_key

    @property
    def is_nullable(self) -> bool:
        return self.info.nullable and not self.is_primary_key


def _entity_name(entity) -> str:
    return f"{getattr(entity, '__module__', '?')}.{getattr(entity, '__qualname__', repr(entity))}"


def has_table(entity) -> bool:
    """True if `entity` is a class decorated with @table (inherited metadata does not count)."""
    return isinstance(entity, type) and isinstance(vars(entity).get(TABLE_ATTRIBUTE), Table)


def table_of(entity) -> Table:
    """
    Return the Table descriptor of an entity class.

    Raises:
        ConfigurationError: if the class is not decorated with @table.
    """
    if not has_table(entity):
        raise ConfigurationError(f"Class '{_entity_name(entity)}' is not decorated with @table")
    return vars(entity)[TABLE_ATTRIBUTE]


def columns_of(entity) -> list[MappedColumn]:
    """
    Return the column-bearing fields of an entity, in declaration order.

    Raises:
        ConfigurationError: missing @table, not a dataclass, unresolvable annotations,
            or an unsupported field type.
    """
    table_of(entity)
    if not dataclasses.is_dataclass(entity):
        raise ConfigurationError(f"Class '{_entity_name(entity)}' is not a dataclass")

    try:
        hints = get_type_hints(entity, include_extras=True)
    except Exception as exc:
        raise ConfigurationError(f"Cannot resolve annotations of class '{_entity_name(entity)}': {exc}") from exc

    columns = []
    for f in dataclasses.fields(entity):
        info = f.metadata.get(COLUMN_METADATA_KEY)
        if info is None:
            continue
        try:
            kind, python_type = resolve_kind(hints[f.name])
        except ConfigurationError as exc:
            raise ConfigurationError(
                f"{exc.message} (field '{f.name}' of class '{_entity_name(entity)}')", fields=[info.name]
            ) from exc
        columns.append(MappedColumn(f.name, info, kind, python_type))
    return columns


def columns_by_name(entity) -> dict[str, MappedColumn]:
    return {c.name: c for c in columns_of(entity)}


def find_column(entity, column_name: str) -> MappedColumn:
    """
    Return the mapped column named `column_name`.

    Raises:
        InvalidFieldError: if no field of the entity maps to that column.
    """
    for c in columns_of(entity):
        if c.name == column_name:
            return c
    logger.info(
        "mapping.unknown_column",
        extra={"model": entity.__name__, "column": column_name},
    )
    raise InvalidFieldError(
        f"Column '{column_name}' is not present in class '{_entity_name(entity)}'", fields=[column_name]
    )
