"""
Metadata descriptors for mapped entities.

These are plain, immutable values. They carry no behaviour of their own; the schema
deriver and the repository read them through `mapping.inspection`.
"""

from dataclasses import dataclass
from typing import Any

DEFAULT_ENGINE = "InnoDB"
DEFAULT_CHARSET = "utf8mb4"
DEFAULT_COLLATE = "utf8mb4_unicode_ci"
DEFAULT_LENGTH = 255

# Key under which `column()` stores the Column descriptor in dataclasses.field(metadata=...)
COLUMN_METADATA_KEY = "mariadb_orm.column"
# Class attribute set by `@table(...)`
TABLE_ATTRIBUTE = "__table_info__"


@dataclass(frozen=True)
class Column:
    """Per-field metadata: column name, SQL length and key role."""
    name: str
    length: int = DEFAULT_LENGTH
    nullable: bool = True
    primary_key: bool = False
    # Only honoured on integer primary keys.
    auto_increment: bool = False


@dataclass(frozen=True)
class ForeignKey:
    """
    Foreign key from `columns` of the declaring entity to `reference_columns` of
    `reference_table` (an entity class decorated with @table).
    """
    columns: tuple[str, ...]
    reference_table: type
    reference_columns: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "reference_columns", tuple(self.reference_columns))


@dataclass(frozen=True)
class UniqueKey:
    columns: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))


@dataclass(frozen=True)
class Check:
    # Raw boolean SQL expression, emitted verbatim.
    expression: str


@dataclass(frozen=True)
class Table:
    """Per-entity metadata: table name, storage options and table-level constraints."""
    name: str
    engine: str = DEFAULT_ENGINE
    charset: str = DEFAULT_CHARSET
    collate: str = DEFAULT_COLLATE
    foreign_keys: tuple[ForeignKey, ...] = ()
    unique_keys: tuple[UniqueKey, ...] = ()
    checks: tuple[Check, ...] = ()

    def __post_init__(self):
        for attr in ("foreign_keys", "unique_keys", "checks"):
            value: Any = getattr(self, attr)
            object.__setattr__(self, attr, tuple(value or ()))
