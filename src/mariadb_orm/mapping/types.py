"""
Column kinds and the annotation markers that select them.

Python has one `int`, one `float` and one `str`, so the SQL width of a field is chosen
with `typing.Annotated` markers:

    @table("products")
    @dataclass
    class Product:
        id: Optional[int] = column("id", primary_key=True, auto_increment=True)   # bigint
        stock: Optional[SmallInt] = column("stock")                                # smallint
        code: Optional[Char] = column("code", length=3)                            # char(3)

Plain annotations map to the widest/most common SQL type (int → bigint, float → double,
str → varchar).
"""

import datetime
import enum
import types
from decimal import Decimal
from typing import Annotated, Any, Union, get_args, get_origin

from mariadb_orm.exceptions.base import ConfigurationError


class ColumnKind(enum.Enum):
    """Semantic SQL type of a mapped column."""
    BIGINT = "bigint"
    INT = "int"
    SMALLINT = "smallint"
    TINYINT = "tinyint"
    BIT = "bit"
    DOUBLE = "double"
    FLOAT = "float"
    CHAR = "char"
    VARCHAR = "varchar"
    DATE = "date"
    DATETIME = "datetime"
    DECIMAL = "decimal"
    ENUM = "enum"


INTEGER_KINDS = frozenset({ColumnKind.BIGINT, ColumnKind.INT, ColumnKind.SMALLINT, ColumnKind.TINYINT})

# Annotation markers
BigInt = Annotated[int, ColumnKind.BIGINT]
Int = Annotated[int, ColumnKind.INT]
SmallInt = Annotated[int, ColumnKind.SMALLINT]
TinyInt = Annotated[int, ColumnKind.TINYINT]
Double = Annotated[float, ColumnKind.DOUBLE]
Float = Annotated[float, ColumnKind.FLOAT]
Char = Annotated[str, ColumnKind.CHAR]

# Default kind for an un-annotated Python type. Looked up by exact type, so `bool`
# never falls into the `int` entry and `datetime` never into the `date` entry.
_DEFAULT_KINDS: dict[type, ColumnKind] = {
    int: ColumnKind.BIGINT,
    bool: ColumnKind.BIT,
    float: ColumnKind.DOUBLE,
    str: ColumnKind.VARCHAR,
    datetime.date: ColumnKind.DATE,
    datetime.datetime: ColumnKind.DATETIME,
    Decimal: ColumnKind.DECIMAL,
}


def sql_type(kind: ColumnKind, length: int) -> str:
    """Render the DDL type of a column kind (length only applies to char/varchar/enum)."""
    if kind is ColumnKind.CHAR:
        return f"char({length})"
    if kind in (ColumnKind.VARCHAR, ColumnKind.ENUM):
        return f"varchar({length})"
    if kind is ColumnKind.DECIMAL:
        return "decimal(38, 2)"
    return kind.value


def _strip_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def resolve_kind(annotation: Any) -> tuple[ColumnKind, type]:
    """
    Resolve a field annotation to its column kind and the Python type values are coerced to.

    Raises:
        ConfigurationError: if the annotation does not map to a supported SQL type.
    """
    annotation = _strip_optional(annotation)
    marker = None
    if get_origin(annotation) is Annotated:
        base, *extras = get_args(annotation)
        marker = next((e for e in extras if isinstance(e, ColumnKind)), None)
        annotation = _strip_optional(base)

    if not isinstance(annotation, type):
        raise ConfigurationError(f"Type '{annotation!r}' is not supported")

    if marker is not None:
        return marker, annotation

    if annotation in _DEFAULT_KINDS:
        return _DEFAULT_KINDS[annotation], annotation

    if issubclass(annotation, enum.Enum):
        return ColumnKind.ENUM, annotation

    raise ConfigurationError(f"Type '{annotation.__module__}.{annotation.__qualname__}' is not supported")
