"""
Value binding and row coercion, dispatched by column kind.

`bind_value()` turns a Python value into the parameter handed to the driver for a
column; `read_value()` turns a value fetched from a result row back into the field's
declared Python type. Both look up a per-kind function once instead of re-checking
types on every call. None always passes through as SQL NULL. Binding rejects a value
of the wrong type rather than converting it.
"""

import datetime
import enum
from decimal import Decimal
from typing import Any, Callable

from mariadb_orm.mapping.inspection import MappedColumn
from mariadb_orm.mapping.types import ColumnKind


# -----------------------
# Binders: Python value -> driver parameter
# -----------------------

def _mismatch(value: Any, column: MappedColumn) -> TypeError:
    return TypeError(
        f"Cannot bind {type(value).__name__} value {value!r} to column '{column.name}' ({column.sql_type})"
    )


def _is_integer(value: Any) -> bool:
    # bool is an int subclass but never a valid integer parameter
    return isinstance(value, int) and not isinstance(value, bool)


def _bind_text(value: Any, column: MappedColumn) -> str:
    if not isinstance(value, str):
        raise _mismatch(value, column)
    return value


def _bind_int(value: Any, column: MappedColumn) -> int:
    if not _is_integer(value):
        raise _mismatch(value, column)
    return value


def _bind_float(value: Any, column: MappedColumn) -> float:
    if not (_is_integer(value) or isinstance(value, float)):
        raise _mismatch(value, column)
    return float(value)


def _bind_bit(value: Any, column: MappedColumn) -> bool:
    if isinstance(value, bool):
        return value
    if _is_integer(value) and value in (0, 1):
        return bool(value)
    raise _mismatch(value, column)


def _bind_decimal(value: Any, column: MappedColumn) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if _is_integer(value) or isinstance(value, float):
        # str() keeps the shortest repr, so 12.5 binds as Decimal('12.5')
        return Decimal(str(value))
    raise _mismatch(value, column)


def _bind_date(value: Any, column: MappedColumn) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    raise _mismatch(value, column)


def _bind_datetime(value: Any, column: MappedColumn) -> datetime.datetime:
    if not isinstance(value, datetime.datetime):
        raise _mismatch(value, column)
    return value


def _bind_enum(value: Any, column: MappedColumn) -> str:
    # Enumerations are stored as text, by member name.
    if not isinstance(value, column.python_type):
        raise _mismatch(value, column)
    return value.name


_BINDERS: dict[ColumnKind, Callable[[Any, MappedColumn], Any]] = {
    ColumnKind.VARCHAR: _bind_text,
    ColumnKind.CHAR: _bind_text,
    ColumnKind.BIGINT: _bind_int,
    ColumnKind.INT: _bind_int,
    ColumnKind.SMALLINT: _bind_int,
    ColumnKind.TINYINT: _bind_int,
    ColumnKind.DOUBLE: _bind_float,
    ColumnKind.FLOAT: _bind_float,
    ColumnKind.BIT: _bind_bit,
    ColumnKind.DECIMAL: _bind_decimal,
    ColumnKind.DATE: _bind_date,
    ColumnKind.DATETIME: _bind_datetime,
    ColumnKind.ENUM: _bind_enum,
}


def bind_value(column: MappedColumn, value: Any) -> Any:
    """
    Return the parameter to bind for `value` in `column` (None binds as NULL).

    Raises:
        TypeError: if `value` is not of the column's Python type. Values are never
            converted across types, so 1.7 is not bound to an integer column as 1.
    """
    if value is None:
        return None
    return _BINDERS[column.kind](value, column)


# -----------------------
# Readers: row value -> Python value
# -----------------------

def _read_text(value: Any, column: MappedColumn) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


def _read_int(value: Any, column: MappedColumn) -> int:
    return int(value)


def _read_float(value: Any, column: MappedColumn) -> float:
    return float(value)


def _read_bit(value: Any, column: MappedColumn) -> bool:
    # MariaDB returns BIT columns as bytes, e.g. b'\x01'
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big") != 0
    return bool(value)


def _read_decimal(value: Any, column: MappedColumn) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _read_date(value: Any, column: MappedColumn) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


def _read_datetime(value: Any, column: MappedColumn) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    return datetime.datetime.fromisoformat(str(value))


def _read_enum(value: Any, column: MappedColumn) -> enum.Enum:
    if isinstance(value, column.python_type):
        return value
    return column.python_type[_read_text(value, column)]


_READERS: dict[ColumnKind, Callable[[Any, MappedColumn], Any]] = {
    ColumnKind.VARCHAR: _read_text,
    ColumnKind.CHAR: _read_text,
    ColumnKind.BIGINT: _read_int,
    ColumnKind.INT: _read_int,
    ColumnKind.SMALLINT: _read_int,
    ColumnKind.TINYINT: _read_int,
    ColumnKind.DOUBLE: _read_float,
    ColumnKind.FLOAT: _read_float,
    ColumnKind.BIT: _read_bit,
    ColumnKind.DECIMAL: _read_decimal,
    ColumnKind.DATE: _read_date,
    ColumnKind.DATETIME: _read_datetime,
    ColumnKind.ENUM: _read_enum,
}


def read_value(column: MappedColumn, value: Any) -> Any:
    """Coerce a fetched value to the declared type of `column` (NULL stays None)."""
    if value is None:
        return None
    return _READERS[column.kind](value, column)
