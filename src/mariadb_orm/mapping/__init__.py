"""
Entity mapping: declarations, metadata descriptors, column kinds and introspection.

Usage:
    from mariadb_orm.mapping import table, column, ForeignKey, UniqueKey, Check, Int, Char
"""

from .declarations import column, table
from .inspection import MappedColumn, columns_by_name, columns_of, find_column, has_table, table_of
from .metadata import Check, Column, ForeignKey, Table, UniqueKey
from .types import BigInt, Char, ColumnKind, Double, Float, Int, SmallInt, TinyInt

__all__ = [
    "table",
    "column",
    "Table",
    "Column",
    "ForeignKey",
    "UniqueKey",
    "Check",
    "ColumnKind",
    "BigInt",
    "Int",
    "SmallInt",
    "TinyInt",
    "Double",
    "Float",
    "Char",
    "MappedColumn",
    "columns_of",
    "columns_by_name",
    "find_column",
    "has_table",
    "table_of",
]
