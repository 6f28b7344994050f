"""
mariadb_orm: map annotated dataclasses onto MariaDB tables.

    @table("users", unique_keys=[UniqueKey(["email"])])
    @dataclass
    class User:
        id: int | None = column("id", primary_key=True, auto_increment=True)
        name: str | None = column("name", length=50, nullable=False)
        email: str | None = column("email", length=100, nullable=False)

    print(ddl_of_create_table(User))

    class UserRepository(Repository[User]):
        pass
"""

from .exceptions import ConfigurationError, DuplicateError, InvalidFieldError, RepositoryError
from .mapping import (
    BigInt,
    Char,
    Check,
    Double,
    Float,
    ForeignKey,
    Int,
    SmallInt,
    TinyInt,
    UniqueKey,
    column,
    columns_of,
    table,
)
from .repositories import Repository
from .schema import ddl_of_create_table, ddl_of_create_tables

__all__ = [
    "table",
    "column",
    "ForeignKey",
    "UniqueKey",
    "Check",
    "BigInt",
    "Int",
    "SmallInt",
    "TinyInt",
    "Double",
    "Float",
    "Char",
    "columns_of",
    "ddl_of_create_table",
    "ddl_of_create_tables",
    "Repository",
    "RepositoryError",
    "ConfigurationError",
    "InvalidFieldError",
    "DuplicateError",
]
