"""
Generic repository providing CRUD operations over one mapped entity.

A concrete repository fixes the entity through its generic parameter:

    class UserRepository(Repository[User]):
        pass

    repo = UserRepository(connection)
    repo.save(User(name="Ann", email="a@x.com"))
    repo.find_by("email", "a@x.com")

The entity is resolved once, in the constructor, from the subclass's declared
parameterization. Every operation issues a single statement with positional parameters
on the caller's SQLAlchemy `Connection`. The repository never commits, rolls back or
closes that connection; transaction boundaries belong to the caller.

Subclasses are free to add their own queries next to the generic ones.
"""
from mariadb_orm.exceptions.base import ConfigurationError, RepositoryError
from mariadb_orm.exceptions.mapper import db_error_handler
from mariadb_orm.mapping.inspection import MappedColumn, columns_of, find_column, table_of
from .binding import bind_value, read_value

import time
import logging
from contextlib import closing
from typing import Any, Generic, Mapping, Sequence, TypeVar, get_args, get_origin

from sqlalchemy.engine import Connection

# Type variable for the entity class
ModelType = TypeVar("ModelType")

# Setup logging
logger = logging.getLogger(__name__)

# Positional placeholder per DB-API paramstyle. MariaDB Connector/Python uses qmark.
_PLACEHOLDERS = {
    "qmark": "?",
    "format": "%s",
    "pyformat": "%s",
}

# helper: mask sensitive keys before logging bound values
_SENSITIVE_KEYS = {"password", "hashed_password", "secret", "token", "access_token", "refresh_token", "ssn"}

def _mask_sensitive(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Return a shallow copy with sensitive values replaced by '***'.
    Only use for low-volume debug logs; prefer logging keys or counts otherwise.
    """
    out = {}
    for k, v in payload.items():
        if k.lower() in _SENSITIVE_KEYS:
            out[k] = "***"
        else:
            out[k] = v
    return out


class Repository(Generic[ModelType]):
    """
    Generic base repository providing find/save/delete operations.

    Type Parameters:
        ModelType: The @table-decorated dataclass this repository manages.
    """

    def __init__(self, connection: Connection):
        """
        Initialize the repository.

        Args:
            connection: A live SQLAlchemy connection. It is used as-is; the repository
                neither opens, commits nor closes it.

        Raises:
            ConfigurationError: if the class does not directly parameterize
                `Repository[...]` with an entity class, or that class has no @table.
        """
        self._model = self._resolve_model()
        self._table_name = table_of(self._model).name
        self._connection = connection

        # Fail before any SQL if a field type is unsupported.
        columns_of(self._model)

    @classmethod
    def _resolve_model(cls) -> type:
        # Only the class's own bases: a subclass of a concrete repository must re-declare it.
        for base in vars(cls).get("__orig_bases__", ()):
            if get_origin(base) is Repository:
                args = get_args(base)
                if args and isinstance(args[0], type):
                    return args[0]
        raise ConfigurationError(f"Cannot create repository for class '{cls.__module__}.{cls.__qualname__}'")

    @property
    def model(self) -> type:
        return self._model

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def connection(self) -> Connection:
        return self._connection

    # =================================================================================================================
    # Statement helpers
    # =================================================================================================================

    @property
    def placeholder(self) -> str:
        """Positional placeholder of the connection's driver ('?' unless the driver uses format style)."""
        paramstyle = getattr(getattr(self._connection, "dialect", None), "paramstyle", None)
        return _PLACEHOLDERS.get(paramstyle, "?") if isinstance(paramstyle, str) else "?"

    def bind_value(self, column: MappedColumn, value: Any) -> Any:
        """Convert `value` to the parameter bound for `column`. Override to customise binding."""
        return bind_value(column, value)

    def _execute(self, sql: str, params: Sequence[Any] = ()):
        if params:
            return self._connection.exec_driver_sql(sql, tuple(params))
        return self._connection.exec_driver_sql(sql)

    def _to_row(self, record: Mapping[str, Any], columns: Sequence[MappedColumn]) -> ModelType:
        values = {c.field_name: read_value(c, record[c.name]) for c in columns}
        return self._model(**values)

    def _select(self, sql: str, params: Sequence[Any] = ()) -> list[ModelType]:
        columns = columns_of(self._model)
        with closing(self._execute(sql, params)) as result:
            return [self._to_row(record, columns) for record in result.mappings().all()]

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    def find_all(self) -> list[ModelType]:
        """
        Return every row of the table as entity instances, in database row order.

        Raises:
            RepositoryError: if the statement fails or a row cannot be mapped.
        """
        sql = f"select * from {self._table_name}"
        start = time.perf_counter()

        with db_error_handler(self._model):
            rows = self._select(sql)

        logger.debug(
            "repo.find_all.success",
            extra={
                "model": self._model.__name__,
                "operation": "find_all",
                "row_count": len(rows),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return rows

    def find_by(self, column_name: str, value: Any) -> list[ModelType]:
        """
        Return the rows whose `column_name` equals `value`.

        Args:
            column_name: Column name as declared with column(...), not the field name
            value: Value to compare with; bound according to the column's kind

        Returns:
            Matching entities (empty list if none match)

        Raises:
            InvalidFieldError: if the entity does not map `column_name` (no SQL is issued).
            RepositoryError: if the statement fails or a row cannot be mapped.
        """
        column = find_column(self._model, column_name)
        sql = f"select * from {self._table_name} where {column.name} = {self.placeholder}"
        start = time.perf_counter()

        with db_error_handler(self._model):
            rows = self._select(sql, [self.bind_value(column, value)])

        logger.debug(
            "repo.find_by.success",
            extra={
                "model": self._model.__name__,
                "operation": "find_by",
                "column": column.name,
                "row_count": len(rows),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return rows

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    def save(self, row: ModelType) -> ModelType:
        """
        Insert `row`, or update the existing row with the same primary key.

        Columns of an auto-increment primary key left as None are omitted so the database
        assigns the key. On a duplicate key every non-primary-key column is overwritten
        with the supplied value.

        Returns:
            The same instance. The generated auto-increment key is not read back, so a
            row saved with `id=None` still has `id=None` afterwards.

        Raises:
            DuplicateError: if a unique key other than the primary key is violated.
            RepositoryError: for any other failure.
        """
        if not isinstance(row, self._model):
            raise RepositoryError(
                f"Cannot save {type(row).__name__} with a repository of {self._model.__name__}"
            )

        included: list[tuple[MappedColumn, Any]] = []
        for column in columns_of(self._model):
            value = getattr(row, column.field_name)
            if column.is_auto_increment and value is None:
                continue
            included.append((column, value))

        updates = [(c, v) for c, v in included if not c.is_primary_key]

        p = self.placeholder
        if included:
            lines = [
                f"insert into {self._table_name} ({', '.join(c.name for c, _ in included)})",
                f"values ({', '.join(p for _ in included)})",
            ]
            if updates:
                lines.append(f"on duplicate key update {', '.join(f'{c.name} = {p}' for c, _ in updates)}")
            sql = "\n".join(lines)
        else:
            sql = f"insert into {self._table_name} () values ()"

        logger.debug(
            "repo.save.start",
            extra={
                "model": self._model.__name__,
                "operation": "save",
                "columns": [c.name for c, _ in included],
                "values": _mask_sensitive({c.name: v for c, v in included}),
            },
        )
        start = time.perf_counter()

        with db_error_handler(self._model):
            # pass 1: every included column, pass 2: the non-primary-key ones again
            params = [self.bind_value(c, v) for c, v in included] + [self.bind_value(c, v) for c, v in updates]
            with closing(self._execute(sql, params)):
                pass

        logger.info(
            "repo.save.success",
            extra={
                "model": self._model.__name__,
                "operation": "save",
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return row

    def delete_all(self) -> None:
        """Delete every row of the table."""
        sql = f"delete from {self._table_name}"

        with db_error_handler(self._model):
            with closing(self._execute(sql)):
                pass

        logger.info("repo.delete_all.success", extra={"model": self._model.__name__, "operation": "delete_all"})

    def delete_by(self, column_name: str, value: Any) -> None:
        """
        Delete the rows whose `column_name` equals `value`.

        Raises:
            InvalidFieldError: if the entity does not map `column_name` (no SQL is issued).
            RepositoryError: if the statement fails.
        """
        column = find_column(self._model, column_name)
        sql = f"delete from {self._table_name} where {column.name} = {self.placeholder}"

        with db_error_handler(self._model):
            with closing(self._execute(sql, [self.bind_value(column, value)])):
                pass

        logger.info(
            "repo.delete_by.success",
            extra={"model": self._model.__name__, "operation": "delete_by", "column": column.name},
        )
