"""
Schema deriver: build a MariaDB `create table` statement from an entity's metadata.

The output is a byte-exact contract (fixtures and migration diffs compare it as text):

    create or replace table users (
    	id     bigint        not null auto_increment,
    	name   varchar(50)   not null,
    	email  varchar(100)  not null,
    	constraint uk_users_01 unique (email),
    	primary key (id)
    ) engine = InnoDB
      charset = utf8mb4
      collate = utf8mb4_unicode_ci;

Body order is columns, checks, foreign keys, unique keys, primary key. Constraint names
are `<prefix>_<table>_<NN>`, NN being the 1-based declaration ordinal.
"""

import logging

from mariadb_orm.exceptions.base import ConfigurationError
from mariadb_orm.mapping.inspection import MappedColumn, columns_by_name, columns_of, table_of

logger = logging.getLogger(__name__)

LINE_SEPARATOR = "\n"


def constraint_name(prefix: str, table_name: str, index: int) -> str:
    return f"{prefix}_{table_name}_{index:02d}"


def _checked_columns(entity, names, available: dict[str, MappedColumn]) -> list[str]:
    for name in names:
        if name not in available:
            raise ConfigurationError(
                f"Column '{name}' is not present in class '{entity.__module__}.{entity.__qualname__}'",
                fields=[name],
            )
    return list(names)


def rows_of_primary_keys(entity) -> list[str]:
    columns = [c.name for c in columns_of(entity) if c.is_primary_key]
    return [f"\tprimary key ({', '.join(columns)})"] if columns else []


def rows_of_foreign_keys(entity) -> list[str]:
    info = table_of(entity)
    if not info.foreign_keys:
        return []
    own = columns_by_name(entity)
    rows = []
    for foreign_key in info.foreign_keys:
        from_columns = _checked_columns(entity, foreign_key.columns, own)
        # table_of() raises if the referenced class is not mapped
        into_table = table_of(foreign_key.reference_table).name
        into_columns = _checked_columns(
            foreign_key.reference_table, foreign_key.reference_columns, columns_by_name(foreign_key.reference_table)
        )
        name = constraint_name("fk", info.name, len(rows) + 1)
        rows.append("\t" + " ".join([
            "constraint", name, "foreign key", f"({', '.join(from_columns)})",
            "references", into_table, f"({', '.join(into_columns)})",
        ]))
    return rows


def rows_of_unique_keys(entity) -> list[str]:
    info = table_of(entity)
    if not info.unique_keys:
        return []
    own = columns_by_name(entity)
    rows = []
    for unique_key in info.unique_keys:
        columns = _checked_columns(entity, unique_key.columns, own)
        name = constraint_name("uk", info.name, len(rows) + 1)
        rows.append("\t" + " ".join(["constraint", name, "unique", f"({', '.join(columns)})"]))
    return rows


def rows_of_checks(entity) -> list[str]:
    info = table_of(entity)
    rows = []
    for check in info.checks:
        name = constraint_name("ck", info.name, len(rows) + 1)
        rows.append("\t" + " ".join(["constraint", name, "check", f"({check.expression})"]))
    return rows


def rows_of_columns(entity) -> list[str]:
    """Column definition lines, with names and types padded to the widest in the table."""
    columns = columns_of(entity)
    max_name = max((len(c.name) for c in columns), default=0)
    max_type = max((len(c.sql_type) for c in columns), default=0)

    rows = []
    for c in columns:
        row = [
            "\t" + c.name,
            " " * (max_name - len(c.name)),
            c.sql_type,
            " " * (max_type - len(c.sql_type)),
            "null" if c.is_nullable else "not null",
        ]
        if c.is_auto_increment:
            row.append("auto_increment")
        rows.append(" ".join(row))
    return rows


def ddl_of_create_table(entity, use_or_replace: bool = True) -> str:
    """
    Return the `create [or replace] table` statement for an entity class.

    Raises:
        ConfigurationError: missing @table (on the entity or a referenced entity), an
            unsupported field type, or a constraint naming an undeclared column.
    """
    primary_keys = rows_of_primary_keys(entity)
    foreign_keys = rows_of_foreign_keys(entity)
    unique_keys = rows_of_unique_keys(entity)
    checks = rows_of_checks(entity)
    columns = rows_of_columns(entity)

    info = table_of(entity)
    groups = [columns, checks, foreign_keys, unique_keys, primary_keys]

    lines = [f"create {'or replace ' if use_or_replace else ''}table {info.name} ("]
    for position, group in enumerate(groups):
        followed = any(groups[position + 1:])
        for i, row in enumerate(group):
            ends_with_comma = i < len(group) - 1 or followed
            lines.append(row + ("," if ends_with_comma else ""))
    lines.append(f") engine = {info.engine}")
    lines.append(f"  charset = {info.charset}")
    lines.append(f"  collate = {info.collate};")

    logger.debug(
        "schema.ddl.generated",
        extra={
            "model": entity.__name__,
            "table": info.name,
            "columns": len(columns),
            "constraints": len(checks) + len(foreign_keys) + len(unique_keys) + len(primary_keys),
        },
    )
    return LINE_SEPARATOR.join(lines)


def ddl_of_create_tables(*entities, use_or_replace: bool = True) -> str:
    """Statements for several entities, in the given order, separated by a blank line."""
    return (LINE_SEPARATOR * 2).join(ddl_of_create_table(e, use_or_replace) for e in entities)
