import re
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError

from .integrity_classifier import (
    classify_integrity_error,
    UniqueConstraintError,
    NotNullConstraintError,
    ForeignKeyConstraintError,
    CheckConstraintError,
)
from .base import DuplicateError, RepositoryError
from mariadb_orm.mapping.inspection import columns_of, has_table, table_of

logger = logging.getLogger(__name__)

# -----------------------
# Column extraction helpers
# -----------------------

def _extract_columns_not_null(msg: str) -> list[str] | None:
    # MariaDB: "Column 'name' cannot be null"
    m = re.search(r"column '(?P<col>[^']+)' cannot be null", msg or "", flags=re.IGNORECASE)
    if m:
        return [m.group("col")]
    return None


def columns_for_constraint(entity, constraint_name: str | None) -> list[str] | None:
    """
    Map a constraint name reported by the server back to the entity's columns.

    Understands the names the schema deriver generates (fk_<table>_NN, uk_<table>_NN),
    MariaDB's 'PRIMARY' key, and single-column unique indexes named after their column.
    """
    if entity is None or not constraint_name:
        return None

    if not has_table(entity):
        return None
    info = table_of(entity)
    columns = columns_of(entity)

    if constraint_name.upper() == "PRIMARY":
        return [c.name for c in columns if c.is_primary_key] or None

    m = re.fullmatch(rf"(?P<prefix>fk|uk)_{re.escape(info.name)}_(?P<ordinal>\d+)", constraint_name)
    if m:
        declared = info.foreign_keys if m.group("prefix") == "fk" else info.unique_keys
        ordinal = int(m.group("ordinal"))
        if 1 <= ordinal <= len(declared):
            return list(declared[ordinal - 1].columns)
        return None

    if constraint_name in {c.name for c in columns}:
        return [constraint_name]
    return None


# -----------------------
# Mapper
# -----------------------

def raise_mapped_integrity_error(exc: IntegrityError, entity=None) -> None:
    """
    Map a SQLAlchemy IntegrityError to a package-level exception and raise it.
    Populates `.fields` and `.constraint` where possible.
    """
    exc_cls, constraint_name = classify_integrity_error(exc)
    raw = str(exc.orig) if exc.orig is not None else str(exc)
    columns = columns_for_constraint(entity, constraint_name)

    model_part = entity.__name__ if entity is not None else "Record"

    # UNIQUE / Duplicate
    if exc_cls is UniqueConstraintError:
        # INFO: duplicates are an expected client-level scenario
        logger.info(
            "mapper.duplicate_detected",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise DuplicateError(f"{model_part} already exists for field(s): {', '.join(columns)}",
                                 fields=columns, constraint=constraint_name) from exc
        if constraint_name:
            raise DuplicateError(f"{model_part} already exists (constraint: {constraint_name})",
                                 fields=None, constraint=constraint_name) from exc
        raise DuplicateError(f"{model_part} already exists (unique constraint)", fields=None) from exc

    # NOT NULL / Missing required column
    if exc_cls is NotNullConstraintError:
        columns = columns or _extract_columns_not_null(raw)
        logger.info(
            "mapper.not_null_violation",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise RepositoryError(f"Missing required field(s): {', '.join(columns)} for {model_part}",
                                  fields=columns, constraint=constraint_name) from exc
        raise RepositoryError(f"Missing required field for {model_part}") from exc

    # FOREIGN KEY
    if exc_cls is ForeignKeyConstraintError:
        logger.info(
            "mapper.foreign_key_violation",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise RepositoryError(f"{model_part} referenced entity not found for field(s): {', '.join(columns)}",
                                  fields=columns, constraint=constraint_name) from exc
        if constraint_name:
            raise RepositoryError(f"{model_part} foreign key violation (constraint: {constraint_name})",
                                  fields=None, constraint=constraint_name) from exc
        raise RepositoryError(f"{model_part} foreign key constraint violated") from exc

    # CHECK
    if exc_cls is CheckConstraintError:
        # Keep the raw DB message at DEBUG level only
        logger.debug(
            "mapper.check_constraint_failure",
            extra={"model": model_part, "raw": raw, "constraint": constraint_name},
        )
        raise RepositoryError(
            f"{model_part} business rule violated (check constraint).", fields=None, constraint=constraint_name
        ) from exc

    # Unknown/unclassified integrity error
    logger.warning(
        "mapper.unknown_integrity_error",
        extra={"model": model_part, "constraint": constraint_name},
    )
    logger.debug("mapper.unknown_integrity_raw", extra={"model": model_part, "raw": raw})
    raise RepositoryError(f"{model_part} database integrity error.", constraint=constraint_name) from exc


# -----------------------
# Context manager to DRY error handling in repositories
# -----------------------
@contextmanager
def db_error_handler(entity=None):
    """
    Usage:
        with db_error_handler(self.model):
            ... statement execution and row mapping ...

    Integrity errors are mapped to package-level exceptions; anything else unexpected is
    wrapped in a RepositoryError. Package errors raised inside pass through unchanged.
    The connection is left untouched: no rollback is attempted here, transactions belong
    to the caller.
    """
    model_name = entity.__name__ if entity is not None else None
    try:
        yield
    except RepositoryError:
        raise
    except IntegrityError as exc:
        raise_mapped_integrity_error(exc, entity)
    except Exception as exc:
        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        raise RepositoryError(f"Failed to operate on {model_name or 'database'}") from exc
