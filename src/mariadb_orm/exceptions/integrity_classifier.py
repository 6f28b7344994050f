r"""
Integrity error classification.

Two levels of exception handling are used in this package:

1. Constraint-specific errors (low-level, technical classification)
```
    class ConstraintViolationError(RepositoryError): ...
    class UniqueConstraintError(ConstraintViolationError): ...
    class NotNullConstraintError(ConstraintViolationError): ...
    class ForeignKeyConstraintError(ConstraintViolationError): ...
    class CheckConstraintError(ConstraintViolationError): ...
    class UnknownIntegrityError(ConstraintViolationError): ...
```
These only label "what exactly failed in the database". They are returned by
`classify_integrity_error()` and never raised to callers.

2. Package-level errors (`RepositoryError`, `DuplicateError`, ...) are what the
repository raises; `mapper.raise_mapped_integrity_error()` turns the label from (1)
into one of them.

| Constraint-level (internal) | → | Package-level (external)               |
| --------------------------- | - | -------------------------------------- |
| `UniqueConstraintError`     | → | `DuplicateError`                       |
| `NotNullConstraintError`    | → | `RepositoryError("Missing ...")`       |
| `ForeignKeyConstraintError` | → | `RepositoryError("... referenced ...")`|
| `CheckConstraintError`      | → | `RepositoryError("Business rule ...")` |
"""
import logging
import re
from enum import IntEnum
from typing import Type
from sqlalchemy.exc import IntegrityError
from .base import RepositoryError

logger = logging.getLogger(__name__)

# =================================================================================================================
# Constraint-specific exceptions
# =================================================================================================================


class ConstraintViolationError(RepositoryError):
    """Base for integrity/constraint violations (subclass of RepositoryError)."""
    pass


class UniqueConstraintError(ConstraintViolationError):
    """Unique constraint / duplicate key value (primary or unique key)."""
    pass


class NotNullConstraintError(ConstraintViolationError):
    """NOT NULL violation (missing required column)."""
    pass


class ForeignKeyConstraintError(ConstraintViolationError):
    """Foreign key constraint violated (either side of the reference)."""
    pass


class CheckConstraintError(ConstraintViolationError):
    """CHECK constraint violated."""
    pass


class UnknownIntegrityError(ConstraintViolationError):
    """Unrecognized integrity error."""
    pass


# =================================================================================================================
# MariaDB error code mapping
# =================================================================================================================

# https://mariadb.com/kb/en/mariadb-error-code-reference/
class MariaDBErrorCodes(IntEnum):
    DUP_ENTRY = 1062
    BAD_NULL_ERROR = 1048
    ROW_IS_REFERENCED_2 = 1451
    NO_REFERENCED_ROW_2 = 1452
    CONSTRAINT_FAILED = 4025
    # MySQL reports CHECK failures with its own code
    CHECK_CONSTRAINT_VIOLATED = 3819


ERRNO_EXCEPTION_MAP = {
    MariaDBErrorCodes.DUP_ENTRY: UniqueConstraintError,
    MariaDBErrorCodes.BAD_NULL_ERROR: NotNullConstraintError,
    MariaDBErrorCodes.ROW_IS_REFERENCED_2: ForeignKeyConstraintError,
    MariaDBErrorCodes.NO_REFERENCED_ROW_2: ForeignKeyConstraintError,
    MariaDBErrorCodes.CONSTRAINT_FAILED: CheckConstraintError,
    MariaDBErrorCodes.CHECK_CONSTRAINT_VIOLATED: CheckConstraintError,
}

# "Duplicate entry 'a@x.com' for key 'uk_users_01'"   (MariaDB may also qualify it as 'users.uk_users_01')
_DUPLICATE_KEY_RE = re.compile(r"for key '(?:[^'.]+\.)?(?P<name>[^']+)'", flags=re.IGNORECASE)
# "... a foreign key constraint fails (`db`.`orders`, CONSTRAINT `fk_orders_01` FOREIGN KEY ..."
# "CONSTRAINT `ck_users_01` failed for `db`.`users`"
_CONSTRAINT_RE = re.compile(r"constraint `(?P<name>[^`]+)`", flags=re.IGNORECASE)


# =================================================================================================================
# Integrity Error Classifiers
# =================================================================================================================

def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _driver_errno(orig) -> int | None:
    """
    Return the numeric server error code from a DB-API exception.

    MariaDB Connector/Python exposes `.errno`; PyMySQL and mysqlclient put the code
    in `args[0]`.
    """
    errno = getattr(orig, "errno", None)
    if isinstance(errno, int):
        return errno
    args = getattr(orig, "args", None) or ()
    if args and isinstance(args[0], int):
        return args[0]
    return None


def extract_constraint_name(msg: str) -> str | None:
    """Best-effort extraction of the constraint/key name from a MariaDB message."""
    if not msg:
        return None
    m = _DUPLICATE_KEY_RE.search(msg)
    if m:
        return m.group("name")
    m = _CONSTRAINT_RE.search(msg)
    if m:
        return m.group("name")
    return None


def _classify_from_mariadb_errno(orig) -> tuple[Type[ConstraintViolationError] | None, str | None]:
    """
    Classify a MariaDB integrity error based on its server error number.
    """
    errno = _driver_errno(orig)
    if errno is None:
        return None, None

    constraint_name = extract_constraint_name(str(orig))
    exception_class = ERRNO_EXCEPTION_MAP.get(errno)

    if exception_class:
        logger.debug("MariaDB integrity diagnostic",
                     extra={"errno": errno, "constraint_name": constraint_name})
        return exception_class, constraint_name

    # Unknown errno: warn (noticeable) but keep raw diagnostics at DEBUG only.
    logger.warning(
        "Unknown MariaDB integrity error code encountered",
        extra={"errno": errno, "constraint_name": constraint_name}
    )
    logger.debug("MariaDB orig diagnostic (raw)", extra={"orig_repr": repr(orig)})

    return UnknownIntegrityError, constraint_name


def _classify_from_generic_message(msg: str) -> tuple[Type[ConstraintViolationError], str | None]:
    """
    Classify integrity error based on message content (fallback for drivers without errno).
    """
    normalized = msg.lower()
    constraint_name = extract_constraint_name(msg)

    if _match_any(normalized, ["unique constraint", "unique failed", "duplicate entry", "duplicate"]):
        return UniqueConstraintError, constraint_name

    if _match_any(normalized, ["not null constraint", "cannot be null", "not null"]):
        return NotNullConstraintError, constraint_name

    if _match_any(normalized, ["foreign key constraint", "foreign key"]):
        return ForeignKeyConstraintError, constraint_name

    if _match_any(normalized, ["check constraint", "check failed"]) or (
        constraint_name is not None and "failed for" in normalized
    ):
        return CheckConstraintError, constraint_name

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    logger.debug("Unknown integrity raw message", extra={"raw": msg})
    return UnknownIntegrityError, constraint_name


def classify_integrity_error(exc: IntegrityError) -> tuple[Type[ConstraintViolationError], str | None]:
    """
    Classify a SQLAlchemy IntegrityError into a specific ConstraintViolationError subclass.

    Returns:
        A tuple of (ExceptionClass, constraint_name if available)
    """
    orig = exc.orig

    exception_class, constraint_name = _classify_from_mariadb_errno(orig)
    if exception_class is not None:
        return exception_class, constraint_name

    return _classify_from_generic_message(str(orig) if orig is not None else str(exc))
