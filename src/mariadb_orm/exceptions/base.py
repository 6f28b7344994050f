"""
Custom exceptions for mapping, schema and repository operations.

Every error raised by this package derives from `RepositoryError`, so callers
only need a single `except RepositoryError` to guard a repository call.
"""

from typing import Iterable

# canonical repository-level exception

class RepositoryError(Exception):
    """
    Base exception for repository/schema errors.

    - message: human-friendly message
    - fields: optional list of column names related to the error (e.g., ['email'])
    - constraint: optional DB constraint name (e.g., 'uk_users_01')
    - error_code: canonical short code (e.g., 'duplicate', 'invalid_field', 'configuration')
    """

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base


class ConfigurationError(RepositoryError):
    """
    Raised when entity metadata cannot be used: missing @table, a repository subclass that
    does not parameterize Repository[...] with a class, an unsupported field type, or a
    constraint that references an undeclared column.

    Always raised before any SQL is issued.
    """

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="configuration")


class InvalidFieldError(RepositoryError):
    """Raised when the caller filters or deletes by a column the entity does not map."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="invalid_field")


class DuplicateError(RepositoryError):
    def __init__(self, message: str, *, fields: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(message, fields=fields, constraint=constraint, error_code="duplicate")


__all__ = [
    "RepositoryError",
    "ConfigurationError",
    "InvalidFieldError",
    "DuplicateError",
]
