# mariadb_orm/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # Package-level errors (RepositoryError, ConfigurationError, ...)
# │   ├── integrity_classifier.py    # MariaDB / generic integrity error classification
# │   └── mapper.py                  # Map DB errors to package-level errors

from .base import (
    RepositoryError,
    ConfigurationError,
    InvalidFieldError,
    DuplicateError,
)

__all__ = [
    "RepositoryError",
    "ConfigurationError",
    "InvalidFieldError",
    "DuplicateError",
]
