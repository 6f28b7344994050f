# mariadb_orm/core/logging/filters.py
"""
Redaction filter.

Repository and mapper events attach bound values and column names through `extra`.
RedactFilter runs on every handler and masks sensitive keys before any formatter sees
the record, both as top-level record attributes and inside dict-valued extras such as
the `values` mapping logged by `repo.save.start`.
"""

import logging
from logging import LogRecord
from typing import Any

REDACTED = "***REDACTED***"


class RedactFilter(logging.Filter):
    SENSITIVE = {"password", "hashed_password", "secret", "token", "access_token", "refresh_token", "ssn", "authorization"}

    def filter(self, record: LogRecord) -> bool:
        for key, value in list(record.__dict__.items()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = REDACTED
            elif isinstance(value, dict):
                record.__dict__[key] = self._scrub(value)
        return True

    def _scrub(self, payload: dict) -> dict[Any, Any]:
        out = {}
        for k, v in payload.items():
            if isinstance(k, str) and k.lower() in self.SENSITIVE:
                out[k] = REDACTED
            elif isinstance(v, dict):
                out[k] = self._scrub(v)
            else:
                out[k] = v
        return out
