"""
Core pytest configuration for the entire test suite.

Only cross-cutting setup lives here: logging for the session and the optional MariaDB
engine used by integration tests. Domain fixtures (entities, repositories, the
connection double) are in tests/test_fixtures/ and re-exported at the bottom.
"""

# -------------------------------
# Standard library imports
# -------------------------------
import os
import logging
from urllib.parse import urlparse

# Set the level for noisy third-party loggers before anything imports them.
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from pytest import FixtureRequest

from mariadb_orm.config import Settings
from mariadb_orm.core.logging.builder import setup_logging
from mariadb_orm.db.engine import create_db_engine

logger = logging.getLogger(__name__)


# -------------------------------
# Logging: install package logging once per session
# -------------------------------
@pytest.fixture(scope="session", autouse=True)
def configure_logging(request: FixtureRequest):
    """
    Install the dictConfig logging for the whole test session.

    dictConfig replaces the root handlers, which drops pytest's capture handler; it is
    re-attached so `caplog.records` keeps working.
    """
    setup_logging(Settings(LOG_FORMAT="text", LOG_LEVEL="DEBUG", _env_file=None))

    caplog_plugin = request.config.pluginmanager.getplugin("logging-plugin")
    handler = getattr(caplog_plugin, "caplog_handler", None)
    if handler is not None:
        logging.getLogger().addHandler(handler)

    yield


# ------------------------------------------------------------------------------------------------
# Test database (MariaDB integration tests only)
# ------------------------------------------------------------------------------------------------

def safe_log_db_url(db_url: str) -> str:
    """Return the URL without credentials, for logging."""
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


# MariaDB-only statements (`on duplicate key update`, `create or replace table`) rule out an
# in-memory SQLite fallback, so integration tests run only when a server is provided.
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")


@pytest.fixture(scope="session")
def mariadb_engine():
    if not TEST_DATABASE_URL:
        pytest.skip("TEST_DATABASE_URL is not set")

    logger.info("Using test DB: %s", safe_log_db_url(TEST_DATABASE_URL))
    engine = create_db_engine(Settings(_env_file=None), url=TEST_DATABASE_URL)
    yield engine
    engine.dispose()


@pytest.fixture()
def mariadb_connection(mariadb_engine):
    """
    A connection inside an outer transaction that is rolled back after the test.

    DDL in MariaDB commits implicitly, so tables are created by the integration module's
    own fixture before this transaction starts.
    """
    with mariadb_engine.connect() as connection:
        transaction = connection.begin()
        try:
            yield connection
        finally:
            transaction.rollback()


# Repository / entity fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402,F401
    connection,
    user_repository,
    order_repository,
    fake,
    sample_user,
    create_user,
)
