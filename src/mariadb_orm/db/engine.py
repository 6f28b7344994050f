from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine

from mariadb_orm.config.settings import Settings, get_settings


def create_db_engine(settings: Settings | None = None, url: str | None = None) -> Engine:
    """Build a synchronous engine for Settings.DATABASE_URL (or an explicit `url`)."""
    settings = settings or get_settings()
    return create_engine(
        url or settings.DATABASE_URL,
        echo=settings.SQLALCHEMY_ECHO,   # Set to False in production
        pool_pre_ping=True,              # Enables connection health checks
    )


@contextmanager
def connect(engine: Engine) -> Iterator[Connection]:
    """Yield a connection inside a transaction: committed on success, rolled back on error.

    Usage:
        with connect(engine) as conn:
            UserRepository(conn).save(user)
    """
    with engine.begin() as connection:
        yield connection
