from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache


class Settings(BaseSettings):
    """
    Settings loaded from the environment (and an optional `.env` file).

    Only the engine helper, the logging builder and the integration tests read them;
    repositories work with whatever connection the caller hands in.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    MARIADB_DRIVER: str = "mariadbconnector"
    MARIADB_USERNAME: str = "root"
    MARIADB_PASSWORD: str = ""
    MARIADB_HOST: str = "localhost"
    MARIADB_PORT: int = 3306
    MARIADB_DB: str = "mariadb_orm"

    # Test database configuration
    TEST_MARIADB_DB: str | None = None
    TESTING: bool = False

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path | None = None
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the SQLAlchemy URL of the MariaDB database.

        When `TESTING` is set and `TEST_MARIADB_DB` is provided the test database is
        used instead of `MARIADB_DB`, so test runs never touch the regular schema.
        """
        database = self.TEST_MARIADB_DB if self.TESTING and self.TEST_MARIADB_DB else self.MARIADB_DB
        return (
            f"mariadb+{self.MARIADB_DRIVER}://"
            f"{self.MARIADB_USERNAME}:{self.MARIADB_PASSWORD}@"
            f"{self.MARIADB_HOST}:{self.MARIADB_PORT}/"
            f"{database}"
        )

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """Upper-case LOG_LEVEL so 'debug' and 'DEBUG' are both accepted."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return v.lower() if isinstance(v, str) else v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
