import pytest
from sqlalchemy.exc import IntegrityError

from mariadb_orm.exceptions.integrity_classifier import (
    CheckConstraintError,
    ForeignKeyConstraintError,
    NotNullConstraintError,
    UniqueConstraintError,
    UnknownIntegrityError,
    classify_integrity_error,
    extract_constraint_name,
)


class MariaDBError(Exception):
    """DB-API error shaped like MariaDB Connector/Python's (code on `.errno`)."""

    def __init__(self, errno, message):
        super().__init__(message)
        self.errno = errno


def wrap(orig) -> IntegrityError:
    return IntegrityError("stmt", (), orig)


class TestClassifyByErrno:

    @pytest.mark.parametrize(
        "errno, message, expected_cls, expected_name",
        [
            (1062, "Duplicate entry 'a@x.com' for key 'uk_users_01'", UniqueConstraintError, "uk_users_01"),
            (1062, "Duplicate entry '1' for key 'PRIMARY'", UniqueConstraintError, "PRIMARY"),
            (1062, "Duplicate entry 'a' for key 'users.uk_users_01'", UniqueConstraintError, "uk_users_01"),
            (1048, "Column 'name' cannot be null", NotNullConstraintError, None),
            (1452, "a foreign key constraint fails (`db`.`orders`, CONSTRAINT `fk_orders_01` FOREIGN KEY ...)",
             ForeignKeyConstraintError, "fk_orders_01"),
            (1451, "Cannot delete or update a parent row: ... CONSTRAINT `fk_orders_01` ...",
             ForeignKeyConstraintError, "fk_orders_01"),
            (4025, "CONSTRAINT `ck_orders_01` failed for `db`.`orders`", CheckConstraintError, "ck_orders_01"),
            (3819, "Check constraint 'ck_orders_01' is violated.", CheckConstraintError, None),
        ],
    )
    def test_mariadb_codes(self, errno, message, expected_cls, expected_name):
        assert classify_integrity_error(wrap(MariaDBError(errno, message))) == (expected_cls, expected_name)

    def test_errno_in_first_arg(self):
        """
        Behavior:
                - PyMySQL/mysqlclient carry the code as args[0]; it is honoured the same way.
        """
        orig = Exception(1062, "Duplicate entry 'x' for key 'uk_users_01'")

        exc_cls, _ = classify_integrity_error(wrap(orig))

        assert exc_cls is UniqueConstraintError

    def test_unknown_errno_is_logged_and_labelled_unknown(self, caplog):
        exc_cls, _ = classify_integrity_error(wrap(MariaDBError(1999, "something odd")))

        assert exc_cls is UnknownIntegrityError
        assert any(r.levelname == "WARNING" for r in caplog.records)


class TestClassifyByMessage:

    @pytest.mark.parametrize(
        "message, expected_cls",
        [
            ("UNIQUE constraint failed: users.email", UniqueConstraintError),
            ("NOT NULL constraint failed: users.name", NotNullConstraintError),
            ("FOREIGN KEY constraint failed", ForeignKeyConstraintError),
            ("CHECK constraint failed: amount", CheckConstraintError),
            ("mystery", UnknownIntegrityError),
        ],
    )
    def test_fallback_keywords(self, message, expected_cls):
        assert classify_integrity_error(wrap(Exception(message)))[0] is expected_cls


class TestExtractConstraintName:

    def test_none_for_empty_message(self):
        assert extract_constraint_name("") is None

    def test_backquoted_constraint(self):
        assert extract_constraint_name("CONSTRAINT `uk_a_02` failed") == "uk_a_02"
