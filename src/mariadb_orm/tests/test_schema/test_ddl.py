import logging
from dataclasses import dataclass
from typing import Optional

import pytest

from mariadb_orm.exceptions import ConfigurationError
from mariadb_orm.mapping import Check, ForeignKey, UniqueKey, column, table
from mariadb_orm.schema import constraint_name, ddl_of_create_table, ddl_of_create_tables
from mariadb_orm.schema.ddl import rows_of_columns, rows_of_primary_keys, rows_of_unique_keys
from ..test_fixtures.entities import Counter, Order, Product, Tag, User


USERS_DDL = "\n".join([
    "create or replace table users (",
    "\tid     bigint        not null auto_increment,",
    "\tname   varchar(50)   not null,",
    "\temail  varchar(100)  not null,",
    "\tconstraint uk_users_01 unique (email),",
    "\tprimary key (id)",
    ") engine = InnoDB",
    "  charset = utf8mb4",
    "  collate = utf8mb4_unicode_ci;",
])

ORDERS_DDL = "\n".join([
    "create or replace table orders (",
    "\tid         bigint          not null,",
    "\tuser_id    bigint          not null,",
    "\tamount     decimal(38, 2)  null,",
    "\tplaced_on  date            null,",
    "\tstatus     varchar(20)     not null,",
    "\tconstraint ck_orders_01 check (amount >= 0),",
    "\tconstraint fk_orders_01 foreign key (user_id) references users (id),",
    "\tprimary key (id)",
    ") engine = InnoDB",
    "  charset = utf8mb4",
    "  collate = utf8mb4_unicode_ci;",
])


class TestCreateTableText:

    def test_users_table(self):
        """
        Behavior:
                - Derive the DDL of the User entity (auto-increment key, two varchars, one unique key).

        Importance:
                - The statement text is compared byte for byte by fixture scripts and migration diffs;
                        padding, ordering and trailing commas are all part of the contract.
        """
        assert ddl_of_create_table(User) == USERS_DDL

    def test_orders_table_with_check_and_foreign_key(self):
        """
        Behavior:
                - Orders carries a check, a foreign key to users and no unique key.
                - Body order is columns, checks, foreign keys, (no unique keys), primary key.

        Importance:
                - Confirms the empty unique-key group does not leave a dangling comma or blank line.
        """
        assert ddl_of_create_table(Order) == ORDERS_DDL

    def test_without_or_replace(self):
        ddl = ddl_of_create_table(User, use_or_replace=False)

        assert ddl.splitlines()[0] == "create table users ("
        assert ddl.splitlines()[1:] == USERS_DDL.splitlines()[1:]

    def test_table_options_are_emitted(self):
        ddl = ddl_of_create_table(Product)

        assert ddl.endswith(") engine = Aria\n  charset = latin1\n  collate = latin1_swedish_ci;")

    def test_column_types_of_markers_and_plain_annotations(self):
        """
        Behavior:
                - Char / SmallInt markers, float, bool and datetime annotations render their SQL types.
                - Fields without column() (Product.notes) are not part of the table.
        """
        # Act
        lines = ddl_of_create_table(Product).splitlines()

        # Assert
        assert lines[1] == "\tcode        char(3)   not null,"
        assert lines[2] == "\tstock       smallint  not null,"
        assert lines[3] == "\tprice       double    null,"
        assert lines[4] == "\tactive      bit       null,"
        assert lines[5] == "\tupdated_at  datetime  null,"
        assert lines[6] == "\tprimary key (code)"
        assert "notes" not in "\n".join(lines)

    def test_last_column_has_no_comma_when_no_constraints_follow(self):
        @table("notes")
        @dataclass
        class Note:
            body: Optional[str] = column("body")

        assert ddl_of_create_table(Note) == "\n".join([
            "create or replace table notes (",
            "\tbody  varchar(255)  null",
            ") engine = InnoDB",
            "  charset = utf8mb4",
            "  collate = utf8mb4_unicode_ci;",
        ])

    def test_single_column_auto_increment_table(self):
        assert ddl_of_create_table(Counter).splitlines()[1:3] == [
            "\tid  bigint  not null auto_increment,",
            "\tprimary key (id)",
        ]

    def test_string_primary_key_is_not_null(self):
        assert ddl_of_create_table(Tag).splitlines()[1] == "\tname  varchar(30)  not null,"

    def test_deterministic(self):
        """
        Behavior:
                - Two derivations of the same entity are byte-identical.
        """
        assert ddl_of_create_table(Order) == ddl_of_create_table(Order)

    def test_logs_generation_at_debug(self, caplog):
        caplog.set_level(logging.DEBUG, logger="mariadb_orm.schema.ddl")

        ddl_of_create_table(User)

        record = next(r for r in caplog.records if r.getMessage() == "schema.ddl.generated")
        assert record.table == "users"
        assert record.columns == 3
        assert record.constraints == 2


class TestPaddingAndAutoIncrement:

    def test_names_and_types_padded_to_widest(self):
        @table("wide")
        @dataclass
        class Wide:
            a: Optional[int] = column("a", primary_key=True)
            long_column_name: Optional[str] = column("long_column_name", length=1000)

        rows = rows_of_columns(Wide)

        # "a" is padded to the 16-character name, bigint to the 13-character varchar(1000)
        assert rows[0] == "\ta" + " " * 17 + "bigint" + " " * 9 + "not null"
        assert rows[1] == "\tlong_column_name  varchar(1000)  null"

    def test_auto_increment_ignored_without_primary_key(self):
        @table("seq")
        @dataclass
        class Seq:
            id: Optional[int] = column("id", primary_key=True)
            n: Optional[int] = column("n", auto_increment=True)

        assert all("auto_increment" not in row for row in rows_of_columns(Seq))

    def test_auto_increment_ignored_on_non_integer_key(self):
        @table("codes")
        @dataclass
        class Code:
            code: Optional[str] = column("code", length=8, primary_key=True, auto_increment=True)

        assert rows_of_columns(Code) == ["\tcode  varchar(8)  not null"]

    def test_nullable_flag_on_primary_key_is_overridden(self):
        @table("k")
        @dataclass
        class K:
            id: Optional[int] = column("id", primary_key=True, nullable=True)

        assert rows_of_columns(K) == ["\tid  bigint  not null"]


class TestConstraintNaming:

    def test_constraint_name_is_two_digit_ordinal(self):
        assert constraint_name("fk", "orders", 1) == "fk_orders_01"
        assert constraint_name("uk", "users", 12) == "uk_users_12"

    def test_kth_constraint_numbered_in_declaration_order(self):
        """
        Behavior:
                - With two unique keys, two checks and two foreign keys, each kind is numbered
                        independently from 01 in declaration order.
                - Composite keys list their columns comma-separated.
        """
        @table(
            "lines",
            foreign_keys=[
                ForeignKey(["order_id"], Order, ["id"]),
                ForeignKey(["owner_id"], User, ["id"]),
            ],
            unique_keys=[UniqueKey(["order_id", "position"]), UniqueKey(["sku"])],
            checks=[Check("position > 0"), Check("sku <> ''")],
        )
        @dataclass
        class Line:
            order_id: Optional[int] = column("order_id", primary_key=True)
            position: Optional[int] = column("position", primary_key=True)
            owner_id: Optional[int] = column("owner_id")
            sku: Optional[str] = column("sku", length=20)

        # Act
        body = ddl_of_create_table(Line).splitlines()[5:-3]

        # Assert
        assert body == [
            "\tconstraint ck_lines_01 check (position > 0),",
            "\tconstraint ck_lines_02 check (sku <> ''),",
            "\tconstraint fk_lines_01 foreign key (order_id) references orders (id),",
            "\tconstraint fk_lines_02 foreign key (owner_id) references users (id),",
            "\tconstraint uk_lines_01 unique (order_id, position),",
            "\tconstraint uk_lines_02 unique (sku),",
            "\tprimary key (order_id, position)",
        ]

    def test_constraint_rows_are_tab_indented(self):
        """
        Behavior:
                - Every body row starts with a tab, the primary key row included.
        """
        assert rows_of_primary_keys(User) == ["\tprimary key (id)"]
        assert rows_of_unique_keys(User) == ["\tconstraint uk_users_01 unique (email)"]
        assert ddl_of_create_table(Tag).splitlines()[2] == "\tprimary key (name)"

    def test_no_primary_key_row_without_key_columns(self):
        @table("notes")
        @dataclass
        class Note:
            body: Optional[str] = column("body")

        assert rows_of_primary_keys(Note) == []


class TestDerivationErrors:

    def test_missing_table_decorator(self):
        @dataclass
        class Plain:
            id: Optional[int] = column("id", primary_key=True)

        with pytest.raises(ConfigurationError) as exc_info:
            ddl_of_create_table(Plain)

        assert "is not decorated with @table" in str(exc_info.value)

    def test_foreign_key_to_unmapped_class(self):
        class Unmapped:
            pass

        @table("refs", foreign_keys=[ForeignKey(["other_id"], Unmapped, ["id"])])
        @dataclass
        class Ref:
            other_id: Optional[int] = column("other_id")

        with pytest.raises(ConfigurationError):
            ddl_of_create_table(Ref)

    def test_foreign_key_source_column_missing(self):
        @table("refs", foreign_keys=[ForeignKey(["user"], User, ["id"])])
        @dataclass
        class Ref:
            user_id: Optional[int] = column("user_id")

        with pytest.raises(ConfigurationError) as exc_info:
            ddl_of_create_table(Ref)

        assert exc_info.value.fields == ["user"]

    def test_foreign_key_target_column_missing(self):
        @table("refs", foreign_keys=[ForeignKey(["user_id"], User, ["uid"])])
        @dataclass
        class Ref:
            user_id: Optional[int] = column("user_id")

        with pytest.raises(ConfigurationError) as exc_info:
            ddl_of_create_table(Ref)

        assert exc_info.value.fields == ["uid"]
        assert "User" in exc_info.value.message

    def test_unique_key_column_missing(self):
        @table("accounts", unique_keys=[UniqueKey(["login"])])
        @dataclass
        class Account:
            id: Optional[int] = column("id", primary_key=True)

        with pytest.raises(ConfigurationError) as exc_info:
            ddl_of_create_table(Account)

        assert exc_info.value.error_code == "configuration"
        assert exc_info.value.fields == ["login"]


class TestCreateTables:

    def test_statements_separated_by_blank_line_in_given_order(self):
        assert ddl_of_create_tables(User, Order) == USERS_DDL + "\n\n" + ORDERS_DDL

    def test_use_or_replace_applies_to_all(self):
        ddl = ddl_of_create_tables(User, Order, use_or_replace=False)

        assert "or replace" not in ddl
        assert ddl.count("create table") == 2
