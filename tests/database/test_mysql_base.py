import pytest
from mysql.connector import errorcode, errors

from attendance_register.core.exceptions import DuplicateKeyError, StoreUnavailableError
from attendance_register.database.bootstrap import DEFAULT_SCHEMA_PATH, schema_statements
from attendance_register.database.connection import DatabaseConnection, DBConfig
from attendance_register.database.mysql_base import db_cursor, in_clause


class FakeCursor:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.committed = False
        self.rolled_back = False
        self.closed = False
        self.cursor_obj = FakeCursor()

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self):
        self.conn = FakeConnection()

    def connect(self):
        return self.conn


def test_commit_on_success():
    factory = FakeFactory()

    with db_cursor(factory) as (_, cur):
        assert cur is factory.conn.cursor_obj

    assert factory.conn.committed
    assert factory.conn.closed


def test_duplicate_entry_translated():
    factory = FakeFactory()

    with pytest.raises(DuplicateKeyError):
        with db_cursor(factory):
            raise errors.IntegrityError(msg="Duplicate entry 'S1-2021001'", errno=errorcode.ER_DUP_ENTRY)

    assert factory.conn.rolled_back
    assert not factory.conn.committed


def test_connectivity_errors_are_retryable():
    with pytest.raises(StoreUnavailableError):
        with db_cursor(FakeFactory()):
            raise errors.OperationalError(msg="Lost connection", errno=errorcode.CR_SERVER_LOST)


def test_other_connector_errors_propagate_unchanged():
    with pytest.raises(errors.ProgrammingError):
        with db_cursor(FakeFactory()):
            raise errors.ProgrammingError(msg="syntax", errno=errorcode.ER_PARSE_ERROR)


def test_foreign_key_violation_is_not_a_duplicate():
    with pytest.raises(errors.IntegrityError):
        with db_cursor(FakeFactory()):
            raise errors.IntegrityError(msg="fk", errno=errorcode.ER_NO_REFERENCED_ROW_2)


def test_in_clause():
    assert in_clause(["a", "b", "c"]) == "%s, %s, %s"


def test_schema_statements():
    sql = (
        "-- header; with a semicolon\n"
        "CREATE DATABASE IF NOT EXISTS attendance_register;\n"
        "USE attendance_register;\n"
        "CREATE TABLE a (note VARCHAR(5) DEFAULT 'a;b');\n"
        "\n"
        "CREATE TABLE b (id INT);\n"
    )

    assert schema_statements(sql) == [
        "CREATE TABLE a (note VARCHAR(5) DEFAULT 'a;b')",
        "CREATE TABLE b (id INT)",
    ]


def test_closed_connection_factory_is_unavailable():
    conn = DatabaseConnection(DBConfig.from_dict({"database": "attendance_register_test"}))

    assert not conn.is_open
    with pytest.raises(StoreUnavailableError):
        conn.connect()


def test_bundled_schema_is_found_next_to_bootstrap():
    statements = schema_statements(DEFAULT_SCHEMA_PATH.read_text(encoding="utf-8"))

    assert any(s.startswith("CREATE TABLE IF NOT EXISTS scans") for s in statements)
    assert not any(s.upper().startswith(("CREATE DATABASE", "USE ")) for s in statements)
