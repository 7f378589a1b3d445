import sqlite3

import pytest

from db.connection import (
    get_connection, read_query, fetch_one, insert_row, update_row, table_row_count,
)
from db.schema import create_all_tables, LOCAL_TABLES


def test_schema_is_idempotent(db_path):
    create_all_tables(db_path)
    create_all_tables(db_path)
    for table in LOCAL_TABLES:
        assert table_row_count(table, db_path) == 0


def test_insert_update_and_read(db_path):
    create_all_tables(db_path)
    insert_row("sessions", {"id": "s1", "created_at": "2026-01-01T00:00:00+00:00"}, db_path)
    assert update_row("sessions", "id", "s1", {"team_name": "Crew"}, db_path) == 1
    assert update_row("sessions", "id", "nope", {"team_name": "Crew"}, db_path) == 0
    assert fetch_one("SELECT team_name FROM sessions WHERE id = ?", db_path, ["s1"]) == {"team_name": "Crew"}
    df = read_query("SELECT id, team_name FROM sessions", db_path)
    assert df.to_dict("records") == [{"id": "s1", "team_name": "Crew"}]


def test_check_constraints_reject_unknown_values(db_path):
    create_all_tables(db_path)
    with pytest.raises(sqlite3.IntegrityError):
        insert_row("sessions", {"id": "s1", "created_at": "x", "input_method": "magic"}, db_path)


def test_failed_transaction_is_rolled_back(db_path):
    create_all_tables(db_path)
    with pytest.raises(RuntimeError):
        with get_connection(db_path) as conn:
            conn.execute("INSERT INTO sessions (id, created_at) VALUES ('s1', 'x')")
            raise RuntimeError("abort")
    assert table_row_count("sessions", db_path) == 0


def test_foreign_keys_are_enforced(db_path):
    create_all_tables(db_path)
    with pytest.raises(sqlite3.IntegrityError):
        insert_row("wheel_configurations", {
            "id": "c1", "session_id": "ghost", "names": "[]",
            "segment_count": 1, "created_at": "x",
        }, db_path)
