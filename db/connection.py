"""SQLite connection manager for the local session store."""

import os
import sqlite3
import logging
from contextlib import contextmanager
from typing import Optional

import pandas as pd

logger = logging.getLogger(__name__)


@contextmanager
def get_connection(db_path: str, foreign_keys: bool = True):
    """Context manager for SQLite connections. Commits on success, rolls back and re-raises on error."""
    if db_path != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA journal_mode=WAL")
    if foreign_keys:
        conn.execute("PRAGMA foreign_keys=ON")
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def read_query(query: str, db_path: str, params=None) -> pd.DataFrame:
    """Execute a SQL query and return results as DataFrame."""
    with get_connection(db_path) as conn:
        return pd.read_sql_query(query, conn, params=params)


def fetch_one(query: str, db_path: str, params=None) -> Optional[dict]:
    """First row of a query as a dict, or None."""
    with get_connection(db_path) as conn:
        conn.row_factory = sqlite3.Row
        row = conn.execute(query, params or []).fetchone()
    return dict(row) if row is not None else None


def fetch_all(query: str, db_path: str, params=None) -> list[dict]:
    with get_connection(db_path) as conn:
        conn.row_factory = sqlite3.Row
        return [dict(r) for r in conn.execute(query, params or []).fetchall()]


def execute(query: str, db_path: str, params=None) -> int:
    """Execute a SQL statement (INSERT, UPDATE, DELETE, etc.). Returns affected rows."""
    with get_connection(db_path) as conn:
        return conn.execute(query, params or []).rowcount


def insert_row(table_name: str, row: dict, db_path: str):
    """Insert one dict as a row; keys are column names."""
    columns = ", ".join(row)
    placeholders = ", ".join("?" for _ in row)
    execute(
        f"INSERT INTO {table_name} ({columns}) VALUES ({placeholders})",
        db_path, list(row.values()),
    )
    logger.debug(f"Inserted row into {table_name}")


def update_row(table_name: str, key: str, key_value, values: dict, db_path: str) -> int:
    """Update columns of the row whose `key` column equals key_value."""
    if not values:
        return 0
    assignments = ", ".join(f"{col} = ?" for col in values)
    return execute(
        f"UPDATE {table_name} SET {assignments} WHERE {key} = ?",
        db_path, list(values.values()) + [key_value],
    )


def table_row_count(table_name: str, db_path: str) -> int:
    """Get the row count of a table."""
    df = read_query(f"SELECT COUNT(*) as cnt FROM {table_name}", db_path)
    return int(df["cnt"].iloc[0])
