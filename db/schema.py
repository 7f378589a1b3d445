"""SQLite schema for the local session store. Mirrors the hosted tables."""

import logging
from db.connection import get_connection

logger = logging.getLogger(__name__)

LOCAL_TABLES = ["sessions", "wheel_configurations", "spin_results"]

SCHEMA_SQL = """
-- ============================================================
-- SESSIONS
-- ============================================================

CREATE TABLE IF NOT EXISTS sessions (
    id              TEXT PRIMARY KEY,
    created_at      TEXT NOT NULL,
    updated_at      TEXT,
    team_name       TEXT,
    input_method    TEXT CHECK (input_method IN ('custom', 'random', 'numbers')),
    device_type     TEXT CHECK (device_type IN ('mobile', 'desktop')),
    ip_address      TEXT
);

CREATE INDEX IF NOT EXISTS idx_sessions_created ON sessions(created_at);

-- ============================================================
-- WHEEL CONFIGURATIONS
-- ============================================================

CREATE TABLE IF NOT EXISTS wheel_configurations (
    id              TEXT PRIMARY KEY,
    session_id      TEXT NOT NULL,
    names           TEXT NOT NULL,          -- JSON array, wheel order
    segment_count   INTEGER NOT NULL CHECK (segment_count > 0),
    created_at      TEXT NOT NULL,
    FOREIGN KEY (session_id) REFERENCES sessions(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_configs_session ON wheel_configurations(session_id);

-- ============================================================
-- SPIN RESULTS
-- ============================================================

CREATE TABLE IF NOT EXISTS spin_results (
    id                  TEXT PRIMARY KEY,
    session_id          TEXT NOT NULL,
    configuration_id    TEXT NOT NULL,
    winner              TEXT NOT NULL,
    is_respin           INTEGER NOT NULL DEFAULT 0,
    spin_power          REAL NOT NULL,
    final_rotation      REAL NOT NULL DEFAULT 0,
    spin_timestamp      TEXT NOT NULL,
    acknowledged_at     TEXT,
    acknowledge_method  TEXT CHECK (acknowledge_method IN ('button', 'backdrop', 'x', 'remove')),
    FOREIGN KEY (session_id) REFERENCES sessions(id) ON DELETE CASCADE,
    FOREIGN KEY (configuration_id) REFERENCES wheel_configurations(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_spins_session ON spin_results(session_id);
"""


def create_all_tables(db_path: str):
    """Create all tables in the database."""
    with get_connection(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
    logger.info(f"All tables created in {db_path}")


if __name__ == "__main__":
    import sys
    sys.path.insert(0, ".")
    from config import DB_PATH
    logging.basicConfig(level=logging.INFO)
    create_all_tables(DB_PATH)
    print(f"Database initialized at {DB_PATH}")
