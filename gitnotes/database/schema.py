"""
Database schema for gitnotes.

The local database only caches the signed-in session (user profile,
token and repository binding). Everything else lives in the remote
repository, so the cache is rebuilt rather than migrated.
"""

import logging
import sqlite3

logger = logging.getLogger(__name__)

# Current schema version - increment when schema changes
# v1: Initial schema (sessions)
CURRENT_VERSION = 1

SCHEMA_V1 = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS _schema_info (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    description TEXT
);

-- Cached sessions, one row per login
CREATE TABLE IF NOT EXISTS sessions (
    login TEXT PRIMARY KEY,
    name TEXT DEFAULT '',
    bio TEXT DEFAULT '',
    photo TEXT DEFAULT '',
    token TEXT NOT NULL,
    repository TEXT NOT NULL,
    branch TEXT NOT NULL DEFAULT 'main',
    owner TEXT DEFAULT '',
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version from database."""
    try:
        cursor = conn.execute(
            "SELECT MAX(version) FROM _schema_info"
        )
        result = cursor.fetchone()
        return result[0] if result[0] is not None else 0
    except sqlite3.OperationalError:
        # Table doesn't exist yet
        return 0


def apply_schema(conn: sqlite3.Connection) -> None:
    """
    Apply schema to database.

    An older cache is dropped and recreated; the user signs in again.
    """
    current = get_schema_version(conn)

    if current != 0 and current < CURRENT_VERSION:
        logger.info(f"Schema version {current} -> {CURRENT_VERSION}, rebuilding session cache")
        conn.executescript("""
            DROP TABLE IF EXISTS sessions;
            DROP TABLE IF EXISTS _schema_info;
        """)

    conn.executescript(SCHEMA_V1)
    conn.execute(
        "INSERT OR REPLACE INTO _schema_info (version, description) VALUES (?, ?)",
        (CURRENT_VERSION, "Initial schema (sessions)")
    )

    conn.commit()


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Ensure database has current schema, migrating if necessary."""
    if get_schema_version(conn) < CURRENT_VERSION:
        apply_schema(conn)
