"""
Session cache operations for gitnotes.

Maps SessionRecord domain objects to rows of the `sessions` table.
"""

from typing import Any, Dict, Optional

from ..domain.session import SessionRecord
from .connection import Database

_COLUMNS = ('login', 'name', 'bio', 'photo', 'token', 'repository', 'branch', 'owner')


def get_session(db: Database, login: Optional[str] = None) -> Optional[SessionRecord]:
    """
    Get a cached session.

    Args:
        db: Database connection
        login: Login to look up; None returns the most recently saved session

    Returns:
        SessionRecord or None if nothing is cached
    """
    if login is None:
        db.execute("SELECT * FROM sessions ORDER BY updated_at DESC, rowid DESC LIMIT 1")
    else:
        db.execute("SELECT * FROM sessions WHERE login = ?", (login,))
    row = db.fetchone()
    if row is None:
        return None
    return SessionRecord.from_dict(dict(row))


def save_session(db: Database, record: SessionRecord) -> None:
    """Insert or replace the session for record.login."""
    data = record.to_dict()
    placeholders = ', '.join('?' for _ in _COLUMNS)
    db.execute(
        f"INSERT OR REPLACE INTO sessions ({', '.join(_COLUMNS)}, updated_at) "
        f"VALUES ({placeholders}, CURRENT_TIMESTAMP)",
        tuple(data[c] for c in _COLUMNS),
    )


def update_session(db: Database, login: str, changes: Dict[str, Any]) -> Optional[SessionRecord]:
    """
    Update selected fields of a cached session.

    Args:
        db: Database connection
        login: Session to update
        changes: Column -> value; unknown columns raise ValueError

    Returns:
        Updated SessionRecord, or None if no session exists for login
    """
    unknown = set(changes) - set(_COLUMNS) - {'login'}
    if unknown or 'login' in changes:
        raise ValueError(f"Cannot update session fields: {sorted(unknown | ({'login'} & set(changes)))}")

    if changes:
        assignments = ', '.join(f"{column} = ?" for column in changes)
        db.execute(
            f"UPDATE sessions SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE login = ?",
            tuple(changes.values()) + (login,),
        )
    return get_session(db, login)


def delete_session(db: Database, login: str) -> bool:
    """Delete one cached session. Returns True if a row was removed."""
    db.execute("DELETE FROM sessions WHERE login = ?", (login,))
    return db.rowcount > 0


def clear_sessions(db: Database) -> int:
    """Delete every cached session. Returns the number of rows removed."""
    db.execute("DELETE FROM sessions")
    return db.rowcount
