"""
Database module for gitnotes.

Local SQLite cache of the signed-in session.

Key components:
- connection: Database connection management
- schema: Table definitions and schema versioning
- session: Session CRUD operations
"""

from .connection import (
    get_connection,
    get_db_path,
    Database,
    transaction,
)
from .schema import CURRENT_VERSION, ensure_schema
from .session import (
    get_session,
    save_session,
    update_session,
    delete_session,
    clear_sessions,
)

__all__ = [
    # Connection
    'get_connection',
    'get_db_path',
    'Database',
    'transaction',
    # Schema
    'ensure_schema',
    'CURRENT_VERSION',
    # Sessions
    'get_session',
    'save_session',
    'update_session',
    'delete_session',
    'clear_sessions',
]
