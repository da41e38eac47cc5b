"""Database layer for voicejournal."""

from voicejournal.db.connection import close_db, get_engine, get_session, init_db, session_scope

__all__ = [
    "close_db",
    "get_engine",
    "get_session",
    "init_db",
    "session_scope",
]
