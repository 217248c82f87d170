"""
Database package: SQLite engine/session management, ORM models and repositories.
"""

from .session import Database, db

__all__ = ["Database", "db"]
