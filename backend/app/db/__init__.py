"""Database package: engine, session factory and the get_db dependency."""

from app.db.session import AsyncSessionLocal, enable_sqlite_foreign_keys, engine, get_db
from app.models.base import Base

__all__ = ["Base", "AsyncSessionLocal", "enable_sqlite_foreign_keys", "engine", "get_db"]
