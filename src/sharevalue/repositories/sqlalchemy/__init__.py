"""SQLAlchemy repository implementations."""

from sharevalue.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_session,
    init_db,
    init_db_with_path,
    reset_database,
    Base,
)
from sharevalue.repositories.sqlalchemy.kv_store import SqlAlchemyKeyValueStore

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_session",
    "init_db",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyKeyValueStore",
]
