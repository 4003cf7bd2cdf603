"""SQLAlchemy implementation of KeyValueStore."""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sharevalue.repositories.sqlalchemy.orm_models import CacheEntryORM


class SqlAlchemyKeyValueStore:
    """SQLite-backed string store. Errors propagate after the session is rolled back."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None when the key is absent."""
        try:
            orm_entry = self._db.get(CacheEntryORM, key)
        except SQLAlchemyError:
            self._db.rollback()
            raise
        return orm_entry.value if orm_entry else None

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite the value for key."""
        try:
            orm_entry = self._db.get(CacheEntryORM, key)
            if orm_entry:
                orm_entry.value = value
            else:
                self._db.add(CacheEntryORM(key=key, value=value))
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise

    def delete(self, key: str) -> None:
        """Remove key if present."""
        try:
            self._db.query(CacheEntryORM).filter(CacheEntryORM.key == key).delete()
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise

    def keys(self) -> list[str]:
        """All stored keys, sorted."""
        rows = self._db.query(CacheEntryORM.key).order_by(CacheEntryORM.key).all()
        return [row[0] for row in rows]
