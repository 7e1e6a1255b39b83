"""Repository for key-value rows in the local storage database."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from wandergo.cli.cache.database import get_storage_session, init_storage_db
from wandergo.cli.cache.models import StoredItem


class KeyValueRepository:
    """Synchronous access to ``StoredItem`` rows.

    Every write commits its own transaction, so a ``set_many`` call lands
    all of its pairs or none of them.
    """

    def __init__(self) -> None:
        """Initialize the repository."""
        self._session: Session | None = None

    def _get_session(self) -> Session:
        """Get or create a database session."""
        if self._session is None:
            init_storage_db()  # Ensure DB is initialized
            self._session = get_storage_session()
        return self._session

    def close(self) -> None:
        """Close the database session."""
        if self._session:
            self._session.close()
            self._session = None

    def rollback(self) -> None:
        """Roll back the current transaction, if a session is open."""
        if self._session:
            self._session.rollback()

    def get_many(self, keys: Iterable[str]) -> dict[str, str]:
        """Get the stored values for ``keys``.

        Args:
            keys: The keys to look up

        Returns:
            Mapping of found keys to their values; missing keys are absent
        """
        wanted = list(keys)
        if not wanted:
            return {}
        session = self._get_session()
        stmt = select(StoredItem).where(StoredItem.key.in_(wanted))
        return {item.key: item.value for item in session.execute(stmt).scalars()}

    def set_many(self, pairs: Iterable[tuple[str, str]]) -> None:
        """Insert or update several key/value pairs in one commit.

        Args:
            pairs: (key, value) pairs to store
        """
        session = self._get_session()
        now = datetime.now(UTC)
        for key, value in pairs:
            item = session.get(StoredItem, key)
            if item is None:
                session.add(StoredItem(key=key, value=value, updated_at=now))
            else:
                item.value = value
                item.updated_at = now
        session.commit()

    def delete_many(self, keys: Iterable[str]) -> int:
        """Delete several keys in one commit.

        Returns:
            Number of rows removed
        """
        doomed = list(keys)
        if not doomed:
            return 0
        session = self._get_session()
        result = session.execute(delete(StoredItem).where(StoredItem.key.in_(doomed)))
        session.commit()
        return int(result.rowcount or 0)

    def keys(self, prefix: str | None = None) -> list[str]:
        """List stored keys, optionally restricted to a prefix."""
        session = self._get_session()
        stmt = select(StoredItem.key).order_by(StoredItem.key)
        if prefix:
            stmt = stmt.where(StoredItem.key.startswith(prefix, autoescape=True))
        return list(session.execute(stmt).scalars().all())
