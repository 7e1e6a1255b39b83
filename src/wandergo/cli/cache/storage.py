"""Asynchronous key-value store used by the offline layer."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError

from wandergo.cli.cache.repositories import KeyValueRepository
from wandergo.errors import StorageError


class KeyValueStore:
    """Opaque string storage with single and multi-key operations.

    Each coroutine is a suspension point for callers even though the
    SQLite work underneath is synchronous.
    """

    def __init__(self, repository: KeyValueRepository | None = None) -> None:
        self._repo = repository or KeyValueRepository()

    def close(self) -> None:
        """Release the underlying database session."""
        self._repo.close()

    def _fail(self, action: str, exc: SQLAlchemyError) -> StorageError:
        self._repo.rollback()
        return StorageError(f"Failed to {action}: {exc}")

    async def get_item(self, key: str) -> str | None:
        """Return the value stored under ``key`` or None."""
        try:
            return self._repo.get_many([key]).get(key)
        except SQLAlchemyError as e:
            raise self._fail("read storage", e) from e

    async def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        await self.multi_set([(key, value)])

    async def remove_item(self, key: str) -> None:
        """Remove ``key`` if present."""
        await self.multi_remove([key])

    async def multi_get(self, keys: Iterable[str]) -> list[tuple[str, str | None]]:
        """Return (key, value) pairs in request order; missing values are None."""
        wanted = list(keys)
        try:
            found = self._repo.get_many(wanted)
        except SQLAlchemyError as e:
            raise self._fail("read storage", e) from e
        return [(key, found.get(key)) for key in wanted]

    async def multi_set(self, pairs: Iterable[tuple[str, str]]) -> None:
        """Write all pairs together."""
        try:
            self._repo.set_many(list(pairs))
        except SQLAlchemyError as e:
            raise self._fail("write storage", e) from e

    async def multi_remove(self, keys: Iterable[str]) -> None:
        """Remove all given keys together."""
        try:
            self._repo.delete_many(keys)
        except SQLAlchemyError as e:
            raise self._fail("remove from storage", e) from e

    async def get_all_keys(self) -> list[str]:
        """List every stored key."""
        try:
            return self._repo.keys()
        except SQLAlchemyError as e:
            raise self._fail("list storage keys", e) from e
