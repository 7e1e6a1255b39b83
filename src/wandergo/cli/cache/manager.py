"""Cache-with-expiry facade over the key-value store."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from wandergo.cli.cache.storage import KeyValueStore
from wandergo.errors import StorageError

logger = logging.getLogger(__name__)

CACHE_PREFIX = "@wandergo_cache:"
CACHE_EXPIRY_PREFIX = "@wandergo_expiry:"

DEFAULT_TTL = timedelta(hours=24)
OFFLINE_TTL = timedelta(days=7)


class CacheKind(str, Enum):
    """Resource kinds that can be cached."""

    PLACES = "places"
    PLACE = "place"
    ROUTES = "routes"
    ROUTE = "route"
    FAVORITES = "favorites"
    VISITED = "visited"
    ITINERARIES = "itineraries"
    ITINERARY = "itinerary"
    POPULAR_PLACES = "popular_places"
    NEARBY_PLACES = "nearby_places"
    ACHIEVEMENTS = "achievements"


@dataclass
class CacheSize:
    """Number of cached values and their storage keys."""

    count: int = 0
    keys: list[str] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class CacheManager:
    """Namespaced cache entries with a time-to-live.

    Each entry is two storage keys written together: the JSON payload
    and its absolute expiry in epoch milliseconds. Expired entries are
    evicted lazily when read; nothing sweeps them in the background.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] | None = None,
        default_ttl: timedelta = DEFAULT_TTL,
        offline_ttl: timedelta = OFFLINE_TTL,
    ):
        """Initialize the cache manager.

        Args:
            store: Key-value store holding the entries
            clock: Returns the current aware datetime (default: UTC now)
            default_ttl: TTL used when ``put`` is not given one
            offline_ttl: TTL for collections saved for offline use
        """
        self.store = store
        self.default_ttl = default_ttl
        self.offline_ttl = offline_ttl
        self._clock = clock or _utcnow

    @staticmethod
    def _keys(kind: CacheKind | str, identifier: str) -> tuple[str, str]:
        name = kind.value if isinstance(kind, CacheKind) else kind
        return (
            f"{CACHE_PREFIX}{name}:{identifier}",
            f"{CACHE_EXPIRY_PREFIX}{name}:{identifier}",
        )

    async def put(
        self,
        kind: CacheKind | str,
        identifier: str,
        value: Any,
        ttl: timedelta | None = None,
    ) -> None:
        """Cache ``value`` under (kind, identifier).

        Storage failures are logged and dropped.
        """
        cache_key, expiry_key = self._keys(kind, identifier)
        expiry = self._clock() + (ttl if ttl is not None else self.default_ttl)
        try:
            await self.store.multi_set(
                [
                    (cache_key, json.dumps(value)),
                    (expiry_key, str(_to_millis(expiry))),
                ]
            )
        except (StorageError, TypeError, ValueError) as e:
            logger.error("Failed to cache data for %s: %s", cache_key, e)

    async def get(self, kind: CacheKind | str, identifier: str) -> Any | None:
        """Return the cached value, or None when missing or expired.

        An expired entry is removed as a side effect of the read.
        """
        cache_key, expiry_key = self._keys(kind, identifier)
        try:
            (_, data), (_, expiry) = await self.store.multi_get([cache_key, expiry_key])
            if not data or not expiry:
                return None

            if _to_millis(self._clock()) > int(expiry):
                await self.store.multi_remove([cache_key, expiry_key])
                logger.debug("Evicted expired cache entry %s", cache_key)
                return None

            return json.loads(data)
        except (StorageError, ValueError) as e:
            logger.error("Failed to get cached data for %s: %s", cache_key, e)
            return None

    async def clear(self) -> None:
        """Remove every cache entry, leaving other namespaces alone."""
        try:
            keys = await self.store.get_all_keys()
            doomed = [
                key
                for key in keys
                if key.startswith(CACHE_PREFIX) or key.startswith(CACHE_EXPIRY_PREFIX)
            ]
            await self.store.multi_remove(doomed)
        except StorageError as e:
            logger.error("Failed to clear cache: %s", e)

    async def size(self) -> CacheSize:
        """Count cached values (expiry keys are not counted)."""
        try:
            keys = await self.store.get_all_keys()
        except StorageError:
            return CacheSize()
        cache_keys = [key for key in keys if key.startswith(CACHE_PREFIX)]
        return CacheSize(count=len(cache_keys), keys=cache_keys)

    async def _save_collection(
        self,
        kind: CacheKind,
        item_kind: CacheKind,
        identifier: str,
        items: list[dict[str, Any]],
    ) -> None:
        await self.put(kind, identifier, items, self.offline_ttl)
        for item in items:
            await self.put(item_kind, str(item["id"]), item)

    async def save_places_for_offline(self, places: list[dict[str, Any]]) -> None:
        """Store the full place list plus each place individually."""
        await self._save_collection(CacheKind.PLACES, CacheKind.PLACE, "all", places)

    async def save_routes_for_offline(self, routes: list[dict[str, Any]]) -> None:
        """Store the user's routes plus each route individually."""
        await self._save_collection(CacheKind.ROUTES, CacheKind.ROUTE, "user", routes)

    async def save_itineraries_for_offline(
        self, itineraries: list[dict[str, Any]]
    ) -> None:
        """Store the user's itineraries plus each itinerary individually."""
        await self._save_collection(
            CacheKind.ITINERARIES, CacheKind.ITINERARY, "user", itineraries
        )
