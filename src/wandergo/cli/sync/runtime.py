"""Application-owned bundle of the offline layer's collaborators."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from wandergo.cli.cache.manager import DEFAULT_TTL, OFFLINE_TTL, CacheManager
from wandergo.cli.cache.storage import KeyValueStore
from wandergo.cli.client import WanderGoApi, check_reachability
from wandergo.cli.sync.network import DEFAULT_POLL_INTERVAL, NetworkMonitor
from wandergo.cli.sync.offline import OfflineApi
from wandergo.cli.sync.queue import DrainResult, OfflineQueue


@dataclass
class OfflineStatus:
    """Snapshot of what an offline banner needs to show."""

    is_online: bool
    pending_actions: int
    cache_size: int


class OfflineRuntime:
    """Owns the store, cache, queue, API client and network monitor.

    Nothing here starts at import time: polling runs between ``start()``
    and ``stop()``, and leaving the async context stops it and releases
    the HTTP client and the database session.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        server_url: str | None = None,
        api: WanderGoApi | None = None,
        probe: Callable[[], Awaitable[bool]] | None = None,
        interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], datetime] | None = None,
        default_ttl: timedelta = DEFAULT_TTL,
        offline_ttl: timedelta = OFFLINE_TTL,
    ) -> None:
        self.store = store or KeyValueStore()
        self.api = api or WanderGoApi(self.store, server_url=server_url)
        self.cache = CacheManager(
            self.store, clock=clock, default_ttl=default_ttl, offline_ttl=offline_ttl
        )
        self.queue = OfflineQueue(self.store, clock=clock)
        self.monitor = NetworkMonitor(
            probe or functools.partial(check_reachability, server_url),
            interval=interval,
            on_online=self.sync,
        )
        self.offline = OfflineApi(
            self.api, self.cache, self.queue, lambda: self.monitor.is_online
        )

    async def __aenter__(self) -> OfflineRuntime:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def start(self) -> None:
        """Begin reachability polling (app foreground)."""
        self.monitor.start()

    async def stop(self) -> None:
        """Stop reachability polling (app background)."""
        await self.monitor.stop()

    async def close(self) -> None:
        """Stop polling and release every resource."""
        await self.stop()
        await self.api.close()
        self.store.close()

    async def sync(self) -> DrainResult:
        """Replay the offline queue against the live API."""
        return await self.queue.drain(self.api)

    async def sync_pending(self) -> DrainResult | None:
        """Replay the queue if we are online and anything is waiting.

        Covers a queue left behind by an earlier process, which a fresh
        monitor never sees as a reconnect.
        """
        if not self.monitor.is_online or await self.queue.count() == 0:
            return None
        return await self.sync()

    async def status(self) -> OfflineStatus:
        """Current online flag, queue length and cache entry count."""
        size = await self.cache.size()
        return OfflineStatus(
            is_online=self.monitor.is_online,
            pending_actions=await self.queue.count(),
            cache_size=size.count,
        )

    async def refresh_status(self) -> OfflineStatus:
        """Re-check reachability, then report status."""
        await self.monitor.check()
        return await self.status()

    async def clear_cache(self) -> OfflineStatus:
        """Drop all cache entries and report the refreshed status."""
        await self.cache.clear()
        return await self.refresh_status()
