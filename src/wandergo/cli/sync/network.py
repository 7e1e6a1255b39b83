"""Polling reachability monitor."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0

NetworkListener = Callable[[bool], Any]


class NetworkMonitor:
    """Tracks online/offline state by polling a reachability probe.

    One poll loop per monitor. It starts with the first subscriber or an
    explicit ``start()``. A loop started by a subscriber stops when the last
    subscriber leaves; a loop started explicitly runs until ``stop()``. Listeners hear about transitions only, never about polls
    that saw no change.
    """

    def __init__(
        self,
        probe: Callable[[], Awaitable[bool]],
        interval: float = DEFAULT_POLL_INTERVAL,
        on_online: Callable[[], Awaitable[Any]] | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            probe: Coroutine function returning current reachability
            interval: Seconds between polls
            on_online: Awaited after every offline-to-online transition
        """
        self._probe = probe
        self.interval = interval
        self._on_online = on_online
        self._online = True
        self._listeners: list[NetworkListener] = []
        self._task: asyncio.Task[None] | None = None
        self._pinned = False

    @property
    def is_online(self) -> bool:
        """Last known reachability."""
        return self._online

    @property
    def running(self) -> bool:
        """Whether the poll loop is active."""
        return self._task is not None and not self._task.done()

    def subscribe(self, listener: NetworkListener) -> Callable[[], None]:
        """Register a transition listener and make sure polling runs.

        Must be called from inside a running event loop.

        Returns:
            A function that removes ``listener`` again
        """
        self._listeners.append(listener)
        self._ensure_running()

        def unsubscribe() -> None:
            self._listeners = [item for item in self._listeners if item is not listener]
            if not self._listeners and not self._pinned:
                self._cancel()

        return unsubscribe

    def start(self) -> None:
        """Start the poll loop and keep it running until ``stop()``."""
        self._pinned = True
        self._ensure_running()

    def _ensure_running(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("Network polling started (every %ss)", self.interval)

    async def stop(self) -> None:
        """Stop the poll loop and wait for it to finish."""
        self._pinned = False
        task = self._cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _cancel(self) -> asyncio.Task[None] | None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("Network polling stopped")
        return task

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    async def poll_once(self) -> bool:
        """Query the probe once and publish a transition if there was one.

        A failing probe leaves the current state untouched.

        Returns:
            The (possibly updated) online state
        """
        try:
            online = bool(await self._probe())
        except Exception as e:
            logger.warning("Reachability check failed, keeping last state: %s", e)
            return self._online

        if online == self._online:
            return online

        self._online = online
        logger.info("Network is now %s", "online" if online else "offline")
        await self._notify(online)

        if online and self._on_online is not None:
            try:
                await self._on_online()
            except Exception as e:
                logger.error("Reconnect handler failed: %s", e)
        return online

    async def check(self) -> bool:
        """Refresh the state immediately, outside the poll schedule."""
        return await self.poll_once()

    async def _notify(self, online: bool) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(online)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Network listener failed: %s", e)
