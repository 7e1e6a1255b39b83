"""Persistent queue of mutating actions recorded while offline."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import random
import string
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

from wandergo.cli.cache.storage import KeyValueStore
from wandergo.errors import ApiError, StorageError

if TYPE_CHECKING:
    from wandergo.cli.client import WanderGoApi

logger = logging.getLogger(__name__)

OFFLINE_QUEUE_KEY = "@wandergo_offline_queue"

_ID_ALPHABET = string.digits + string.ascii_lowercase

QueueListener = Callable[[int], Any]


class ActionType(str, Enum):
    """Kinds of actions that can be deferred."""

    CREATE_REVIEW = "create_review"
    MARK_VISITED = "mark_visited"
    ADD_FAVORITE = "add_favorite"
    REMOVE_FAVORITE = "remove_favorite"


@dataclass
class QueuedAction:
    """A deferred API call."""

    id: str
    type: ActionType
    data: dict[str, Any]
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted JSON shape."""
        return {
            "id": self.id,
            "type": self.type.value,
            "data": self.data,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> QueuedAction:
        """Build an action from its persisted JSON shape."""
        return cls(
            id=str(raw["id"]),
            type=ActionType(raw["type"]),
            data=dict(raw.get("data") or {}),
            timestamp=int(raw["timestamp"]),
        )


@dataclass
class DrainResult:
    """Outcome of one replay pass."""

    processed: int = 0
    failed: int = 0
    remaining: int = 0


def generate_action_id(timestamp_ms: int) -> str:
    """Return ``<timestamp>_<9 random base36 chars>``."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{timestamp_ms}_{suffix}"


async def _replay(api: WanderGoApi, action: QueuedAction) -> None:
    place_id = str(action.data["placeId"])
    if action.type is ActionType.MARK_VISITED:
        await api.mark_visited(place_id)
    elif action.type is ActionType.ADD_FAVORITE:
        await api.add_favorite(place_id)
    elif action.type is ActionType.REMOVE_FAVORITE:
        await api.remove_favorite(place_id)
    elif action.type is ActionType.CREATE_REVIEW:
        await api.create_review(
            place_id,
            rating=int(action.data["rating"]),
            content=action.data.get("content"),
            photos=action.data.get("photos"),
            visit_date=action.data.get("visitDate"),
        )


class OfflineQueue:
    """FIFO list of ``QueuedAction`` persisted as one JSON document.

    No deduplication or coalescing: two toggles of the same favorite are
    two entries, replayed in order. Read-modify-write cycles are
    serialized by a lock so concurrent enqueues cannot drop each other.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = asyncio.Lock()
        self._listeners: list[QueueListener] = []
        self._draining = False

    def subscribe(self, listener: QueueListener) -> Callable[[], None]:
        """Register a listener called with the queue length after each change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self._listeners = [item for item in self._listeners if item is not listener]

        return unsubscribe

    async def _notify(self) -> None:
        count = await self.count()
        for listener in list(self._listeners):
            try:
                result = listener(count)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Queue listener failed: %s", e)

    async def _read_entries(self) -> list[Any]:
        """Raw persisted entries, parseable or not."""
        raw = await self.store.get_item(OFFLINE_QUEUE_KEY)
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except ValueError as e:
            logger.error("Discarding unreadable offline queue: %s", e)
            return []
        if not isinstance(entries, list):
            logger.error("Discarding offline queue that is not a list")
            return []
        return entries

    async def _write_entries(self, entries: list[Any]) -> None:
        await self.store.set_item(OFFLINE_QUEUE_KEY, json.dumps(entries))

    @staticmethod
    def _parse(entry: Any) -> QueuedAction | None:
        try:
            return QueuedAction.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping unreadable queued action %r: %s", entry, e)
            return None

    async def get_all(self) -> list[QueuedAction]:
        """Return readable actions in submission order.

        Entries that cannot be parsed are skipped but stay stored.
        """
        try:
            entries = await self._read_entries()
        except StorageError as e:
            logger.error("Failed to read offline queue: %s", e)
            return []
        actions = [self._parse(entry) for entry in entries]
        return [action for action in actions if action is not None]

    async def count(self) -> int:
        """Number of stored entries, including unreadable ones."""
        try:
            return len(await self._read_entries())
        except StorageError as e:
            logger.error("Failed to read offline queue: %s", e)
            return 0

    async def enqueue(self, action_type: ActionType, data: dict[str, Any]) -> QueuedAction:
        """Append an action and notify queue listeners."""
        now_ms = int(self._clock().timestamp() * 1000)
        action = QueuedAction(
            id=generate_action_id(now_ms),
            type=ActionType(action_type),
            data=data,
            timestamp=now_ms,
        )
        async with self._lock:
            try:
                entries = await self._read_entries()
                entries.append(action.to_dict())
                await self._write_entries(entries)
            except StorageError as e:
                logger.error("Failed to add to offline queue: %s", e)
        logger.info("Queued %s for sync", action.type.value)
        await self._notify()
        return action

    async def remove(self, action_id: str) -> None:
        """Drop one action by id."""
        async with self._lock:
            try:
                entries = await self._read_entries()
                await self._write_entries(
                    [
                        entry
                        for entry in entries
                        if not (isinstance(entry, dict) and entry.get("id") == action_id)
                    ]
                )
            except StorageError as e:
                logger.error("Failed to remove from offline queue: %s", e)
        await self._notify()

    async def clear(self) -> None:
        """Drop every queued action."""
        async with self._lock:
            try:
                await self.store.remove_item(OFFLINE_QUEUE_KEY)
            except StorageError as e:
                logger.error("Failed to clear offline queue: %s", e)
        await self._notify()

    async def drain(self, api: WanderGoApi) -> DrainResult:
        """Replay queued actions one at a time, in order.

        Successful actions are removed. Failed and unreadable entries stay
        queued and count as failures, with no backoff or retry limit. A
        drain already in progress makes this call a no-op.
        """
        if self._draining:
            return DrainResult(remaining=await self.count())

        self._draining = True
        result = DrainResult()
        try:
            try:
                entries = await self._read_entries()
            except StorageError as e:
                logger.error("Failed to read offline queue: %s", e)
                entries = []
            for entry in entries:
                action = self._parse(entry)
                if action is None:
                    result.failed += 1
                    continue
                try:
                    await _replay(api, action)
                except (ApiError, httpx.HTTPError, KeyError, TypeError, ValueError) as e:
                    logger.warning("Failed to process queued action %s: %s", action.type.value, e)
                    result.failed += 1
                    continue
                await self.remove(action.id)
                result.processed += 1
        finally:
            self._draining = False

        result.remaining = await self.count()
        if result.processed or result.failed:
            logger.info(
                "Offline queue replay: %d synced, %d failed, %d remaining",
                result.processed,
                result.failed,
                result.remaining,
            )
        return result
