"""Tests for offline cache and sync queue commands."""

from unittest.mock import AsyncMock, patch

import anyio
from typer.testing import CliRunner

from wandergo.cli.app import app
from wandergo.cli.cache.manager import CacheKind, CacheManager
from wandergo.cli.sync.queue import ActionType, OfflineQueue

runner = CliRunner()

MODULE = "wandergo.cli.commands.offline.build_runtime"


def _enqueue(store, action_type: ActionType, place_id: str) -> None:
    anyio.run(OfflineQueue(store).enqueue, action_type, {"placeId": place_id})


def _pending(store) -> int:
    return anyio.run(OfflineQueue(store).count)


class TestStatusCommand:
    """Test offline status command."""

    def test_status_online(self, runtime_factory, store, seed_cache) -> None:
        seed_cache(CacheKind.PLACE, "1", {"id": "1"})
        _enqueue(store, ActionType.MARK_VISITED, "1")

        with patch(MODULE, side_effect=runtime_factory):
            result = runner.invoke(app, ["offline", "status"])

        assert result.exit_code == 0
        assert "Status: Online" in result.stdout
        assert "1 action pending sync" in result.stdout
        assert "Cached entries: 1" in result.stdout

    def test_status_offline(self, backend, runtime_factory) -> None:
        backend.online = False

        with patch(MODULE, side_effect=runtime_factory):
            result = runner.invoke(app, ["offline", "status"])

        assert result.exit_code == 0
        assert "Status: Offline" in result.stdout
        assert "No pending actions" in result.stdout


class TestQueueCommands:
    """Test queue, sync and clear-queue commands."""

    def test_queue_lists_pending(self, runtime_factory, store) -> None:
        _enqueue(store, ActionType.ADD_FAVORITE, "12")

        with patch(MODULE, side_effect=runtime_factory):
            result = runner.invoke(app, ["offline", "queue"])

        assert result.exit_code == 0
        assert "add_favorite" in result.stdout
        assert "12" in result.stdout

    def test_queue_empty(self, runtime_factory) -> None:
        with patch(MODULE, side_effect=runtime_factory):
            result = runner.invoke(app, ["offline", "queue"])

        assert result.exit_code == 0
        assert "No pending actions" in result.stdout

    def test_sync_replays_in_order(self, backend, runtime_factory, store) -> None:
        backend.respond("POST", "/api/favorites/5", {"id": "f5"}, status=201)
        backend.respond("DELETE", "/api/favorites/5", {"success": True})
        _enqueue(store, ActionType.ADD_FAVORITE, "5")
        _enqueue(store, ActionType.REMOVE_FAVORITE, "5")

        with patch(MODULE, side_effect=runtime_factory):
            result = runner.invoke(app, ["offline", "sync"])

        assert result.exit_code == 0
        assert "Synced 2 action(s)" in result.stdout
        assert [r.method for r in backend.requests] == ["POST", "DELETE"]
        assert _pending(store) == 0

    def test_sync_keeps_failed_actions(self, backend, runtime_factory, store) -> None:
        _enqueue(store, ActionType.MARK_VISITED, "404")

        with patch(MODULE, side_effect=runtime_factory):
            result = runner.invoke(app, ["offline", "sync"])

        assert result.exit_code == 1
        assert "1 action(s) failed" in result.stdout
        assert _pending(store) == 1

    def test_sync_offline_refuses(self, backend, runtime_factory, store) -> None:
        _enqueue(store, ActionType.MARK_VISITED, "1")
        backend.online = False

        with patch(MODULE, side_effect=runtime_factory):
            result = runner.invoke(app, ["offline", "sync"])

        assert result.exit_code == 1
        assert backend.requests == []
        assert _pending(store) == 1

    def test_clear_queue(self, runtime_factory, store) -> None:
        _enqueue(store, ActionType.MARK_VISITED, "1")

        with patch(MODULE, side_effect=runtime_factory):
            result = runner.invoke(app, ["offline", "clear-queue", "--yes"])

        assert result.exit_code == 0
        assert _pending(store) == 0

    def test_clear_queue_declined(self, runtime_factory, store) -> None:
        _enqueue(store, ActionType.MARK_VISITED, "1")

        with patch(MODULE, side_effect=runtime_factory):
            result = runner.invoke(app, ["offline", "clear-queue"], input="n\n")

        assert result.exit_code != 0
        assert _pending(store) == 1


class TestClearCacheCommand:
    """Test clear-cache command."""

    def test_clear_cache_keeps_queue(self, runtime_factory, store, seed_cache) -> None:
        seed_cache(CacheKind.PLACES, "all", [{"id": "1"}])
        _enqueue(store, ActionType.MARK_VISITED, "1")

        with patch(MODULE, side_effect=runtime_factory):
            result = runner.invoke(app, ["offline", "clear-cache"])

        assert result.exit_code == 0
        assert "Cache cleared (0 entries left)" in result.stdout
        assert anyio.run(CacheManager(store).size).count == 0
        assert _pending(store) == 1


class TestWatchCommand:
    """Test offline watch command."""

    def test_watch_replays_queue_left_by_earlier_run(
        self, backend, runtime_factory, store
    ) -> None:
        _enqueue(store, ActionType.MARK_VISITED, "2")
        backend.respond("POST", "/api/visited/2", {"id": "v2"}, status=201)

        with (
            patch(MODULE, side_effect=runtime_factory),
            patch("wandergo.cli.commands.offline.anyio.sleep_forever", AsyncMock()),
        ):
            result = runner.invoke(app, ["offline", "watch"])

        assert result.exit_code == 0
        assert "Watching" in result.stdout
        assert [(r.method, r.url.path) for r in backend.requests] == [("POST", "/api/visited/2")]
        assert _pending(store) == 0
