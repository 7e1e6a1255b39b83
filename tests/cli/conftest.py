"""Shared fixtures for CLI and offline-layer tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import patch

import anyio
import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from wandergo.cli.cache.manager import CacheKind, CacheManager
from wandergo.cli.cache.models import StorageBase
from wandergo.cli.cache.storage import KeyValueStore
from wandergo.cli.client import WanderGoApi
from wandergo.cli.sync.runtime import OfflineRuntime


class FakeClock:
    """Manually advanced clock returning aware datetimes."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def in_memory_engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine("sqlite:///:memory:")
    StorageBase.metadata.create_all(engine)
    return engine


@pytest.fixture
def mock_get_session(in_memory_engine) -> Iterator[None]:
    """Mock get_storage_session to use the in-memory database."""
    SessionLocal = sessionmaker(bind=in_memory_engine)

    def _get_session():
        return SessionLocal()

    with (
        patch("wandergo.cli.cache.repositories.get_storage_session", side_effect=_get_session),
        patch("wandergo.cli.cache.repositories.init_storage_db"),
    ):
        yield


@pytest.fixture
def store(mock_get_session) -> Iterator[KeyValueStore]:
    """Key-value store backed by the in-memory database."""
    kv = KeyValueStore()
    yield kv
    kv.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def _make_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    transport = httpx.MockTransport(handler)
    return httpx.AsyncClient(base_url="http://test", transport=transport)


def _make_place(place_id: str, **overrides: Any) -> dict[str, Any]:
    place: dict[str, Any] = {
        "id": place_id,
        "name": f"Place {place_id}",
        "description": None,
        "category": "museum",
        "city": "Paris",
        "country": "France",
        "latitude": 48.8566,
        "longitude": 2.3522,
        "avgRating": None,
    }
    place.update(overrides)
    return place


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory for httpx clients served by a request handler."""
    return _make_client


@pytest.fixture
def make_place() -> Callable[..., dict[str, Any]]:
    """Factory for place payloads shaped like the API's."""
    return _make_place


class FakeBackend:
    """Canned JSON responses keyed by (method, path), with a reachability switch."""

    def __init__(self) -> None:
        self.online = True
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def respond(self, method: str, path: str, body: Any, status: int = 200) -> None:
        self.routes[(method, path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get(
            (request.method, request.url.path), (404, {"error": "Not found"})
        )
        return httpx.Response(status, json=body)

    async def probe(self) -> bool:
        return self.online


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def runtime_factory(
    store: KeyValueStore, backend: FakeBackend
) -> Callable[[], OfflineRuntime]:
    """Builds a fresh runtime per CLI invocation, sharing one store."""

    def _build() -> OfflineRuntime:
        api = WanderGoApi(store, client=_make_client(backend.handler))
        return OfflineRuntime(store=store, api=api, probe=backend.probe)

    return _build


@pytest.fixture
def seed_cache(store: KeyValueStore) -> Callable[[CacheKind, str, Any], None]:
    """Synchronously put a value in the cache before invoking a command."""

    def _seed(kind: CacheKind, identifier: str, value: Any) -> None:
        anyio.run(CacheManager(store).put, kind, identifier, value)

    return _seed
