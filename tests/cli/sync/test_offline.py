"""Tests for offline-aware resource accessors."""

from unittest.mock import AsyncMock, call

import pytest

from wandergo.cli.cache.manager import CacheKind, CacheManager
from wandergo.cli.cache.storage import KeyValueStore
from wandergo.cli.sync.geo import haversine_km
from wandergo.cli.sync.offline import (
    QUEUED_RESPONSE,
    OfflineApi,
    filter_places,
    rank_nearby,
    rank_popular,
)
from wandergo.cli.sync.queue import ActionType, OfflineQueue
from wandergo.errors import ApiError, NotAvailableOfflineError, WanderGoError


class Connectivity:
    def __init__(self) -> None:
        self.online = True

    def __call__(self) -> bool:
        return self.online


@pytest.fixture
def connectivity() -> Connectivity:
    return Connectivity()


@pytest.fixture
def cache(store: KeyValueStore, clock) -> CacheManager:
    return CacheManager(store, clock=clock)


@pytest.fixture
def queue(store: KeyValueStore, clock) -> OfflineQueue:
    return OfflineQueue(store, clock=clock)


@pytest.fixture
def api() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def offline(api, cache, queue, connectivity) -> OfflineApi:
    return OfflineApi(api, cache, queue, connectivity)


@pytest.fixture
def paris_places(make_place):
    return [
        make_place("1", name="Louvre", latitude=48.8606, longitude=2.3376, avgRating=4.8),
        make_place("2", name="Eiffel Tower", category="landmark", latitude=48.8584,
                   longitude=2.2945, avgRating=4.6),
        make_place("3", name="Versailles", city="Versailles", category="landmark",
                   latitude=48.8049, longitude=2.1204, avgRating=4.9,
                   description="Royal palace and gardens"),
        make_place("4", name="Mont Saint-Michel", city="Normandy", latitude=48.6361,
                   longitude=-1.5115),
    ]


class TestPureHelpers:
    def test_filter_places(self, paris_places):
        assert [p["id"] for p in filter_places(paris_places, city="paris")] == ["1", "2"]
        assert [p["id"] for p in filter_places(paris_places, category="landmark")] == ["2", "3"]
        assert [p["id"] for p in filter_places(paris_places, search="PALACE")] == ["3"]
        assert [p["id"] for p in filter_places(paris_places, limit=2)] == ["1", "2"]

    def test_rank_popular_skips_unrated(self, paris_places):
        assert [p["id"] for p in rank_popular(paris_places, 10)] == ["3", "1", "2"]
        assert [p["id"] for p in rank_popular(paris_places, 1)] == ["3"]

    def test_rank_nearby_sorted_and_within_radius(self, paris_places):
        lat, lng = 48.8566, 2.3522

        result = rank_nearby(paris_places, lat, lng, 20.0, 10)

        distances = [p["distance"] for p in result]
        assert distances == sorted(distances)
        assert all(d <= 20.0 for d in distances)
        assert [p["id"] for p in result] == ["1", "2", "3"]
        assert result[0]["distance"] == pytest.approx(haversine_km(lat, lng, 48.8606, 2.3376))


class TestOnlineReads:
    @pytest.mark.asyncio
    async def test_unfiltered_places_are_saved_for_offline(self, offline, api, cache, paris_places):
        api.get_places.return_value = paris_places

        result = await offline.get_places()

        assert result == paris_places
        assert await cache.get(CacheKind.PLACES, "all") == paris_places
        assert await cache.get(CacheKind.PLACE, "3") == paris_places[2]

    @pytest.mark.asyncio
    async def test_filtered_places_are_not_cached(self, offline, api, cache, paris_places):
        api.get_places.return_value = paris_places[:1]

        await offline.get_places(city="Paris")

        api.get_places.assert_awaited_once_with(
            city="Paris", category=None, search=None, limit=None
        )
        assert await cache.get(CacheKind.PLACES, "all") is None

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_cache(self, offline, api, cache):
        await cache.put(CacheKind.FAVORITES, "user", [{"placeId": "1"}])
        api.get_favorites.side_effect = ApiError("Failed to fetch favorites (500)", 500)

        assert await offline.get_favorites() == [{"placeId": "1"}]

    @pytest.mark.asyncio
    async def test_failure_without_cache_propagates(self, offline, api):
        api.get_route.side_effect = ApiError("Failed to fetch route (404)", 404)

        with pytest.raises(ApiError):
            await offline.get_route("r1")

    @pytest.mark.asyncio
    async def test_places_failure_filters_cached_list(self, offline, api, cache, paris_places):
        await cache.put(CacheKind.PLACES, "all", paris_places)
        api.get_places.side_effect = ApiError("Failed to fetch places", None)

        result = await offline.get_places(category="landmark")

        assert [p["id"] for p in result] == ["2", "3"]

    @pytest.mark.asyncio
    async def test_write_through_keys(self, offline, api, cache):
        api.get_place.return_value = {"id": "9"}
        api.get_popular_places.return_value = [{"id": "9"}]
        api.get_nearby_places.return_value = [{"id": "9"}]
        api.get_routes.return_value = [{"id": "r1"}]
        api.get_itineraries.return_value = [{"id": "i1"}]
        api.get_visited_places.return_value = [{"placeId": "9"}]
        api.get_achievements.return_value = [{"id": "a1"}]

        await offline.get_place("9")
        await offline.get_popular_places(5)
        await offline.get_nearby_places(48.85661, 2.35222)
        await offline.get_routes()
        await offline.get_itineraries()
        await offline.get_visited()
        await offline.get_achievements()

        assert await cache.get(CacheKind.PLACE, "9") == {"id": "9"}
        assert await cache.get(CacheKind.POPULAR_PLACES, "popular_5") == [{"id": "9"}]
        assert await cache.get(CacheKind.NEARBY_PLACES, "nearby_48.86_2.35") == [{"id": "9"}]
        assert await cache.get(CacheKind.ROUTE, "r1") == {"id": "r1"}
        assert await cache.get(CacheKind.ITINERARY, "i1") == {"id": "i1"}
        assert await cache.get(CacheKind.VISITED, "user") == [{"placeId": "9"}]
        assert await cache.get(CacheKind.ACHIEVEMENTS, "user") == [{"id": "a1"}]


class TestOfflineReads:
    @pytest.mark.asyncio
    async def test_places_filtered_client_side(self, offline, api, cache, connectivity,
                                               paris_places):
        await cache.save_places_for_offline(paris_places)
        connectivity.online = False

        result = await offline.get_places(city="paris", search="tower")

        assert [p["id"] for p in result] == ["2"]
        api.get_places.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_places_unavailable(self, offline, connectivity):
        connectivity.online = False

        with pytest.raises(NotAvailableOfflineError, match="connect to the internet"):
            await offline.get_places()

    @pytest.mark.asyncio
    async def test_exact_cache_hit(self, offline, cache, connectivity):
        await cache.put(CacheKind.ITINERARY, "i1", {"id": "i1", "title": "Day one"})
        connectivity.online = False

        assert await offline.get_itinerary("i1") == {"id": "i1", "title": "Day one"}

    @pytest.mark.asyncio
    async def test_single_resource_unavailable(self, offline, connectivity):
        connectivity.online = False

        with pytest.raises(NotAvailableOfflineError, match="Place not available offline"):
            await offline.get_place("1")

    @pytest.mark.asyncio
    async def test_nearby_derived_from_all_places(self, offline, cache, connectivity,
                                                  paris_places):
        await cache.put(CacheKind.PLACES, "all", paris_places)
        connectivity.online = False

        result = await offline.get_nearby_places(48.8566, 2.3522)

        distances = [p["distance"] for p in result]
        assert distances == sorted(distances)
        assert all(d <= 20 for d in distances)
        assert "4" not in [p["id"] for p in result]

    @pytest.mark.asyncio
    async def test_nearby_respects_radius_and_limit(self, offline, cache, connectivity,
                                                    paris_places):
        await cache.put(CacheKind.PLACES, "all", paris_places)
        connectivity.online = False

        result = await offline.get_nearby_places(48.8566, 2.3522, radius_km=5, limit=1)

        assert [p["id"] for p in result] == ["1"]

    @pytest.mark.asyncio
    async def test_nearby_exact_cache_preferred(self, offline, cache, connectivity, paris_places):
        await cache.put(CacheKind.PLACES, "all", paris_places)
        await cache.put(CacheKind.NEARBY_PLACES, "nearby_48.86_2.35", [{"id": "cached"}])
        connectivity.online = False

        assert await offline.get_nearby_places(48.8566, 2.3522) == [{"id": "cached"}]

    @pytest.mark.asyncio
    async def test_popular_derived_from_all_places(self, offline, cache, connectivity,
                                                   paris_places):
        await cache.put(CacheKind.PLACES, "all", paris_places)
        connectivity.online = False

        result = await offline.get_popular_places(2)

        assert [p["id"] for p in result] == ["3", "1"]

    @pytest.mark.asyncio
    async def test_popular_unavailable_without_any_cache(self, offline, connectivity):
        connectivity.online = False

        with pytest.raises(NotAvailableOfflineError, match="popular places"):
            await offline.get_popular_places()

    @pytest.mark.asyncio
    async def test_popular_online_failure_does_not_derive(self, offline, api, cache,
                                                          paris_places):
        await cache.put(CacheKind.PLACES, "all", paris_places)
        api.get_popular_places.side_effect = ApiError("Failed to fetch popular places", 500)

        with pytest.raises(ApiError):
            await offline.get_popular_places()


class TestMutations:
    @pytest.mark.asyncio
    async def test_online_calls_api_directly(self, offline, api, queue):
        api.add_favorite.return_value = {"id": "f1"}

        assert await offline.add_favorite("1") == {"id": "f1"}
        assert await queue.count() == 0

    @pytest.mark.asyncio
    async def test_offline_enqueues_and_acknowledges(self, offline, api, queue, cache,
                                                     connectivity):
        await cache.put(CacheKind.FAVORITES, "user", [])
        connectivity.online = False

        results = [
            await offline.mark_visited("1"),
            await offline.add_favorite("2"),
            await offline.remove_favorite("2"),
            await offline.create_review("3", 4, content="Lovely"),
        ]

        assert all(r == QUEUED_RESPONSE for r in results)
        actions = await queue.get_all()
        assert [a.type for a in actions] == [
            ActionType.MARK_VISITED,
            ActionType.ADD_FAVORITE,
            ActionType.REMOVE_FAVORITE,
            ActionType.CREATE_REVIEW,
        ]
        assert actions[3].data == {"placeId": "3", "rating": 4, "content": "Lovely"}
        api.add_favorite.assert_not_awaited()
        # Cached lists are left untouched until the next live fetch.
        assert await cache.get(CacheKind.FAVORITES, "user") == []

    @pytest.mark.asyncio
    async def test_online_mutation_replays_pending_actions_first(self, offline, api, queue,
                                                                 connectivity):
        connectivity.online = False
        await offline.add_favorite("1")
        connectivity.online = True

        await offline.remove_favorite("1")

        assert api.mock_calls == [call.add_favorite("1"), call.remove_favorite("1")]
        assert await queue.count() == 0

    @pytest.mark.asyncio
    async def test_online_mutation_queues_behind_stuck_action(self, offline, api, queue,
                                                              connectivity):
        api.add_favorite.side_effect = ApiError("Server busy", status_code=503)
        connectivity.online = False
        await offline.add_favorite("1")
        connectivity.online = True

        result = await offline.remove_favorite("1")

        assert result == QUEUED_RESPONSE
        api.remove_favorite.assert_not_awaited()
        assert [a.type for a in await queue.get_all()] == [
            ActionType.ADD_FAVORITE,
            ActionType.REMOVE_FAVORITE,
        ]

    @pytest.mark.asyncio
    async def test_invalid_rating_is_rejected(self, offline, queue, connectivity):
        connectivity.online = False

        with pytest.raises(WanderGoError, match="between 1 and 5"):
            await offline.create_review("1", 6)
        assert await queue.count() == 0
