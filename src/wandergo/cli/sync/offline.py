"""Offline-aware resource accessors.

Reads prefer the live API, write through to the cache, fall back to the
cache when the API fails, and when fully offline may derive an answer from
the broader cached place list. Writes made while offline are queued.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from wandergo.cli.cache.manager import CacheKind, CacheManager
from wandergo.cli.client import WanderGoApi
from wandergo.cli.sync.geo import haversine_km
from wandergo.cli.sync.queue import ActionType, OfflineQueue
from wandergo.errors import ApiError, NotAvailableOfflineError, WanderGoError

logger = logging.getLogger(__name__)

DEFAULT_NEARBY_RADIUS_KM = 20.0
DEFAULT_RESULT_LIMIT = 10

QUEUED_RESPONSE: dict[str, Any] = {
    "queued": True,
    "message": "Action will be synced when online",
}


def filter_places(
    places: list[dict[str, Any]],
    city: str | None = None,
    category: str | None = None,
    search: str | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Apply the server's place filters to a cached collection."""
    if city:
        needle = city.lower()
        places = [p for p in places if needle in str(p.get("city") or "").lower()]
    if category:
        places = [p for p in places if p.get("category") == category]
    if search:
        needle = search.lower()
        places = [
            p
            for p in places
            if needle in str(p.get("name") or "").lower()
            or needle in str(p.get("description") or "").lower()
        ]
    if limit:
        places = places[:limit]
    return places


def rank_popular(places: list[dict[str, Any]], limit: int) -> list[dict[str, Any]]:
    """Rated places, best first."""
    rated = [p for p in places if p.get("avgRating") is not None]
    rated.sort(key=lambda p: float(p["avgRating"]), reverse=True)
    return rated[:limit]


def rank_nearby(
    places: list[dict[str, Any]],
    lat: float,
    lng: float,
    radius_km: float,
    limit: int,
) -> list[dict[str, Any]]:
    """Places within ``radius_km``, nearest first, each with a ``distance`` in km."""
    annotated = [
        {**p, "distance": haversine_km(lat, lng, float(p["latitude"]), float(p["longitude"]))}
        for p in places
        if p.get("latitude") is not None and p.get("longitude") is not None
    ]
    within = [p for p in annotated if p["distance"] <= radius_km]
    within.sort(key=lambda p: p["distance"])
    return within[:limit]


class OfflineApi:
    """Resource accessors that keep working without a connection."""

    def __init__(
        self,
        api: WanderGoApi,
        cache: CacheManager,
        queue: OfflineQueue,
        is_online: Callable[[], bool],
    ) -> None:
        self.api = api
        self.cache = cache
        self.queue = queue
        self._is_online = is_online

    async def _read_through(
        self,
        kind: CacheKind,
        identifier: str,
        fetch: Callable[[], Awaitable[Any]],
        unavailable: str,
        save: Callable[[Any], Awaitable[None]] | None = None,
    ) -> Any:
        if self._is_online():
            try:
                data = await fetch()
            except ApiError:
                cached = await self.cache.get(kind, identifier)
                if cached is not None:
                    logger.warning("Live fetch failed, serving cached %s", kind.value)
                    return cached
                raise
            if save is not None:
                await save(data)
            else:
                await self.cache.put(kind, identifier, data)
            return data

        cached = await self.cache.get(kind, identifier)
        if cached is not None:
            return cached
        raise NotAvailableOfflineError(unavailable)

    async def _all_places(self) -> list[dict[str, Any]] | None:
        cached: list[dict[str, Any]] | None = await self.cache.get(CacheKind.PLACES, "all")
        return cached

    # Places
    async def get_places(
        self,
        city: str | None = None,
        category: str | None = None,
        search: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """List places, filtering the cached full list client-side when offline."""
        unfiltered = not (city or category or search or limit)

        if self._is_online():
            try:
                places: list[dict[str, Any]] = await self.api.get_places(
                    city=city, category=category, search=search, limit=limit
                )
            except ApiError:
                cached = await self._all_places()
                if cached is not None:
                    logger.warning("Live fetch failed, serving cached places")
                    return filter_places(cached, city, category, search, limit)
                raise
            if unfiltered:
                await self.cache.save_places_for_offline(places)
            return places

        cached = await self._all_places()
        if cached is not None:
            return filter_places(cached, city, category, search, limit)
        raise NotAvailableOfflineError(
            "No cached data available. Please connect to the internet."
        )

    async def get_place(self, place_id: str) -> dict[str, Any]:
        return await self._read_through(
            CacheKind.PLACE,
            place_id,
            lambda: self.api.get_place(place_id),
            "Place not available offline.",
        )

    async def get_popular_places(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Popular places; offline, ranks the cached full list by rating."""
        limit = limit or DEFAULT_RESULT_LIMIT
        identifier = f"popular_{limit}"
        try:
            return await self._read_through(
                CacheKind.POPULAR_PLACES,
                identifier,
                lambda: self.api.get_popular_places(limit),
                "No cached popular places available. Please connect to the internet.",
            )
        except NotAvailableOfflineError:
            all_places = await self._all_places()
            if all_places is None:
                raise
            return rank_popular(all_places, limit)

    async def get_nearby_places(
        self,
        lat: float,
        lng: float,
        radius_km: float | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Nearby places; offline, filters the cached full list by distance."""
        identifier = f"nearby_{lat:.2f}_{lng:.2f}"
        try:
            return await self._read_through(
                CacheKind.NEARBY_PLACES,
                identifier,
                lambda: self.api.get_nearby_places(lat, lng, radius_km, limit),
                "No cached nearby places available. Please connect to the internet.",
            )
        except NotAvailableOfflineError:
            all_places = await self._all_places()
            if all_places is None:
                raise
            return rank_nearby(
                all_places,
                lat,
                lng,
                radius_km or DEFAULT_NEARBY_RADIUS_KM,
                limit or DEFAULT_RESULT_LIMIT,
            )

    # Routes and itineraries
    async def get_routes(self) -> list[dict[str, Any]]:
        return await self._read_through(
            CacheKind.ROUTES,
            "user",
            self.api.get_routes,
            "No cached routes available. Please connect to the internet.",
            save=self.cache.save_routes_for_offline,
        )

    async def get_route(self, route_id: str) -> dict[str, Any]:
        return await self._read_through(
            CacheKind.ROUTE,
            route_id,
            lambda: self.api.get_route(route_id),
            "Route not available offline.",
        )

    async def get_itineraries(self) -> list[dict[str, Any]]:
        return await self._read_through(
            CacheKind.ITINERARIES,
            "user",
            self.api.get_itineraries,
            "No cached itineraries available. Please connect to the internet.",
            save=self.cache.save_itineraries_for_offline,
        )

    async def get_itinerary(self, itinerary_id: str) -> dict[str, Any]:
        return await self._read_through(
            CacheKind.ITINERARY,
            itinerary_id,
            lambda: self.api.get_itinerary(itinerary_id),
            "Itinerary not available offline.",
        )

    # User collections
    async def get_favorites(self) -> list[dict[str, Any]]:
        return await self._read_through(
            CacheKind.FAVORITES,
            "user",
            self.api.get_favorites,
            "No cached favorites available. Please connect to the internet.",
        )

    async def get_visited(self) -> list[dict[str, Any]]:
        return await self._read_through(
            CacheKind.VISITED,
            "user",
            self.api.get_visited_places,
            "No cached visited places available. Please connect to the internet.",
        )

    async def get_achievements(self) -> list[dict[str, Any]]:
        return await self._read_through(
            CacheKind.ACHIEVEMENTS,
            "user",
            self.api.get_achievements,
            "No cached achievements available. Please connect to the internet.",
        )

    async def _can_send_directly(self) -> bool:
        """Whether a mutation may skip the queue.

        Offline it may not. Online, pending actions are replayed first; if
        any of them are still queued afterwards the new mutation queues
        behind them so the server sees every action in submission order.
        """
        if not self._is_online():
            return False
        if await self.queue.count() == 0:
            return True
        result = await self.queue.drain(self.api)
        if result.remaining:
            logger.warning(
                "%d earlier action(s) still pending, queuing behind them", result.remaining
            )
            return False
        return True

    # Mutations: direct when possible, queued otherwise. Cached lists are
    # not patched, so they show the change only after the next live fetch.
    async def mark_visited(self, place_id: str) -> Any:
        if await self._can_send_directly():
            return await self.api.mark_visited(place_id)
        await self.queue.enqueue(ActionType.MARK_VISITED, {"placeId": place_id})
        return dict(QUEUED_RESPONSE)

    async def add_favorite(self, place_id: str) -> Any:
        if await self._can_send_directly():
            return await self.api.add_favorite(place_id)
        await self.queue.enqueue(ActionType.ADD_FAVORITE, {"placeId": place_id})
        return dict(QUEUED_RESPONSE)

    async def remove_favorite(self, place_id: str) -> Any:
        if await self._can_send_directly():
            return await self.api.remove_favorite(place_id)
        await self.queue.enqueue(ActionType.REMOVE_FAVORITE, {"placeId": place_id})
        return dict(QUEUED_RESPONSE)

    async def create_review(
        self,
        place_id: str,
        rating: int,
        content: str | None = None,
        photos: list[str] | None = None,
        visit_date: str | None = None,
    ) -> Any:
        """Post a review, or queue it while offline.

        Raises:
            WanderGoError: If the rating is outside 1-5
        """
        if not 1 <= rating <= 5:
            raise WanderGoError("Rating must be between 1 and 5")

        if await self._can_send_directly():
            return await self.api.create_review(
                place_id, rating, content=content, photos=photos, visit_date=visit_date
            )

        data: dict[str, Any] = {"placeId": place_id, "rating": rating}
        if content is not None:
            data["content"] = content
        if photos is not None:
            data["photos"] = photos
        if visit_date is not None:
            data["visitDate"] = visit_date
        await self.queue.enqueue(ActionType.CREATE_REVIEW, data)
        return dict(QUEUED_RESPONSE)
