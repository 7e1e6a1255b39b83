"""Async HTTP client for the WanderGo REST backend."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from wandergo.cli.cache.storage import KeyValueStore
from wandergo.cli.config import get_config_value
from wandergo.errors import ApiError, StorageError

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "@wandergo_token"
AUTH_USER_KEY = "@wandergo_user"


def get_server_url() -> str:
    """Return the configured server URL."""
    return str(get_config_value("server_url", "http://localhost:5000"))


def create_client(server_url: str | None = None, timeout: float = 10.0) -> httpx.AsyncClient:
    """Create an async HTTP client with configured base URL and headers."""
    return httpx.AsyncClient(
        base_url=server_url or get_server_url(),
        headers={"Content-Type": "application/json"},
        timeout=timeout,
    )


async def auth_fetch(
    client: httpx.AsyncClient,
    path: str,
    token: str | None = None,
    method: str = "GET",
    **kwargs: Any,
) -> httpx.Response:
    """Forward a request, attaching a bearer token when one is present.

    The raw response is returned for the caller to interpret.
    """
    headers = dict(kwargs.pop("headers", None) or {})
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return await client.request(method, path, headers=headers, **kwargs)


async def check_reachability(server_url: str | None = None, timeout: float = 2.0) -> bool:
    """Check whether the backend answers at all.

    Any HTTP response counts as reachable; only transport failures
    count as offline.
    """
    try:
        async with httpx.AsyncClient(
            base_url=server_url or get_server_url(), timeout=timeout
        ) as client:
            await client.get("/")
    except (httpx.RequestError, httpx.TimeoutException):
        return False
    return True


def _params(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value not in (None, "")}


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text


class WanderGoApi:
    """Typed wrappers around the backend endpoints the client uses.

    Every call reads the bearer token from the key-value store, so a
    login in one command is visible to the next. Non-2xx responses and
    transport failures raise ``ApiError``.
    """

    def __init__(
        self,
        store: KeyValueStore,
        server_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.store = store
        self.server_url = server_url
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> WanderGoApi:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = create_client(self.server_url)
        return self._client

    async def get_auth_token(self) -> str | None:
        """Return the stored bearer token, if any."""
        try:
            return await self.store.get_item(AUTH_TOKEN_KEY)
        except StorageError as e:
            logger.error("Failed to read auth token: %s", e)
            return None

    async def get_stored_user(self) -> dict[str, Any] | None:
        """Return the user profile saved at login."""
        try:
            raw = await self.store.get_item(AUTH_USER_KEY)
        except StorageError as e:
            logger.error("Failed to read stored user: %s", e)
            return None
        if not raw:
            return None
        user: dict[str, Any] = json.loads(raw)
        return user

    async def auth_fetch(self, path: str, method: str = "GET", **kwargs: Any) -> httpx.Response:
        """Send a request with the stored token attached."""
        token = await self.get_auth_token()
        return await auth_fetch(self._get_client(), path, token=token, method=method, **kwargs)

    async def _request(self, action: str, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self.auth_fetch(path, method=method, **kwargs)
        except httpx.RequestError as e:
            raise ApiError(f"Failed to {action}: {e!s}") from e

        if not response.is_success:
            raise ApiError(
                f"Failed to {action} ({response.status_code}): {_error_detail(response)}",
                status_code=response.status_code,
            )
        return response.json()

    # Places
    async def get_places(
        self,
        city: str | None = None,
        category: str | None = None,
        search: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = _params(city=city, category=category, search=search, limit=limit)
        return await self._request("fetch places", "GET", "/api/places", params=params)

    async def get_place(self, place_id: str) -> dict[str, Any]:
        return await self._request("fetch place", "GET", f"/api/places/{place_id}")

    async def get_nearby_places(
        self,
        lat: float,
        lng: float,
        radius: float | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = _params(lat=lat, lng=lng, radius=radius, limit=limit)
        return await self._request(
            "fetch nearby places", "GET", "/api/places/nearby", params=params
        )

    async def get_popular_places(self, limit: int | None = None) -> list[dict[str, Any]]:
        return await self._request(
            "fetch popular places", "GET", "/api/places/popular", params=_params(limit=limit)
        )

    async def create_review(
        self,
        place_id: str,
        rating: int,
        content: str | None = None,
        photos: list[str] | None = None,
        visit_date: str | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"rating": rating}
        if content is not None:
            body["content"] = content
        if photos is not None:
            body["photos"] = photos
        if visit_date is not None:
            body["visitDate"] = visit_date
        return await self._request(
            "create review", "POST", f"/api/places/{place_id}/reviews", json=body
        )

    async def get_place_reviews(self, place_id: str) -> list[dict[str, Any]]:
        return await self._request("fetch reviews", "GET", f"/api/places/{place_id}/reviews")

    async def get_community_reviews(self, limit: int | None = None) -> list[dict[str, Any]]:
        return await self._request(
            "fetch community reviews",
            "GET",
            "/api/reviews/community",
            params=_params(limit=limit),
        )

    async def generate_article(self, place_id: str) -> dict[str, Any]:
        """Ask the server to write an article about a place."""
        return await self._request(
            "generate article", "POST", f"/api/places/{place_id}/article"
        )

    # Favorites and visited
    async def get_favorites(self) -> list[dict[str, Any]]:
        return await self._request("fetch favorites", "GET", "/api/favorites")

    async def add_favorite(self, place_id: str) -> Any:
        return await self._request("add favorite", "POST", f"/api/favorites/{place_id}")

    async def remove_favorite(self, place_id: str) -> Any:
        return await self._request("remove favorite", "DELETE", f"/api/favorites/{place_id}")

    async def get_visited_places(self) -> list[dict[str, Any]]:
        return await self._request("fetch visited places", "GET", "/api/visited")

    async def mark_visited(self, place_id: str) -> Any:
        return await self._request("mark as visited", "POST", f"/api/visited/{place_id}")

    # Routes and itineraries
    async def get_routes(self) -> list[dict[str, Any]]:
        return await self._request("fetch routes", "GET", "/api/routes")

    async def get_route(self, route_id: str) -> dict[str, Any]:
        return await self._request("fetch route", "GET", f"/api/routes/{route_id}")

    async def get_public_routes(self, limit: int | None = None) -> list[dict[str, Any]]:
        return await self._request(
            "fetch public routes", "GET", "/api/routes/public", params=_params(limit=limit)
        )

    async def create_route(
        self,
        name: str,
        place_ids: list[str],
        route_type: str = "walking",
        description: str | None = None,
        estimated_duration: int | None = None,
        estimated_distance: float | None = None,
        is_public: bool = False,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "name": name,
            "routeType": route_type,
            "placeIds": place_ids,
            "isPublic": is_public,
        }
        if description is not None:
            body["description"] = description
        if estimated_duration is not None:
            body["estimatedDuration"] = estimated_duration
        if estimated_distance is not None:
            body["estimatedDistance"] = estimated_distance
        return await self._request("create route", "POST", "/api/routes", json=body)

    async def delete_route(self, route_id: str) -> Any:
        return await self._request("delete route", "DELETE", f"/api/routes/{route_id}")

    async def generate_itinerary(
        self,
        place_ids: list[str],
        route_type: str = "walking",
        available_hours: float | None = None,
    ) -> dict[str, Any]:
        """Draft a day schedule for the given places without saving it."""
        body: dict[str, Any] = {"placeIds": place_ids, "routeType": route_type}
        if available_hours is not None:
            body["availableHours"] = available_hours
        return await self._request(
            "generate itinerary", "POST", "/api/routes/generate-itinerary", json=body
        )

    async def get_itineraries(self) -> list[dict[str, Any]]:
        return await self._request("fetch itineraries", "GET", "/api/itineraries")

    async def get_itinerary(self, itinerary_id: str) -> dict[str, Any]:
        return await self._request(
            "fetch itinerary", "GET", f"/api/itineraries/{itinerary_id}"
        )

    async def create_itinerary(
        self,
        title: str,
        date: str,
        place_ids: list[str],
        city: str | None = None,
        country: str | None = None,
        route_type: str | None = None,
        available_hours: float | None = None,
    ) -> dict[str, Any]:
        """Create an itinerary; the server generates its schedule."""
        body: dict[str, Any] = {"title": title, "date": date, "placeIds": place_ids}
        optional = {
            "city": city,
            "country": country,
            "routeType": route_type,
            "availableHours": available_hours,
        }
        body.update({key: value for key, value in optional.items() if value is not None})
        return await self._request("create itinerary", "POST", "/api/itineraries", json=body)

    async def update_itinerary(self, itinerary_id: str, is_completed: bool) -> dict[str, Any]:
        return await self._request(
            "update itinerary",
            "PUT",
            f"/api/itineraries/{itinerary_id}",
            json={"isCompleted": is_completed},
        )

    async def delete_itinerary(self, itinerary_id: str) -> Any:
        return await self._request(
            "delete itinerary", "DELETE", f"/api/itineraries/{itinerary_id}"
        )

    async def get_achievements(self) -> list[dict[str, Any]]:
        return await self._request("fetch achievements", "GET", "/api/achievements")

    async def check_achievements(self) -> Any:
        """Ask the server to award any newly earned achievements."""
        return await self._request("check achievements", "POST", "/api/achievements/check")

    # Users
    async def get_user_profile(self, user_id: str) -> dict[str, Any]:
        return await self._request("fetch user profile", "GET", f"/api/users/{user_id}")

    async def get_followers(self, user_id: str) -> list[dict[str, Any]]:
        return await self._request("fetch followers", "GET", f"/api/users/{user_id}/followers")

    async def get_following(self, user_id: str) -> list[dict[str, Any]]:
        return await self._request("fetch following", "GET", f"/api/users/{user_id}/following")

    async def follow_user(self, user_id: str) -> Any:
        return await self._request("follow user", "POST", f"/api/users/{user_id}/follow")

    async def unfollow_user(self, user_id: str) -> Any:
        return await self._request("unfollow user", "DELETE", f"/api/users/{user_id}/follow")

    # Auth
    async def login(self, username: str, password: str) -> dict[str, Any]:
        """Log in and persist the returned token and user.

        Returns:
            The user profile returned by the server
        """
        result = await self._request(
            "log in",
            "POST",
            "/api/auth/login",
            json={"username": username, "password": password},
        )
        return await self._store_session(result)

    async def register(
        self, username: str, password: str, display_name: str | None = None
    ) -> dict[str, Any]:
        """Create an account and log straight into it."""
        body = {"username": username, "password": password}
        if display_name:
            body["displayName"] = display_name
        result = await self._request("register", "POST", "/api/auth/register", json=body)
        return await self._store_session(result)

    async def _store_session(self, result: dict[str, Any]) -> dict[str, Any]:
        user: dict[str, Any] = result.get("user") or {}
        await self.store.multi_set(
            [(AUTH_TOKEN_KEY, str(result["token"])), (AUTH_USER_KEY, json.dumps(user))]
        )
        return user

    async def logout(self) -> None:
        """Forget the stored token and user."""
        await self.store.multi_remove([AUTH_TOKEN_KEY, AUTH_USER_KEY])
