"""HTTP client for the external routing service (OSRM or Mapbox)."""

from __future__ import annotations

import logging
import time
from typing import Sequence

import httpx

from ...config import settings
from ...models.domain import Coordinate
from .matrix import coerce_provider_matrix
from .models import RouteGeometry

logger = logging.getLogger(__name__)

# Two road-covered points in Amman, Jordan (lng, lat).
HEALTH_CHECK_COORDS: tuple[Coordinate, ...] = (
    (35.9106, 31.9539),
    (35.8797, 31.9632),
)


class RoutingProviderClient:
    """Fetch road geometry and distance matrices.

    Public methods never raise for service failures: they log and return
    ``None`` so callers can fall back to local geometry.
    """

    def __init__(
        self,
        base_url: str | None = None,
        provider: str | None = None,
        profile: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.base_url = (base_url or settings.routing_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("Routing service base URL is not configured.")
        self.provider = provider or settings.routing_provider
        if self.provider not in ("osrm", "mapbox"):
            raise ValueError(f"Unsupported routing provider: {self.provider}")
        self.profile = profile or settings.routing_profile
        self.access_token = access_token if access_token is not None else settings.routing_access_token
        self.timeout = timeout if timeout is not None else settings.routing_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.routing_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.routing_backoff_seconds

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=5.0))

    def _route_url(self, coordinate_str: str) -> str:
        if self.provider == "mapbox":
            return f"{self.base_url}/directions/v5/mapbox/{self.profile}/{coordinate_str}"
        return f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

    def _matrix_url(self, coordinate_str: str) -> str:
        if self.provider == "mapbox":
            return f"{self.base_url}/directions-matrix/v1/mapbox/{self.profile}/{coordinate_str}"
        return f"{self.base_url}/table/v1/{self.profile}/{coordinate_str}"

    def _with_token(self, params: dict) -> dict:
        if self.provider == "mapbox" and self.access_token:
            return {**params, "access_token": self.access_token}
        return params

    def _get_json(self, url: str, params: dict) -> dict:
        """GET ``url`` with retries; raise ``ConnectionError`` once retries are exhausted."""

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise ValueError("Routing service returned a non-object payload.")
                    if data.get("code") != "Ok":
                        raise ValueError(f"Routing service answered {data.get('code')}: {data.get('message', '')}")
                    return data
                except httpx.HTTPStatusError as e:
                    # Client errors will not improve on retry.
                    if 400 <= e.response.status_code < 500 and e.response.status_code != 429:
                        raise ConnectionError(
                            f"Routing service rejected the request ({e.response.status_code})."
                        ) from e
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(f"Routing service failed after {attempt} attempts: {e}") from e
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(f"Failed to reach routing service at {self.base_url}: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Routing request failed, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
                except ValueError as e:
                    raise ConnectionError(str(e)) from e
        finally:
            client.close()

    def route(self, coordinates: Sequence[Coordinate]) -> RouteGeometry | None:
        """Road geometry through ``coordinates`` in order, or ``None``."""

        if len(coordinates) < 2:
            return None
        coordinate_str = ";".join(f"{lng},{lat}" for lng, lat in coordinates)
        params = self._with_token({"geometries": "geojson", "overview": "full", "steps": "false"})
        try:
            data = self._get_json(self._route_url(coordinate_str), params)
            routes = data.get("routes") or []
            if not routes:
                logger.warning("Routing service returned no routes.")
                return None
            best = routes[0]
            line = [(float(lng), float(lat)) for lng, lat, *_ in best["geometry"]["coordinates"]]
            return RouteGeometry(
                coordinates=tuple(line),
                distance_m=float(best["distance"]),
                duration_s=float(best["duration"]),
                source="provider",
            )
        except (ConnectionError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Routing service route request failed: {e}")
            return None

    def distance_matrix(self, coordinates: Sequence[Coordinate]) -> list[list[float]] | None:
        """Road distances (metres) between every pair of ``coordinates``, or ``None``."""

        if len(coordinates) < 2:
            return None
        coordinate_str = ";".join(f"{lng},{lat}" for lng, lat in coordinates)
        params = self._with_token({"annotations": "distance"})
        try:
            data = self._get_json(self._matrix_url(coordinate_str), params)
        except ConnectionError as e:
            logger.warning(f"Routing service matrix request failed: {e}")
            return None
        return coerce_provider_matrix(data.get("distances"), len(coordinates))

    def check_health(self, coordinates: Sequence[Coordinate] | None = None) -> bool:
        """Return True when a route between two points on land can be fetched.

        ``coordinates`` defaults to a pair in Amman; pass points covered by the
        server's map when it only holds a regional extract.
        """

        return self.route(coordinates or HEALTH_CHECK_COORDS) is not None
