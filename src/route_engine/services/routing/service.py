"""Routing orchestration service."""

from __future__ import annotations

import logging
from typing import Sequence

from ...config import settings
from ...models.domain import Stop
from .fallback import make_fallback_route
from .models import OptimizationResult, RouteGeometry
from .optimizer import optimize_route
from .provider_client import RoutingProviderClient

logger = logging.getLogger(__name__)


def get_routing_client() -> RoutingProviderClient | None:
    """Return a routing client, or ``None`` when no service is configured."""

    if not settings.routing_base_url:
        return None
    try:
        return RoutingProviderClient()
    except ValueError as exc:
        logger.warning(f"Routing service misconfigured, using local geometry: {exc}")
        return None


def compute_route(stops: Sequence[Stop], client: RoutingProviderClient | None = None) -> RouteGeometry | None:
    """Road geometry through ``stops`` from the routing service, else a synthesized route."""

    if len(stops) < 2:
        return None
    client = client if client is not None else get_routing_client()
    if client is not None:
        geometry = client.route([stop.coordinate for stop in stops])
        if geometry is not None and geometry.coordinates:
            return geometry
        logger.warning("Falling back to synthesized route geometry.")
    return make_fallback_route(stops)


def optimize_stops(
    stops: Sequence[Stop],
    *,
    use_provider_matrix: bool = False,
    client: RoutingProviderClient | None = None,
) -> OptimizationResult:
    """Optimize the visiting order, preferring road distances when asked and available."""

    if use_provider_matrix and len(stops) >= 2:
        client = client if client is not None else get_routing_client()
        if client is not None:
            matrix = client.distance_matrix([stop.coordinate for stop in stops])
            if matrix is not None:
                return optimize_route(stops, matrix, matrix_source="provider")
            logger.warning("Falling back to straight-line distance matrix.")
    return optimize_route(stops)
