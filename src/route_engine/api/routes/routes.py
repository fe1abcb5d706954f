"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import (
    OptimizeRequest,
    OptimizeResponse,
    RouteGeometryModel,
    RouteRequest,
    RouteResponse,
    StopModel,
)
from ...services.routing.service import compute_route, optimize_stops

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/optimize", response_model=OptimizeResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRequest) -> OptimizeResponse:
    try:
        result = optimize_stops(
            [stop.to_domain() for stop in payload.stops],
            use_provider_matrix=payload.use_provider_matrix,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}",
        ) from exc
    return OptimizeResponse(
        order=result.order,
        optimized_stops=[StopModel.from_domain(stop) for stop in result.optimized_stops],
        original_distance=result.original_distance,
        optimized_distance=result.optimized_distance,
        improvement_percent=result.improvement_percent,
        elapsed_ms=result.elapsed_ms,
        matrix_source=result.matrix_source,
    )


@router.post("/geometry", response_model=RouteResponse, status_code=status.HTTP_200_OK)
def geometry(payload: RouteRequest) -> RouteResponse:
    """Road geometry through the stops, or a synthesized one when the routing service is unavailable."""
    route = compute_route([stop.to_domain() for stop in payload.stops])
    if route is None:
        return RouteResponse(route=None)
    return RouteResponse(
        route=RouteGeometryModel(
            coordinates=[[lng, lat] for lng, lat in route.coordinates],
            distance_m=route.distance_m,
            duration_s=route.duration_s,
            source=route.source,
        )
    )
