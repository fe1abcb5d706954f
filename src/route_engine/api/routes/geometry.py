"""Polyline helper endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...models.domain import Coordinate
from ...schemas.routing import LineFractionRequest, PointAlongResponse, SliceResponse
from ...services.geospatial import line_length, point_along, slice_line

router = APIRouter(prefix="/geometry", tags=["geometry"])


def _coordinates(raw: list[list[float]]) -> list[Coordinate]:
    if any(len(pair) < 2 for pair in raw):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Each coordinate must be a [lng, lat] pair.",
        )
    return [(pair[0], pair[1]) for pair in raw]


@router.post("/point-along", response_model=PointAlongResponse)
def point_along_line(payload: LineFractionRequest) -> PointAlongResponse:
    point = point_along(_coordinates(payload.coordinates), payload.fraction)
    return PointAlongResponse(lng=point.longitude, lat=point.latitude, bearing=point.bearing)


@router.post("/slice", response_model=SliceResponse)
def slice_coordinates(payload: LineFractionRequest) -> SliceResponse:
    sliced = slice_line(_coordinates(payload.coordinates), payload.fraction)
    return SliceResponse(coordinates=[[lng, lat] for lng, lat in sliced], length_m=line_length(sliced))
