"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..config import settings
from ..models.domain import Stop


class StopModel(BaseModel):
    id: str
    name: str = ""
    address: str = ""
    lng: float = Field(..., ge=-180, le=180)
    lat: float = Field(..., ge=-90, le=90)

    def to_domain(self) -> Stop:
        return Stop(stop_id=self.id, name=self.name, address=self.address, longitude=self.lng, latitude=self.lat)

    @classmethod
    def from_domain(cls, stop: Stop) -> "StopModel":
        return cls(id=stop.stop_id, name=stop.name, address=stop.address, lng=stop.longitude, lat=stop.latitude)


class OptimizeRequest(BaseModel):
    stops: List[StopModel] = Field(..., max_length=settings.max_stops)
    use_provider_matrix: bool = Field(
        default=False,
        description="Use road distances from the routing service when it is configured.",
    )


class OptimizeResponse(BaseModel):
    order: List[int]
    optimized_stops: List[StopModel]
    original_distance: float
    optimized_distance: float
    improvement_percent: float
    elapsed_ms: float
    matrix_source: Literal["local", "provider", "external"]


class RouteRequest(BaseModel):
    stops: List[StopModel] = Field(..., max_length=settings.max_stops)


class RouteGeometryModel(BaseModel):
    coordinates: List[List[float]]
    distance_m: float
    duration_s: float
    source: Literal["provider", "fallback"]


class RouteResponse(BaseModel):
    route: Optional[RouteGeometryModel] = None


class LineFractionRequest(BaseModel):
    coordinates: List[List[float]] = Field(..., description="[lng, lat] pairs.")
    fraction: float


class PointAlongResponse(BaseModel):
    lng: float
    lat: float
    bearing: float


class SliceResponse(BaseModel):
    coordinates: List[List[float]]
    length_m: float
