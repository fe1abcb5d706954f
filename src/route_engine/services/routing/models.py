"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal

from ...models.domain import Coordinate, Stop


@dataclass(frozen=True, slots=True)
class RouteGeometry:
    """A drivable polyline with its total distance (metres) and duration (seconds)."""

    coordinates: tuple[Coordinate, ...]
    distance_m: float
    duration_s: float
    source: Literal["provider", "fallback"] = "provider"


@dataclass(slots=True)
class OptimizationResult:
    order: List[int]
    optimized_stops: List[Stop]
    original_distance: float
    optimized_distance: float
    improvement_percent: float
    elapsed_ms: float
    matrix_source: Literal["local", "provider", "external"] = "local"
