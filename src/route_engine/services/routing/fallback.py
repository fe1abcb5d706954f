"""Synthesized route geometry used when no routing service answers."""

from __future__ import annotations

import math
from typing import Sequence

from ...config import settings
from ...models.domain import Coordinate, Stop
from .models import RouteGeometry
from .optimizer import path_distance_m


def _leg_points(a: Stop, b: Stop, include_start: bool, step: float, offset: float) -> list[Coordinate]:
    points: list[Coordinate] = []
    # The last sample is clamped to t = 1 so every leg ends on its stop.
    steps = max(1, math.ceil(1.0 / step - 1e-9))
    for k in range(0 if include_start else 1, steps + 1):
        t = min(1.0, k * step)
        bend = math.sin(t * math.pi) * offset
        points.append(
            (
                a.longitude + (b.longitude - a.longitude) * t + bend,
                a.latitude + (b.latitude - a.latitude) * t + bend * 0.5,
            )
        )
    return points


def make_fallback_route(
    stops: Sequence[Stop],
    *,
    step: float | None = None,
    curve_offset: float | None = None,
    speed_kmh: float | None = None,
) -> RouteGeometry | None:
    """Approximate a drivable route through ``stops`` with gently bent legs.

    Each leg is sampled every ``step`` of its length and pushed sideways by a
    sine-shaped offset so it reads as a road on a map. Legs after the first
    skip ``t = 0`` to avoid repeating the shared stop. Distance is the
    straight-line sum; duration assumes a constant speed.
    """

    if len(stops) < 2:
        return None
    step = step if step is not None else settings.fallback_step
    curve_offset = curve_offset if curve_offset is not None else settings.fallback_curve_offset
    speed_kmh = speed_kmh if speed_kmh is not None else settings.fallback_speed_kmh

    coordinates: list[Coordinate] = []
    for i in range(len(stops) - 1):
        coordinates.extend(_leg_points(stops[i], stops[i + 1], i == 0, step, curve_offset))

    distance = path_distance_m(stops)
    return RouteGeometry(
        coordinates=tuple(coordinates),
        distance_m=distance,
        duration_s=distance / 1000 / speed_kmh * 3600,
        source="fallback",
    )
