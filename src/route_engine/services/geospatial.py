"""Geospatial helper functions.

All coordinates are ``(longitude, latitude)`` pairs in degrees and all
distances are metres on a spherical earth.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from ..models.domain import Coordinate

EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True, slots=True)
class PointOnLine:
    longitude: float
    latitude: float
    bearing: float


def clamp_fraction(fraction: float) -> float:
    """Clamp ``fraction`` into [0, 1], mapping NaN to 0."""

    if math.isnan(fraction):
        return 0.0
    return min(1.0, max(0.0, fraction))


def distance_m(a: Coordinate, b: Coordinate) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    lon1, lat1 = a
    lon2, lat2 = b
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, h)))


def bearing_degrees(a: Coordinate, b: Coordinate) -> float:
    """Calculate the initial bearing from ``a`` to ``b``.

    Identical points give 0.
    """

    lon1, lat1 = a
    lon2, lat2 = b
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_lambda = math.radians(lon2 - lon1)
    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360


def _segment_lengths(coords: Sequence[Coordinate]) -> list[float]:
    return [distance_m(coords[i - 1], coords[i]) for i in range(1, len(coords))]


def line_length(coords: Sequence[Coordinate]) -> float:
    """Total length of a polyline; 0 for fewer than two points."""

    return sum(_segment_lengths(coords))


def _interpolate(a: Coordinate, b: Coordinate, t: float) -> Coordinate:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def _locate(coords: Sequence[Coordinate], fraction: float) -> tuple[int, Coordinate] | None:
    """Find the segment containing ``fraction`` of the length and the point on it.

    Returns ``(i, point)`` where the point lies on segment ``i-1 -> i``, or
    ``None`` when the target cannot be placed (zero-length line or rounding
    past the final segment).
    """

    lengths = _segment_lengths(coords)
    target = sum(lengths) * fraction
    travelled = 0.0
    for i, seg in enumerate(lengths, start=1):
        if seg > 0 and travelled + seg >= target:
            t = (target - travelled) / seg
            return i, _interpolate(coords[i - 1], coords[i], t)
        travelled += seg
    return None


def point_along(coords: Sequence[Coordinate], fraction: float) -> PointOnLine:
    """Position and heading at ``fraction`` of the cumulative length of ``coords``."""

    if not coords:
        return PointOnLine(0.0, 0.0, 0.0)
    fraction = clamp_fraction(fraction)
    first = coords[0]
    last = coords[-1]
    if fraction <= 0:
        heading = bearing_degrees(first, coords[1]) if len(coords) > 1 else 0.0
        return PointOnLine(first[0], first[1], heading)
    if fraction >= 1:
        heading = bearing_degrees(coords[-2], last) if len(coords) > 1 else 0.0
        return PointOnLine(last[0], last[1], heading)

    located = _locate(coords, fraction)
    if located is None:
        if line_length(coords) == 0:
            heading = bearing_degrees(first, coords[1]) if len(coords) > 1 else 0.0
            return PointOnLine(first[0], first[1], heading)
        return PointOnLine(last[0], last[1], bearing_degrees(coords[-2], last))
    index, (lng, lat) = located
    return PointOnLine(lng, lat, bearing_degrees(coords[index - 1], coords[index]))


def slice_line(coords: Sequence[Coordinate], fraction: float) -> list[Coordinate]:
    """Prefix of ``coords`` ending at the point ``point_along`` reports for ``fraction``."""

    if not coords:
        return []
    fraction = clamp_fraction(fraction)
    if fraction <= 0:
        return [coords[0]]
    if fraction >= 1:
        return list(coords)

    located = _locate(coords, fraction)
    if located is None:
        if line_length(coords) == 0:
            return [coords[0]]
        return list(coords)
    index, point = located
    return [*coords[:index], point]
