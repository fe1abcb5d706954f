"""Stop sequence optimization.

A nearest-neighbour tour seeded at the first stop is refined with 2-opt
reversals until no move shortens the open path. The first stop is the start
of the route and is never moved.
"""

from __future__ import annotations

import logging
import time
from typing import Literal, Sequence

from ...config import settings
from ...models.domain import Stop
from ..geospatial import distance_m
from .matrix import build_distance_matrix, validate_matrix
from .models import OptimizationResult

logger = logging.getLogger(__name__)


def route_length(order: Sequence[int], matrix: Sequence[Sequence[float]]) -> float:
    """Length of the open path visiting ``order`` (no return leg)."""

    total = 0.0
    for i in range(1, len(order)):
        total += matrix[order[i - 1]][order[i]]
    return total


def path_distance_m(stops: Sequence[Stop]) -> float:
    """Straight-line length of ``stops`` visited in their current order."""

    total = 0.0
    for i in range(1, len(stops)):
        total += distance_m(stops[i - 1].coordinate, stops[i].coordinate)
    return total


def nearest_neighbor(matrix: Sequence[Sequence[float]]) -> list[int]:
    """Greedy tour starting at index 0.

    Candidates are scanned in index order and only a strictly shorter
    distance replaces the current best, so ties go to the lowest index.
    """

    n = len(matrix)
    if n == 0:
        return []
    order = [0]
    visited = {0}
    current = 0
    while len(visited) < n:
        best_index = -1
        best_distance = float("inf")
        for j in range(n):
            if j not in visited and matrix[current][j] < best_distance:
                best_distance = matrix[current][j]
                best_index = j
        if best_index < 0:
            # Only reachable with infinite/NaN distances: append the rest in index order.
            remaining = [j for j in range(n) if j not in visited]
            order.extend(remaining)
            break
        order.append(best_index)
        visited.add(best_index)
        current = best_index
    return order


def _is_symmetric(matrix: Sequence[Sequence[float]]) -> bool:
    n = len(matrix)
    return all(matrix[i][j] == matrix[j][i] for i in range(n) for j in range(i + 1, n))


def _reverse_segment(tour: list[int], start: int, end: int) -> None:
    while start < end:
        tour[start], tour[end] = tour[end], tour[start]
        start += 1
        end -= 1


def two_opt(
    order: Sequence[int],
    matrix: Sequence[Sequence[float]],
    epsilon: float | None = None,
) -> list[int]:
    """Improve ``order`` with 2-opt moves until a full pass finds none.

    Works on a copy. Each move reverses ``tour[i..j]`` in place when
    reconnecting edges ``(i-1, i)`` and ``(j, j+1)`` saves more than
    ``epsilon``. At the last index ``j+1`` is clamped to ``j`` because the
    path does not return to its start. With an asymmetric matrix (road
    distances) a move is kept only if the whole path gets shorter.
    Termination follows from the tour length strictly decreasing; the number
    of passes is not bounded by ``n`` alone, which is acceptable for the
    small stop counts handled here. ``epsilon`` defaults to
    ``settings.two_opt_epsilon``, read at call time.
    """

    if epsilon is None:
        epsilon = settings.two_opt_epsilon
    tour = list(order)
    n = len(tour)
    symmetric = _is_symmetric(matrix)
    passes = 0
    improved = True
    while improved:
        improved = False
        passes += 1
        for i in range(1, n - 1):
            for j in range(i + 1, n):
                j_next = j + 1 if j + 1 < n else j
                before = matrix[tour[i - 1]][tour[i]] + matrix[tour[j]][tour[j_next]]
                after = matrix[tour[i - 1]][tour[j]] + matrix[tour[i]][tour[j_next]]
                if after < before - epsilon:
                    if symmetric:
                        _reverse_segment(tour, i, j)
                        improved = True
                        continue
                    # Reversal flips the direction of inner edges, so check the whole path.
                    current = route_length(tour, matrix)
                    _reverse_segment(tour, i, j)
                    if route_length(tour, matrix) < current - epsilon:
                        improved = True
                    else:
                        _reverse_segment(tour, i, j)
        logger.debug(f"2-opt pass {passes}: improved={improved}")
    return tour


def optimize_route(
    stops: Sequence[Stop],
    matrix: Sequence[Sequence[float]] | None = None,
    *,
    matrix_source: Literal["local", "provider", "external"] | None = None,
) -> OptimizationResult:
    """Reorder ``stops`` to shorten the path through them.

    ``matrix`` may carry externally measured distances (e.g. road distances);
    otherwise straight-line distances in metres are used. A matrix that is not
    ``len(stops)`` square raises ``ValueError``.
    """

    started = time.perf_counter()
    n = len(stops)
    if matrix is None:
        matrix = build_distance_matrix([stop.coordinate for stop in stops])
        source = matrix_source or "local"
    else:
        validate_matrix(matrix, n)
        source = matrix_source or "external"

    original = list(range(n))
    original_distance = route_length(original, matrix)

    if n <= 2:
        order = original
    else:
        order = two_opt(nearest_neighbor(matrix), matrix)

    optimized_distance = route_length(order, matrix)
    improvement = (
        (original_distance - optimized_distance) / original_distance * 100 if original_distance > 0 else 0.0
    )
    elapsed_ms = (time.perf_counter() - started) * 1000

    logger.info(
        f"Optimized {n} stops using {source} matrix: "
        f"{original_distance:.1f} -> {optimized_distance:.1f} ({improvement:.1f}%) in {elapsed_ms:.2f}ms"
    )
    return OptimizationResult(
        order=order,
        optimized_stops=[stops[i] for i in order],
        original_distance=original_distance,
        optimized_distance=optimized_distance,
        improvement_percent=improvement,
        elapsed_ms=elapsed_ms,
        matrix_source=source,
    )
