"""Pairwise distance matrices over stop coordinates."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from ...models.domain import Coordinate
from ..geospatial import distance_m

logger = logging.getLogger(__name__)


def build_distance_matrix(coordinates: Sequence[Coordinate]) -> list[list[float]]:
    """Straight-line distance matrix in metres.

    Only the upper triangle is computed; each value is mirrored so the matrix
    is exactly symmetric with a zero diagonal.
    """

    n = len(coordinates)
    matrix = [[0.0] * n for _ in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            d = distance_m(coordinates[i], coordinates[j])
            matrix[i][j] = d
            matrix[j][i] = d
    return matrix


def validate_matrix(matrix: Sequence[Sequence[float]], size: int) -> None:
    """Raise ``ValueError`` unless ``matrix`` is a ``size`` x ``size`` table."""

    if len(matrix) != size:
        raise ValueError(f"Distance matrix has {len(matrix)} rows, expected {size}.")
    for index, row in enumerate(matrix):
        if len(row) != size:
            raise ValueError(f"Distance matrix row {index} has {len(row)} columns, expected {size}.")


def coerce_provider_matrix(raw: object, size: int) -> list[list[float]] | None:
    """Convert a provider distance table into floats.

    Returns ``None`` when the payload is malformed or contains unreachable
    (``None``) or negative entries, so callers can fall back to a local matrix.
    """

    if not isinstance(raw, list) or len(raw) != size:
        logger.warning(f"Provider matrix has unexpected shape; expected {size} rows.")
        return None
    matrix: list[list[float]] = []
    for row in raw:
        if not isinstance(row, list) or len(row) != size:
            logger.warning("Provider matrix has a ragged row.")
            return None
        values: list[float] = []
        for value in row:
            if value is None:
                logger.warning("Provider matrix contains unreachable pairs.")
                return None
            try:
                number = float(value)
            except (TypeError, ValueError):
                logger.warning(f"Provider matrix contains non-numeric distance {value!r}.")
                return None
            if math.isnan(number) or number < 0:
                logger.warning(f"Provider matrix contains invalid distance {value!r}.")
                return None
            values.append(number)
        matrix.append(values)
    for i in range(size):
        matrix[i][i] = 0.0
    return matrix
