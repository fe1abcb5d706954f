"""Route optimization and simulation engine."""

from .models.domain import Coordinate, Stop
from .services.geospatial import bearing_degrees, distance_m, line_length, point_along, slice_line
from .services.routing.matrix import build_distance_matrix
from .services.routing.models import OptimizationResult, RouteGeometry
from .services.routing.optimizer import optimize_route
from .services.simulation import SimulationClock, SimulationState, SimulationStatus

__all__ = [
    "Coordinate",
    "OptimizationResult",
    "RouteGeometry",
    "SimulationClock",
    "SimulationState",
    "SimulationStatus",
    "Stop",
    "bearing_degrees",
    "build_distance_matrix",
    "distance_m",
    "line_length",
    "optimize_route",
    "point_along",
    "slice_line",
]
