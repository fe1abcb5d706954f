import itertools
import random

import pytest

from route_engine.models.domain import Stop
from route_engine.services.routing.matrix import build_distance_matrix
from route_engine.services.routing.optimizer import (
    nearest_neighbor,
    optimize_route,
    path_distance_m,
    route_length,
    two_opt,
)


def _stop(sid: str, lng: float, lat: float) -> Stop:
    return Stop(stop_id=sid, name=f"Stop {sid}", address=f"{sid} Street", longitude=lng, latitude=lat)


def _square_crossed() -> list[Stop]:
    # Visiting A, B, C, D in this order crosses the square's diagonals.
    return [
        _stop("A", 0.0, 0.0),
        _stop("B", 0.01, 0.01),
        _stop("C", 0.01, 0.0),
        _stop("D", 0.0, 0.01),
    ]


def _random_stops(seed: int, count: int) -> list[Stop]:
    rng = random.Random(seed)
    return [_stop(f"S{i}", rng.uniform(35.8, 36.0), rng.uniform(31.8, 32.0)) for i in range(count)]


def test_two_opt_uncrosses_square():
    stops = _square_crossed()
    matrix = build_distance_matrix([stop.coordinate for stop in stops])
    crossed = [0, 1, 2, 3]

    improved = two_opt(crossed, matrix)

    assert improved == [0, 2, 1, 3]
    assert route_length(improved, matrix) < route_length(crossed, matrix)
    assert crossed == [0, 1, 2, 3], "input order must not be mutated"


def test_optimize_square_reduces_distance():
    result = optimize_route(_square_crossed())

    assert result.order[0] == 0
    assert sorted(result.order) == [0, 1, 2, 3]
    assert result.optimized_distance < result.original_distance
    assert result.improvement_percent > 0
    assert [stop.stop_id for stop in result.optimized_stops] == ["A", "C", "B", "D"]
    assert result.matrix_source == "local"
    assert result.elapsed_ms >= 0


def test_nearest_neighbor_prefers_first_index_on_ties():
    matrix = [
        [0, 5, 5, 9],
        [5, 0, 1, 1],
        [5, 1, 0, 1],
        [9, 1, 1, 0],
    ]
    assert nearest_neighbor(matrix) == [0, 1, 2, 3]


def test_nearest_neighbor_degenerate_sizes():
    assert nearest_neighbor([]) == []
    assert nearest_neighbor([[0]]) == [0]


@pytest.mark.parametrize("count", [0, 1])
def test_optimize_tiny_inputs_return_identity(count):
    stops = _random_stops(1, count)
    result = optimize_route(stops)
    assert result.order == list(range(count))
    assert result.original_distance == 0.0
    assert result.optimized_distance == 0.0
    assert result.improvement_percent == 0.0


def test_optimize_two_stops_keeps_order():
    stops = _random_stops(2, 2)
    result = optimize_route(stops)
    assert result.order == [0, 1]
    assert result.improvement_percent == 0
    assert result.optimized_stops == stops


@pytest.mark.parametrize("seed,count", [(s, c) for s, c in itertools.product(range(5), (3, 6, 12, 25))])
def test_optimize_returns_permutation_not_worse_than_nearest_neighbor(seed, count):
    stops = _random_stops(seed, count)
    matrix = build_distance_matrix([stop.coordinate for stop in stops])

    result = optimize_route(stops)
    greedy = nearest_neighbor(matrix)

    assert sorted(result.order) == list(range(count))
    assert result.order[0] == 0
    assert result.optimized_distance <= route_length(greedy, matrix) + 1e-9
    assert result.optimized_distance == pytest.approx(route_length(result.order, matrix))
    assert result.original_distance == pytest.approx(path_distance_m(stops))


def test_two_opt_never_increases_length():
    stops = _random_stops(42, 15)
    matrix = build_distance_matrix([stop.coordinate for stop in stops])
    start = list(range(15))
    assert route_length(two_opt(start, matrix), matrix) <= route_length(start, matrix)


def test_optimize_uses_external_matrix():
    stops = _random_stops(3, 4)
    # Road distances that make the listed order the worst choice.
    matrix = [
        [0, 100, 1, 50],
        [100, 0, 50, 1],
        [1, 50, 0, 100],
        [50, 1, 100, 0],
    ]
    result = optimize_route(stops, matrix)
    assert result.matrix_source == "external"
    assert result.order == [0, 2, 1, 3]
    assert result.original_distance == 250
    assert result.optimized_distance == 52


def test_optimize_asymmetric_matrix_terminates_with_permutation():
    rng = random.Random(7)
    n = 10
    matrix = [[0.0 if i == j else rng.uniform(1, 100) for j in range(n)] for i in range(n)]
    stops = _random_stops(7, n)

    result = optimize_route(stops, matrix, matrix_source="provider")

    assert sorted(result.order) == list(range(n))
    assert result.optimized_distance <= route_length(nearest_neighbor(matrix), matrix)
    assert result.matrix_source == "provider"


def test_optimize_rejects_non_square_matrix():
    stops = _random_stops(4, 3)
    with pytest.raises(ValueError):
        optimize_route(stops, [[0, 1, 2], [1, 0]])
    with pytest.raises(ValueError):
        optimize_route(stops, [[0, 1], [1, 0]])


def test_moved_stop_changes_result_but_keeps_identity():
    stops = _square_crossed()
    before = optimize_route(stops).original_distance

    stops[1].move_to(0.0, 0.005, address="Moved")

    result = optimize_route(stops)
    assert stops[1].stop_id == "B"
    assert stops[1].address == "Moved"
    assert stops[1].coordinate == (0.0, 0.005)
    assert result.original_distance != before


def test_stop_identity_cannot_be_reassigned():
    stop = _stop("A", 1.0, 2.0)
    with pytest.raises(AttributeError):
        stop.stop_id = "Z"
    assert stop.stop_id == "A"

    stop.name = "Renamed"
    assert stop.name == "Renamed"


def test_two_opt_reads_epsilon_setting_at_call_time(monkeypatch):
    from route_engine.config import settings

    stops = _square_crossed()
    matrix = build_distance_matrix([stop.coordinate for stop in stops])

    monkeypatch.setattr(settings, "two_opt_epsilon", 1e9)
    assert two_opt([0, 1, 2, 3], matrix) == [0, 1, 2, 3]

    monkeypatch.setattr(settings, "two_opt_epsilon", 0.001)
    assert two_opt([0, 1, 2, 3], matrix) == [0, 2, 1, 3]
    assert two_opt([0, 1, 2, 3], matrix, epsilon=1e9) == [0, 1, 2, 3]
