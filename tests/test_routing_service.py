import math

import pytest

from route_engine.models.domain import Stop
from route_engine.services.routing import service as routing_service
from route_engine.services.routing.fallback import make_fallback_route
from route_engine.services.routing.models import RouteGeometry
from route_engine.services.routing.optimizer import path_distance_m
from route_engine.services.routing.service import get_routing_client


def _stop(sid: str, lng: float, lat: float) -> Stop:
    return Stop(stop_id=sid, name=f"Stop {sid}", address=f"{sid} Street", longitude=lng, latitude=lat)


DEMO_STOPS = [
    _stop("demo-1", 35.9106, 31.9539),
    _stop("demo-2", 35.8797, 31.9632),
    _stop("demo-3", 35.9301, 31.9285),
    _stop("demo-4", 35.8562, 31.9344),
    _stop("demo-5", 35.8950, 31.9125),
]


class DummyProvider:
    def __init__(self, route=None, matrix=None):
        self._route = route
        self._matrix = matrix
        self.route_calls = 0
        self.matrix_calls = 0

    def route(self, coordinates):
        self.route_calls += 1
        return self._route

    def distance_matrix(self, coordinates):
        self.matrix_calls += 1
        return self._matrix


@pytest.fixture(autouse=True)
def no_configured_provider(monkeypatch):
    monkeypatch.setattr(routing_service, "get_routing_client", lambda: None)


def test_fallback_route_needs_two_stops():
    assert make_fallback_route([]) is None
    assert make_fallback_route(DEMO_STOPS[:1]) is None


def test_fallback_route_shape_and_totals():
    route = make_fallback_route(DEMO_STOPS[:3])

    assert route is not None
    assert route.source == "fallback"
    # 21 samples on the first leg, 20 on each later leg.
    assert len(route.coordinates) == 41
    assert route.coordinates[0] == DEMO_STOPS[0].coordinate
    assert route.coordinates[20] == pytest.approx(DEMO_STOPS[1].coordinate)
    assert route.coordinates[-1] == pytest.approx(DEMO_STOPS[2].coordinate)
    assert route.distance_m == pytest.approx(path_distance_m(DEMO_STOPS[:3]))
    assert route.duration_s == pytest.approx(route.distance_m / 1000 / 40 * 3600)


def test_fallback_route_bends_between_stops():
    a, b = _stop("a", 0.0, 0.0), _stop("b", 0.1, 0.0)
    route = make_fallback_route([a, b])
    midpoint = route.coordinates[10]
    assert midpoint[0] == pytest.approx(0.05 + 0.003)
    assert midpoint[1] == pytest.approx(0.0015)
    assert math.isclose(route.coordinates[0][1], 0.0)


def test_compute_route_without_enough_stops():
    assert routing_service.compute_route(DEMO_STOPS[:1]) is None


def test_compute_route_prefers_provider():
    geometry = RouteGeometry(coordinates=((35.9, 31.9), (35.8, 31.9)), distance_m=9000.0, duration_s=700.0)
    provider = DummyProvider(route=geometry)

    route = routing_service.compute_route(DEMO_STOPS, client=provider)

    assert route is geometry
    assert provider.route_calls == 1


def test_compute_route_falls_back_when_provider_fails():
    provider = DummyProvider(route=None)
    route = routing_service.compute_route(DEMO_STOPS, client=provider)
    assert route.source == "fallback"


def test_compute_route_without_provider_uses_fallback():
    route = routing_service.compute_route(DEMO_STOPS)
    assert route.source == "fallback"


def test_optimize_stops_uses_provider_matrix():
    matrix = [
        [0, 100, 1, 50],
        [100, 0, 50, 1],
        [1, 50, 0, 100],
        [50, 1, 100, 0],
    ]
    provider = DummyProvider(matrix=matrix)

    result = routing_service.optimize_stops(DEMO_STOPS[:4], use_provider_matrix=True, client=provider)

    assert provider.matrix_calls == 1
    assert result.matrix_source == "provider"
    assert result.order == [0, 2, 1, 3]


def test_optimize_stops_falls_back_to_local_matrix():
    provider = DummyProvider(matrix=None)
    result = routing_service.optimize_stops(DEMO_STOPS, use_provider_matrix=True, client=provider)
    assert provider.matrix_calls == 1
    assert result.matrix_source == "local"
    assert sorted(result.order) == list(range(len(DEMO_STOPS)))


def test_optimize_stops_ignores_provider_unless_asked():
    provider = DummyProvider(matrix=[[0]])
    result = routing_service.optimize_stops(DEMO_STOPS, client=provider)
    assert provider.matrix_calls == 0
    assert result.matrix_source == "local"


def test_get_routing_client_unconfigured(monkeypatch):
    from route_engine.config import settings

    monkeypatch.setattr(settings, "routing_base_url", None)
    assert get_routing_client() is None


def test_get_routing_client_configured(monkeypatch):
    from route_engine.config import settings

    monkeypatch.setattr(settings, "routing_base_url", "http://osrm.test")
    client = get_routing_client()
    assert client is not None
    assert client.base_url == "http://osrm.test"


@pytest.mark.parametrize("step", [0.3, 0.4, 0.07, 0.05, 1.0])
def test_fallback_route_every_leg_ends_on_its_stop(step):
    stops = [_stop("a", 0.0, 0.0), _stop("b", 0.1, 0.1), _stop("c", 0.2, 0.0)]

    route = make_fallback_route(stops, step=step)

    steps = math.ceil(1 / step - 1e-9)
    assert len(route.coordinates) == 2 * steps + 1
    assert route.coordinates[0] == stops[0].coordinate
    assert route.coordinates[steps] == pytest.approx(stops[1].coordinate, abs=1e-12)
    assert route.coordinates[-1] == pytest.approx(stops[2].coordinate, abs=1e-12)
