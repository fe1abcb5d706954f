"""Playback clock that moves a marker along a route geometry.

The clock is bound to one ``RouteGeometry`` for its whole life: progress is a
fraction of that geometry's length and means nothing for another one. Use
``with_geometry`` to get a fresh clock when the route changes.

Time advances through ``tick(elapsed_ms)``. A ``Scheduler`` may be supplied
so the clock drives itself while playing; without one the host calls
``tick`` from its own loop.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from ...config import settings
from ...models.domain import Coordinate
from ..geospatial import PointOnLine, clamp_fraction, point_along, slice_line
from ..routing.models import RouteGeometry
from .scheduler import Handle, Scheduler

logger = logging.getLogger(__name__)


class SimulationStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True, slots=True)
class SimulationState:
    status: SimulationStatus
    progress: float
    speed: float


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class SimulationClock:
    def __init__(
        self,
        geometry: RouteGeometry,
        scheduler: Scheduler | None = None,
        *,
        speed: float | None = None,
        speeds: Sequence[float] | None = None,
        base_rate: float | None = None,
        reference_frame_ms: float | None = None,
        max_frame_ms: float | None = None,
        time_source: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self._geometry = geometry
        self._scheduler = scheduler
        self._speeds = tuple(sorted(speeds or settings.simulation_speeds))
        self._base_rate = base_rate if base_rate is not None else settings.simulation_base_rate
        self._reference_frame_ms = (
            reference_frame_ms if reference_frame_ms is not None else settings.simulation_reference_frame_ms
        )
        self._max_frame_ms = max_frame_ms if max_frame_ms is not None else settings.simulation_max_frame_ms
        self._time_source = time_source

        self._lock = threading.RLock()
        self._status = SimulationStatus.IDLE
        self._progress = 0.0
        self._speed = self._speeds[0]
        # Bumped on every transition; scheduled frames from an older generation are ignored.
        self._generation = 0
        self._pending: Handle | None = None
        self._last_frame_ms = 0.0
        if speed is not None:
            self.set_speed(speed)

    @property
    def geometry(self) -> RouteGeometry:
        return self._geometry

    @property
    def state(self) -> SimulationState:
        with self._lock:
            return SimulationState(status=self._status, progress=self._progress, speed=self._speed)

    def with_geometry(self, geometry: RouteGeometry) -> "SimulationClock":
        """Stop this clock and return an idle one for ``geometry`` with the same settings."""

        self.reset()
        return SimulationClock(
            geometry,
            self._scheduler,
            speed=self._speed,
            speeds=self._speeds,
            base_rate=self._base_rate,
            reference_frame_ms=self._reference_frame_ms,
            max_frame_ms=self._max_frame_ms,
            time_source=self._time_source,
        )

    def play(self) -> None:
        with self._lock:
            if not self._geometry.coordinates or self._status is SimulationStatus.PLAYING:
                return
            if self._progress >= 1:
                self._progress = 0.0
            self._status = SimulationStatus.PLAYING
            self._generation += 1
            self._last_frame_ms = self._time_source()
            self._schedule_frame()

    def pause(self) -> None:
        with self._lock:
            if self._status is not SimulationStatus.PLAYING:
                return
            self._cancel_pending()
            self._status = SimulationStatus.PAUSED

    def reset(self) -> None:
        with self._lock:
            self._cancel_pending()
            self._status = SimulationStatus.IDLE
            self._progress = 0.0

    def set_speed(self, multiplier: float) -> None:
        """Use the allowed speed closest to ``multiplier``; non-finite and non-positive values are ignored."""

        if not math.isfinite(multiplier) or multiplier <= 0:
            logger.debug(f"Ignoring invalid simulation speed {multiplier!r}")
            return
        with self._lock:
            self._speed = min(self._speeds, key=lambda option: abs(option - multiplier))

    def set_progress(self, fraction: float) -> None:
        """Jump to ``fraction`` (clamped). Reaching 1.0 this way does not stop playback."""

        with self._lock:
            self._progress = clamp_fraction(fraction)

    def tick(self, elapsed_ms: float) -> SimulationState:
        """Advance by ``elapsed_ms`` of real time if playing."""

        with self._lock:
            if self._status is SimulationStatus.PLAYING:
                self._advance(elapsed_ms)
            return self.state

    def position(self) -> PointOnLine:
        return point_along(self._geometry.coordinates, self.state.progress)

    def traveled_path(self) -> list[Coordinate]:
        return slice_line(self._geometry.coordinates, self.state.progress)

    def _advance(self, elapsed_ms: float) -> None:
        if not (0 < elapsed_ms <= self._max_frame_ms):
            # Dropped frame (stall, suspended tab, clock skew).
            return
        step = self._base_rate * self._speed * (elapsed_ms / self._reference_frame_ms)
        self._progress = min(1.0, self._progress + step)
        if self._progress >= 1:
            self._progress = 1.0
            self._cancel_pending()
            self._status = SimulationStatus.IDLE

    def _schedule_frame(self) -> None:
        if self._scheduler is None:
            return
        generation = self._generation
        self._pending = self._scheduler.schedule(self._reference_frame_ms, lambda: self._on_frame(generation))

    def _on_frame(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._status is not SimulationStatus.PLAYING:
                return
            now = self._time_source()
            elapsed = now - self._last_frame_ms
            self._last_frame_ms = now
            self._pending = None
            self._advance(elapsed)
            if self._status is SimulationStatus.PLAYING:
                self._schedule_frame()

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
