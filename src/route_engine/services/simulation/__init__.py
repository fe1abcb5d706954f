"""Time-driven playback of a route geometry."""

from .clock import SimulationClock, SimulationState, SimulationStatus
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler, ThreadingScheduler

__all__ = [
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "SimulationClock",
    "SimulationState",
    "SimulationStatus",
    "ThreadingScheduler",
]
