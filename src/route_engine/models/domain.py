"""Domain models for route stops."""

from dataclasses import dataclass

Coordinate = tuple[float, float]
"""A ``(longitude, latitude)`` pair in degrees."""


@dataclass(slots=True)
class Stop:
    """A named, addressed point the route must visit.

    The position of a stop in its containing sequence is its visiting order.
    The identifier never changes; position and address may be updated when
    the stop is moved.
    """

    stop_id: str
    name: str
    longitude: float
    latitude: float
    address: str = ""

    @property
    def coordinate(self) -> Coordinate:
        return (self.longitude, self.latitude)

    def __setattr__(self, name: str, value: object) -> None:
        if name == "stop_id" and hasattr(self, "stop_id"):
            raise AttributeError("Stop identity cannot be changed.")
        object.__setattr__(self, name, value)

    def move_to(self, longitude: float, latitude: float, address: str | None = None) -> None:
        self.longitude = longitude
        self.latitude = latitude
        if address is not None:
            self.address = address
