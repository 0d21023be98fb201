"""Device position sensor abstraction and the location error taxonomy."""
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional
from weather_data import Coordinate


class LocationErrorKind(Enum):
    """Closed set of reasons a location lookup can fail."""
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    INVALID_COORDS = "INVALID_COORDS"
    NETWORK_FAILURE = "NETWORK_FAILURE"


LOCATION_MESSAGES = {
    LocationErrorKind.PERMISSION_DENIED: (
        "Location access was denied. Allow location access for this application "
        "in your system settings, or search for a city instead."
    ),
    LocationErrorKind.POSITION_UNAVAILABLE: (
        "Your location could not be determined. Check that location services are "
        "enabled and that you are connected to a network, or search for a city instead."
    ),
    LocationErrorKind.TIMEOUT: (
        "Finding your location took too long. Move to a spot with better signal "
        "and try again, or search for a city instead."
    ),
    LocationErrorKind.INVALID_COORDS: (
        "The location service returned invalid coordinates. Try again, or search "
        "for a city instead."
    ),
    LocationErrorKind.NETWORK_FAILURE: (
        "The location service could not be reached. Check your internet connection "
        "and try again."
    ),
}


class LocationError(Exception):
    """Base class for location failures; carries a stable kind and user text."""
    kind = LocationErrorKind.POSITION_UNAVAILABLE

    def __init__(self, detail: str = ""):
        self.detail = detail
        self.message = LOCATION_MESSAGES[self.kind]
        super().__init__(f"{self.message} ({detail})" if detail else self.message)

    @property
    def code(self) -> str:
        return self.kind.value


class LocationPermissionDenied(LocationError):
    kind = LocationErrorKind.PERMISSION_DENIED


class LocationUnavailable(LocationError):
    kind = LocationErrorKind.POSITION_UNAVAILABLE


class LocationTimeout(LocationError):
    kind = LocationErrorKind.TIMEOUT


class InvalidCoordinates(LocationError):
    kind = LocationErrorKind.INVALID_COORDS


class LocationNetworkFailure(LocationError):
    kind = LocationErrorKind.NETWORK_FAILURE


def validate_coordinate(latitude: Any, longitude: Any, accuracy: Optional[float] = None) -> Coordinate:
    """
    Build a Coordinate, rejecting anything that is not a real position.

    Raises:
        InvalidCoordinates: If either value is non-numeric, not finite, or out of range
    """
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise InvalidCoordinates(f"non-numeric coordinates: {latitude!r}, {longitude!r}")
    # bool is an int subclass but never a coordinate
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        raise InvalidCoordinates(f"non-numeric coordinates: {latitude!r}, {longitude!r}")
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidCoordinates(f"non-finite coordinates: {lat}, {lon}")
    if abs(lat) > 90 or abs(lon) > 180:
        raise InvalidCoordinates(f"coordinates out of range: {lat}, {lon}")
    return Coordinate(latitude=lat, longitude=lon, accuracy=accuracy)


@dataclass(frozen=True)
class PositionOptions:
    """Options for one position request."""
    timeout: float  # seconds
    maximum_age: float  # seconds; 0 means a fresh fix is required
    high_accuracy: bool


class PositionSensor(ABC):
    """Abstract device position source."""

    def permission_state(self) -> Optional[str]:
        """
        Report the platform permission state.

        Returns:
            "granted", "prompt", "denied", or None when the platform has no
            permission API
        """
        return None

    @abstractmethod
    def get_position(self, options: PositionOptions) -> Coordinate:
        """
        Acquire a position fix.

        Raises:
            LocationPermissionDenied, LocationUnavailable or LocationTimeout
        """
        pass


class StaticPositionSensor(PositionSensor):
    """
    A sensor backed by a fixed, configured position (WEATHER_LAT/WEATHER_LON).

    The fix is stamped when the sensor is built and behaves like a cached
    platform fix: it is only handed out while younger than the request's
    maximum_age, so a request with maximum_age 0 always fails. Values are
    passed through unvalidated; the resolver checks them like any other fix.
    """

    def __init__(
        self,
        latitude: float,
        longitude: float,
        accuracy: Optional[float] = None,
        permission: Optional[str] = "granted",
        clock: Callable[[], float] = time.monotonic,
        fixed_at: Optional[float] = None
    ):
        self.latitude = latitude
        self.longitude = longitude
        self.accuracy = accuracy
        self.permission = permission
        self._clock = clock
        self.fixed_at = clock() if fixed_at is None else fixed_at

    def permission_state(self) -> Optional[str]:
        return self.permission

    def get_position(self, options: PositionOptions) -> Coordinate:
        if self.permission == "denied":
            raise LocationPermissionDenied("configured sensor is denied")
        age = self._clock() - self.fixed_at
        if age >= options.maximum_age:
            raise LocationUnavailable(
                f"configured fix is {age:.1f}s old (maximum age {options.maximum_age:.0f}s)"
            )
        return Coordinate(self.latitude, self.longitude, self.accuracy)


class UnavailablePositionSensor(PositionSensor):
    """Placeholder used when the machine has no position source."""

    def get_position(self, options: PositionOptions) -> Coordinate:
        raise LocationUnavailable("no position sensor configured")
