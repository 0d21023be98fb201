"""Location resolution: device position first, IP geolocation as the last resort."""
import logging
from enum import Enum
from typing import List, Optional
from ip_geolocation import IpGeolocationProvider
from location_sensor import (
    LocationError,
    LocationPermissionDenied,
    LocationUnavailable,
    PositionOptions,
    PositionSensor,
    validate_coordinate,
)
from weather_data import LocationResult, LocationSource

HIGH_ACCURACY_OPTIONS = PositionOptions(timeout=10.0, maximum_age=0.0, high_accuracy=True)
LOW_ACCURACY_OPTIONS = PositionOptions(timeout=5.0, maximum_age=300.0, high_accuracy=False)

DEVICE_LOCATION_NAME = "Current Location"


class ResolverState(Enum):
    IDLE = "idle"
    CHECKING_PERMISSION = "checking_permission"
    HIGH_ACCURACY_ATTEMPT = "high_accuracy_attempt"
    LOW_ACCURACY_ATTEMPT = "low_accuracy_attempt"
    IP_FALLBACK = "ip_fallback"
    RESOLVED = "resolved"
    FAILED = "failed"


class LocationResolver:
    """
    Walks the location fallback chain once per resolve() call.

    IDLE -> CHECKING_PERMISSION -> HIGH_ACCURACY_ATTEMPT -> LOW_ACCURACY_ATTEMPT
    -> IP_FALLBACK -> RESOLVED | FAILED

    Failures inside the chain are absorbed by moving to the next source; only
    a denied permission or a failed IP lookup reaches the caller. A finished
    run is never retried automatically.
    """

    def __init__(
        self,
        sensor: PositionSensor,
        ip_provider: Optional[IpGeolocationProvider] = None,
        high_accuracy: PositionOptions = HIGH_ACCURACY_OPTIONS,
        low_accuracy: PositionOptions = LOW_ACCURACY_OPTIONS
    ):
        self.sensor = sensor
        self.ip_provider = ip_provider or IpGeolocationProvider()
        self.high_accuracy = high_accuracy
        self.low_accuracy = low_accuracy
        self.state = ResolverState.IDLE
        self.transitions: List[ResolverState] = [ResolverState.IDLE]

    def resolve(self) -> LocationResult:
        """
        Resolve the current location.

        Returns:
            LocationResult naming the source that succeeded

        Raises:
            LocationPermissionDenied: If the platform reports permission denied
            LocationUnavailable: If every source failed
        """
        self.transitions = []
        self._enter(ResolverState.IDLE)

        self._enter(ResolverState.CHECKING_PERMISSION)
        permission = self.sensor.permission_state()
        logging.debug(f"Location permission state: {permission}")
        if permission == "denied":
            self._enter(ResolverState.FAILED)
            raise LocationPermissionDenied("permission state is 'denied'")

        self._enter(ResolverState.HIGH_ACCURACY_ATTEMPT)
        try:
            return self._device_attempt(self.high_accuracy, LocationSource.DEVICE_HIGH_ACCURACY)
        except LocationPermissionDenied as e:
            # A denied sensor denies every accuracy level
            logging.warning(f"High accuracy position denied, skipping device attempts: {e.detail}")
        except LocationError as e:
            logging.warning(f"High accuracy position failed ({e.code}): {e.detail}")
            self._enter(ResolverState.LOW_ACCURACY_ATTEMPT)
            try:
                return self._device_attempt(self.low_accuracy, LocationSource.DEVICE_LOW_ACCURACY)
            except LocationError as e:
                logging.warning(f"Low accuracy position failed ({e.code}): {e.detail}")

        self._enter(ResolverState.IP_FALLBACK)
        try:
            return self._ip_attempt()
        except LocationError as e:
            logging.error(f"IP geolocation failed ({e.code}): {e.detail}")
            self._enter(ResolverState.FAILED)
            raise LocationUnavailable(f"all location sources failed, last: {e.code}") from e

    def _device_attempt(self, options: PositionOptions, source: LocationSource) -> LocationResult:
        raw = self.sensor.get_position(options)
        coordinate = validate_coordinate(raw.latitude, raw.longitude, raw.accuracy)
        return self._resolved(LocationResult(DEVICE_LOCATION_NAME, coordinate, source))

    def _ip_attempt(self) -> LocationResult:
        data = self.ip_provider.lookup()
        coordinate = validate_coordinate(data["latitude"], data["longitude"])
        name = ", ".join(part for part in (data.get("city"), data.get("country")) if part)
        return self._resolved(LocationResult(name or DEVICE_LOCATION_NAME, coordinate, LocationSource.IP_FALLBACK))

    def _resolved(self, result: LocationResult) -> LocationResult:
        self._enter(ResolverState.RESOLVED)
        logging.info(
            f"Location resolved via {result.source.name}: "
            f"{result.coordinate.latitude}, {result.coordinate.longitude} ({result.name})"
        )
        return result

    def _enter(self, state: ResolverState) -> None:
        logging.debug(f"Location resolver: {self.state.name} -> {state.name}")
        self.state = state
        self.transitions.append(state)
