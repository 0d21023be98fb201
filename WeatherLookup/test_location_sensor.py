"""Tests for coordinate validation, location errors and the bundled sensors."""
import pytest
from location_sensor import (
    LOCATION_MESSAGES,
    InvalidCoordinates,
    LocationErrorKind,
    LocationPermissionDenied,
    LocationTimeout,
    LocationUnavailable,
    PositionOptions,
    StaticPositionSensor,
    UnavailablePositionSensor,
    validate_coordinate,
)
from weather_data import Coordinate

ANY_OPTIONS = PositionOptions(timeout=1.0, maximum_age=0.0, high_accuracy=True)
FRESH_ONLY = PositionOptions(timeout=10.0, maximum_age=0.0, high_accuracy=True)
CACHED_OK = PositionOptions(timeout=5.0, maximum_age=300.0, high_accuracy=False)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_validate_coordinate_accepts_range_edges():
    assert validate_coordinate(90, -180) == Coordinate(90.0, -180.0)
    assert validate_coordinate("51.5", "-0.12", accuracy=20.0) == Coordinate(51.5, -0.12, 20.0)


@pytest.mark.parametrize("lat, lon", [
    (90.01, 0),
    (-91, 0),
    (0, 180.5),
    (0, -181),
    (float("nan"), 0),
    (0, float("inf")),
    ("north", 0),
    (None, 0),
    (True, 0),
])
def test_validate_coordinate_rejects(lat, lon):
    with pytest.raises(InvalidCoordinates) as exc_info:
        validate_coordinate(lat, lon)

    assert exc_info.value.code == "INVALID_COORDS"


def test_every_error_kind_has_a_message():
    assert set(LOCATION_MESSAGES) == set(LocationErrorKind)


def test_location_error_carries_message_and_detail():
    error = LocationTimeout("gps took 10s")

    assert error.kind is LocationErrorKind.TIMEOUT
    assert error.message == LOCATION_MESSAGES[LocationErrorKind.TIMEOUT]
    assert error.detail == "gps took 10s"
    assert "gps took 10s" in str(error)


def test_static_sensor_returns_configured_fix():
    clock = FakeClock()
    sensor = StaticPositionSensor(48.85, 2.35, accuracy=30.0, clock=clock)
    clock.now += 12.0

    assert sensor.permission_state() == "granted"
    assert sensor.fixed_at == 1000.0
    assert sensor.get_position(CACHED_OK) == Coordinate(48.85, 2.35, 30.0)


def test_static_sensor_never_serves_fresh_only_requests():
    clock = FakeClock()
    sensor = StaticPositionSensor(48.85, 2.35, accuracy=30.0, clock=clock)

    with pytest.raises(LocationUnavailable) as exc_info:
        sensor.get_position(FRESH_ONLY)

    assert exc_info.value.code == "POSITION_UNAVAILABLE"


def test_static_sensor_fix_expires_after_maximum_age():
    clock = FakeClock()
    sensor = StaticPositionSensor(48.85, 2.35, clock=clock)

    clock.now += 299.0
    assert sensor.get_position(CACHED_OK) == Coordinate(48.85, 2.35)

    clock.now += 1.0
    with pytest.raises(LocationUnavailable) as exc_info:
        sensor.get_position(CACHED_OK)

    assert "300.0s old" in exc_info.value.detail


def test_static_sensor_explicit_fix_time():
    sensor = StaticPositionSensor(10, 10, clock=FakeClock(500.0), fixed_at=100.0)

    with pytest.raises(LocationUnavailable):
        sensor.get_position(CACHED_OK)


def test_static_sensor_denied():
    sensor = StaticPositionSensor(48.85, 2.35, permission="denied")

    with pytest.raises(LocationPermissionDenied):
        sensor.get_position(ANY_OPTIONS)


def test_unavailable_sensor():
    sensor = UnavailablePositionSensor()

    assert sensor.permission_state() is None
    with pytest.raises(LocationUnavailable):
        sensor.get_position(ANY_OPTIONS)
