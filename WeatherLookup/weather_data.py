"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class LocationSource(Enum):
    """Where a resolved coordinate came from."""
    DEVICE_HIGH_ACCURACY = "device_high_accuracy"
    DEVICE_LOW_ACCURACY = "device_low_accuracy"
    IP_FALLBACK = "ip_fallback"


@dataclass(frozen=True)
class Coordinate:
    """A position on the globe, optionally with an accuracy radius in meters."""
    latitude: float
    longitude: float
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class LocationResult:
    """Outcome of a successful location resolution."""
    name: str
    coordinate: Coordinate
    source: LocationSource


@dataclass
class CacheEntry:
    """A cached provider payload keyed by request fingerprint."""
    key: str
    payload: Any
    stored_at: float  # monotonic seconds

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        """Check if this entry is younger than ttl_seconds."""
        return self.age(now) < ttl_seconds


@dataclass(frozen=True)
class WeatherSnapshot:
    """Current conditions, metric units (°C, m/s)."""
    date: str
    temperature: float
    feels_like: float
    humidity: int
    wind_speed: float
    condition_code: str  # provider icon code, e.g. "04d"
    description: str  # e.g. "broken clouds"


@dataclass(frozen=True)
class ForecastDay:
    """First forecast reading of one calendar day."""
    date: str
    temp_min: float
    temp_max: float
    humidity: int
    wind_speed: float
    condition_code: str


@dataclass
class WeatherReport:
    """Everything a caller needs to render one lookup."""
    city_name: str
    current: WeatherSnapshot
    daily: List[ForecastDay] = field(default_factory=list)
    source: Optional[LocationSource] = None
