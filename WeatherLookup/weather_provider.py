"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Mapping, Optional, Union

ParamValue = Union[str, int, float]


class EndpointKind(Enum):
    """Logical endpoints of the weather provider."""
    CURRENT = "data/2.5/weather"
    FORECAST = "data/2.5/forecast"
    GEOCODE_DIRECT = "geo/1.0/direct"
    GEOCODE_REVERSE = "geo/1.0/reverse"


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def fetch(self, kind: EndpointKind, params: Mapping[str, ParamValue]) -> Any:
        """
        Issue one request against the provider.

        Args:
            kind: Which endpoint to call
            params: Endpoint query parameters (credentials are added by the provider)

        Returns:
            Decoded JSON payload

        Raises:
            ConfigurationError: If the provider has no credential
            NetworkFailure: On transport errors or non-2xx responses
            RequestTimeoutError: If the request exceeds its timeout
            MalformedResponseError: If the body is not JSON
        """
        pass

    @property
    @abstractmethod
    def configured(self) -> bool:
        """True when the provider holds an API credential."""
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""
    code = "WEATHER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(WeatherProviderError):
    """Missing credential or endpoint. Never retried."""
    code = "CONFIGURATION"


class NetworkFailure(WeatherProviderError):
    """Transport failure or non-2xx response."""
    code = "NETWORK_FAILURE"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RequestTimeoutError(WeatherProviderError):
    """The request did not complete within its timeout."""
    code = "TIMEOUT"


class MalformedResponseError(WeatherProviderError):
    """The provider answered with an unexpected shape."""
    code = "MALFORMED_RESPONSE"


class LocationNotFoundError(WeatherProviderError):
    """Geocoding returned no match for the requested place."""
    code = "LOCATION_NOT_FOUND"


class FetchError(WeatherProviderError):
    """A request kept failing until retries ran out."""
    code = "FETCH_FAILED"

    def __init__(self, message: str, cause: Optional[Exception] = None, attempts: int = 0):
        super().__init__(message)
        self.cause = cause
        self.attempts = attempts
