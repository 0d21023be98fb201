"""OpenWeather API provider implementation."""
import logging
import requests
from typing import Any, Mapping, Optional
from weather_provider import (
    ConfigurationError,
    EndpointKind,
    MalformedResponseError,
    NetworkFailure,
    ParamValue,
    RequestTimeoutError,
    WeatherProviderBase,
)


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using the OpenWeather free APIs.

    Covers Current Weather, 5 day / 3 hour Forecast and the Geocoding API:
    https://openweathermap.org/current
    https://openweathermap.org/forecast5
    https://openweathermap.org/api/geocoding-api
    """

    BASE_URL = "https://api.openweathermap.org"

    def __init__(
        self,
        api_key: Optional[str],
        units: str = "metric",
        lang: str = "en",
        timeout: float = 5.0
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            units: Temperature units ("metric", "imperial", or "standard")
            lang: Language code for descriptions (e.g., "en", "de")
            timeout: Absolute HTTP request timeout in seconds
        """
        self.api_key = api_key
        self.units = units
        self.lang = lang
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def build_request_url(self, kind: EndpointKind, params: Mapping[str, ParamValue]) -> str:
        """Build the full request URL, credential and units included."""
        query = dict(params)
        query["appid"] = self.api_key
        query["units"] = self.units
        query["lang"] = self.lang
        request = requests.Request("GET", f"{self.BASE_URL}/{kind.value}", params=query)
        return request.prepare().url

    def fetch(self, kind: EndpointKind, params: Mapping[str, ParamValue]) -> Any:
        """
        Fetch one endpoint from OpenWeather.

        Returns:
            Decoded JSON payload

        Raises:
            ConfigurationError: If no API key is configured
            RequestTimeoutError: If the request times out
            NetworkFailure: On connection problems or non-2xx status
            MalformedResponseError: If the body is not valid JSON
        """
        if not self.configured:
            raise ConfigurationError("OpenWeather API key not configured")

        url = self.build_request_url(kind, params)

        try:
            logging.info(f"Making OpenWeather API request: {self.BASE_URL}/{kind.value}")
            logging.debug(f"Request parameters: {dict(params)}")

            response = requests.get(url, timeout=self.timeout)

            logging.info(f"API response status: {response.status_code}")

            # Any non-2xx is a failure, whatever the body says
            if not response.ok:
                logging.error(f"API request failed with status {response.status_code}")
                self._handle_error_response(response)

        except requests.exceptions.Timeout as e:
            logging.error(f"API request timed out after {self.timeout}s: {e}")
            raise RequestTimeoutError(f"Request timed out after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise NetworkFailure(f"Network error: {str(e)}")

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise MalformedResponseError(f"Failed to parse response: {str(e)}")

        logging.debug(f"API response (truncated): {str(data)[:500]}...")
        return data

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        try:
            error_data = response.json()
            message = error_data.get("message", "Unknown error")
            logging.error(f"OpenWeather API error response: {error_data}")
            error_msg = f"OpenWeather API error {response.status_code}: {message}"
        except (ValueError, AttributeError):
            # Not a JSON object, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            error_msg = f"HTTP {response.status_code}: {response.text[:200]}"

        raise NetworkFailure(error_msg, status_code=response.status_code)
