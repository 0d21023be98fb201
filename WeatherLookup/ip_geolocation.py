"""IP-based geolocation - approximate position from the public network address."""
import logging
import requests
from typing import Any, Dict
from location_sensor import LocationNetworkFailure, LocationTimeout, LocationUnavailable


class IpGeolocationProvider:
    """
    Best-effort position lookup using ipapi.co (no API key required).

    https://ipapi.co/api/#complete-location
    """

    URL = "https://ipapi.co/json/"

    def __init__(self, timeout: float = 5.0, url: str = URL):
        """
        Args:
            timeout: HTTP request timeout in seconds
            url: Lookup endpoint
        """
        self.timeout = timeout
        self.url = url

    def lookup(self) -> Dict[str, Any]:
        """
        Look up the caller's approximate position.

        Returns:
            Dict with keys latitude, longitude, city and country. Coordinates
            are passed through as received; callers validate them.

        Raises:
            LocationTimeout: If the service does not answer in time
            LocationNetworkFailure: On connection problems or non-2xx status
            LocationUnavailable: If the answer carries no coordinates
        """
        try:
            logging.info(f"Making IP geolocation request: {self.url}")
            response = requests.get(self.url, timeout=self.timeout)
            logging.info(f"IP geolocation response status: {response.status_code}")
        except requests.exceptions.Timeout as e:
            logging.error(f"IP geolocation timed out after {self.timeout}s: {e}")
            raise LocationTimeout(f"IP lookup timed out after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            # InvalidURL and MissingSchema land here too
            logging.error(f"Network error during IP geolocation: {e}")
            raise LocationNetworkFailure(str(e))

        if not response.ok:
            raise LocationNetworkFailure(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Failed to parse IP geolocation response: {e}")
            raise LocationUnavailable(f"unparsable IP lookup response: {e}")

        if not isinstance(data, dict) or data.get("error"):
            reason = data.get("reason", "unknown") if isinstance(data, dict) else "not an object"
            raise LocationUnavailable(f"IP lookup refused: {reason}")
        if data.get("latitude") is None or data.get("longitude") is None:
            logging.error(f"IP geolocation response missing coordinates: {data}")
            raise LocationUnavailable("IP lookup returned no coordinates")

        return {
            "latitude": data["latitude"],
            "longitude": data["longitude"],
            "city": data.get("city") or "",
            "country": data.get("country") or "",
        }
