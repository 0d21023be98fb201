"""Tests for the IP geolocation provider."""
import pytest
import requests
from unittest.mock import Mock, patch
from ip_geolocation import IpGeolocationProvider
from location_sensor import LocationNetworkFailure, LocationTimeout, LocationUnavailable


def mock_response(payload, status_code=200):
    response = Mock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.json.return_value = payload
    return response


def test_lookup_success():
    payload = {"ip": "203.0.113.9", "city": "London", "country": "GB", "latitude": 51.5, "longitude": -0.12}

    with patch('ip_geolocation.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload)

        result = IpGeolocationProvider(timeout=3.0).lookup()

        assert result == {"latitude": 51.5, "longitude": -0.12, "city": "London", "country": "GB"}
        assert mock_get.call_args[1]["timeout"] == 3.0


def test_lookup_missing_coordinates():
    with patch('ip_geolocation.requests.get') as mock_get:
        mock_get.return_value = mock_response({"city": "London", "country": "GB"})

        with pytest.raises(LocationUnavailable):
            IpGeolocationProvider().lookup()


def test_lookup_service_error_flag():
    with patch('ip_geolocation.requests.get') as mock_get:
        mock_get.return_value = mock_response({"error": True, "reason": "RateLimited"})

        with pytest.raises(LocationUnavailable) as exc_info:
            IpGeolocationProvider().lookup()

        assert "RateLimited" in exc_info.value.detail


def test_lookup_http_error():
    with patch('ip_geolocation.requests.get') as mock_get:
        mock_get.return_value = mock_response({}, status_code=500)

        with pytest.raises(LocationNetworkFailure):
            IpGeolocationProvider().lookup()


def test_lookup_timeout():
    with patch('ip_geolocation.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectTimeout("timed out")

        with pytest.raises(LocationTimeout):
            IpGeolocationProvider().lookup()


def test_lookup_connection_error():
    with patch('ip_geolocation.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("unreachable")

        with pytest.raises(LocationNetworkFailure):
            IpGeolocationProvider().lookup()


def test_lookup_bad_url_is_network_failure():
    with patch('ip_geolocation.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.InvalidURL("Invalid URL 'ipapi': No host supplied")

        with pytest.raises(LocationNetworkFailure) as exc_info:
            IpGeolocationProvider(url="ipapi").lookup()

        assert exc_info.value.code == "NETWORK_FAILURE"


def test_lookup_unparsable_body():
    with patch('ip_geolocation.requests.get') as mock_get:
        response = mock_response(None)
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response

        with pytest.raises(LocationUnavailable) as exc_info:
            IpGeolocationProvider().lookup()

        assert "unparsable" in exc_info.value.detail
