"""Integration tests - can optionally hit real API (disabled by default)."""
import os
import pytest
from openweather_provider import OpenWeatherProvider
from weather_lookup import weather_for_city
from weather_provider import EndpointKind
from weather_service import WeatherService


@pytest.mark.skipif(
    not os.environ.get("OPENWEATHER_API_KEY"),
    reason="OPENWEATHER_API_KEY not set - skipping integration test"
)
def test_openweather_integration():
    """
    Integration test that hits the real OpenWeather API.

    Set OPENWEATHER_API_KEY environment variable to run this test.
    """
    provider = OpenWeatherProvider(api_key=os.environ.get("OPENWEATHER_API_KEY"))

    data = provider.fetch(EndpointKind.CURRENT, {"lat": 51.5, "lon": -0.12})

    assert data["main"]["temp"] is not None
    assert data["weather"]


@pytest.mark.skipif(
    not os.environ.get("OPENWEATHER_API_KEY"),
    reason="OPENWEATHER_API_KEY not set - skipping integration test"
)
def test_weather_lookup_integration():
    """Integration test for a full city lookup with real API."""
    provider = OpenWeatherProvider(api_key=os.environ.get("OPENWEATHER_API_KEY"))
    service = WeatherService(provider)

    report1 = weather_for_city(service, "London")
    assert report1.city_name.startswith("London")
    assert 1 <= len(report1.daily) <= 5

    # Second call should use cache
    report2 = weather_for_city(service, "London")
    assert report2.current == report1.current
