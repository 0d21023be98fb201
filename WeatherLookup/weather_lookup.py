"""High level lookups: city name or coordinates in, WeatherReport out."""
import logging
from datetime import tzinfo
from typing import Optional
from location_resolver import DEVICE_LOCATION_NAME, LocationResolver
from location_sensor import validate_coordinate
from weather_data import Coordinate, WeatherReport
from weather_normalizer import normalize_current, normalize_forecast
from weather_provider import EndpointKind, LocationNotFoundError, MalformedResponseError
from weather_service import WeatherService


def _place_name(entry: dict) -> str:
    return ", ".join(part for part in (entry.get("name"), entry.get("country")) if part)


def weather_for_city(service: WeatherService, city: str, tz: Optional[tzinfo] = None) -> WeatherReport:
    """
    Geocode a city name and fetch its current weather and forecast.

    Raises:
        LocationNotFoundError: If geocoding finds no match
    """
    city = city.strip()
    if not city:
        raise LocationNotFoundError("City name is empty")

    geo_data = service.fetch_data(EndpointKind.GEOCODE_DIRECT, {"q": city})
    if not geo_data:
        raise LocationNotFoundError(f"Location not found: {city}")

    match = geo_data[0]
    if match.get("lat") is None or match.get("lon") is None:
        raise MalformedResponseError(f"Geocoding result for {city} has no coordinates")
    params = {"lat": match["lat"], "lon": match["lon"]}
    current = service.fetch_data(EndpointKind.CURRENT, params)
    forecast = service.fetch_data(EndpointKind.FORECAST, params)

    report = WeatherReport(
        city_name=_place_name(match) or city,
        current=normalize_current(current, tz),
        daily=normalize_forecast(forecast, tz),
    )
    logging.info(f"Weather for {report.city_name}: {report.current.temperature}°C, {report.current.description}")
    return report


def weather_for_coordinates(
    service: WeatherService,
    coordinate: Coordinate,
    fallback_name: str = DEVICE_LOCATION_NAME,
    tz: Optional[tzinfo] = None
) -> WeatherReport:
    """
    Fetch weather for a position, naming it by reverse geocoding.

    Raises:
        InvalidCoordinates: Before any request if the position is out of range
    """
    coordinate = validate_coordinate(coordinate.latitude, coordinate.longitude, coordinate.accuracy)
    params = {"lat": coordinate.latitude, "lon": coordinate.longitude}

    geo_data = service.fetch_data(EndpointKind.GEOCODE_REVERSE, params)
    current = service.fetch_data(EndpointKind.CURRENT, params)
    forecast = service.fetch_data(EndpointKind.FORECAST, params)

    name = _place_name(geo_data[0]) if geo_data else ""
    report = WeatherReport(
        city_name=name or fallback_name,
        current=normalize_current(current, tz),
        daily=normalize_forecast(forecast, tz),
    )
    logging.info(f"Weather for {report.city_name}: {report.current.temperature}°C, {report.current.description}")
    return report


def weather_for_current_location(
    service: WeatherService,
    resolver: LocationResolver,
    tz: Optional[tzinfo] = None
) -> WeatherReport:
    """Resolve the current location, then fetch its weather."""
    location = resolver.resolve()
    report = weather_for_coordinates(service, location.coordinate, fallback_name=location.name, tz=tz)
    report.source = location.source
    return report


def clear_cache(service: WeatherService) -> None:
    """Forget cached responses, e.g. when switching location or units."""
    service.clear_cache()
