"""Command line weather lookup by city name or current location."""
import argparse
import logging
import os
import signal
import sys
import time
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

from ip_geolocation import IpGeolocationProvider
from location_resolver import LocationResolver
from location_sensor import LocationError, PositionSensor, StaticPositionSensor, UnavailablePositionSensor
from openweather_provider import OpenWeatherProvider
from preferences import UNITS, PreferencesStore, convert_temperature
from weather_data import WeatherReport
from weather_lookup import clear_cache, weather_for_city, weather_for_current_location
from weather_provider import WeatherProviderError
from weather_service import WeatherService

DEFAULT_STATE_FILE = os.path.join(os.path.expanduser("~"), ".weather-lookup.json")


@dataclass
class AppConfig:
    api_key: str
    lat: Optional[float]
    lon: Optional[float]
    state_file: str
    lang: str = "en"
    accuracy: Optional[float] = None


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Weather lookup")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--city", help="City name to look up")
    target.add_argument("--locate", action="store_true", help="Use the current location (default)")
    target.add_argument("--history", action="store_true", help="List recent searches and exit")
    parser.add_argument("--units", choices=UNITS, help="Temperature unit; remembered for next time")
    parser.add_argument("--refresh", type=float, default=0.0, help="Seconds between refreshes (0 = run once)")
    parser.add_argument("--cache-ttl", type=int, default=300)
    parser.add_argument("--max-retries", type=int, default=2)
    parser.add_argument("--timeout", type=float, default=5.0, help="HTTP timeout in seconds")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def load_config() -> AppConfig:
    load_dotenv()
    api_key = os.getenv("WEATHER_API_KEY")
    lat = os.getenv("WEATHER_LAT")
    lon = os.getenv("WEATHER_LON")
    accuracy = os.getenv("WEATHER_ACCURACY")
    lang = os.getenv("WEATHER_LANG", "en")
    state_file = os.getenv("WEATHER_STATE_FILE", DEFAULT_STATE_FILE)

    if not api_key:
        raise SystemExit("Missing WEATHER_API_KEY in environment")

    lat_val = lon_val = accuracy_val = None
    if lat and lon:
        try:
            lat_val = float(lat)
            lon_val = float(lon)
            accuracy_val = float(accuracy) if accuracy else None
        except ValueError as exc:
            raise SystemExit(f"Invalid coordinates: {exc}") from exc

    logging.info("Configuration loaded: device fix=%s state file=%s", lat_val is not None, state_file)
    return AppConfig(
        api_key=api_key,
        lat=lat_val,
        lon=lon_val,
        state_file=state_file,
        lang=lang,
        accuracy=accuracy_val,
    )


def build_weather_service(config: AppConfig, args: argparse.Namespace) -> WeatherService:
    provider = OpenWeatherProvider(
        api_key=config.api_key,
        lang=config.lang,
        timeout=args.timeout,
    )
    service = WeatherService(
        provider=provider,
        cache_ttl_seconds=args.cache_ttl,
        max_retries=args.max_retries,
    )
    logging.info("Weather service ready (cache ttl=%ss, retries=%s)", args.cache_ttl, args.max_retries)
    return service


def build_resolver(config: AppConfig) -> LocationResolver:
    """Resolver for one lookup; a configured device fix is stamped now."""
    sensor: PositionSensor
    if config.lat is not None and config.lon is not None:
        sensor = StaticPositionSensor(config.lat, config.lon, accuracy=config.accuracy)
    else:
        sensor = UnavailablePositionSensor()
    return LocationResolver(sensor, IpGeolocationProvider())


def format_weather_lines(report: WeatherReport, unit: str) -> List[str]:
    symbol = "°F" if unit == "fahrenheit" else "°C"

    def temp(value: float) -> str:
        return f"{round(convert_temperature(value, unit)):+d}{symbol}"

    current = report.current
    lines = [
        f"{report.city_name} ({current.date})",
        f"{temp(current.temperature)}  {current.description.capitalize()}",
        f"Feels {temp(current.feels_like)}  Hum {current.humidity}%  Wind {current.wind_speed:.1f}m/s",
    ]
    for day in report.daily:
        lines.append(f"  {day.date}  {temp(day.temp_min)} / {temp(day.temp_max)}  [{day.condition_code}]")
    return lines


def show_notice(message: str) -> None:
    print(f"! {message}", file=sys.stderr)


def run_lookup(service: WeatherService, resolver: LocationResolver, store: PreferencesStore,
               args: argparse.Namespace) -> bool:
    """One lookup; returns True on success. Errors become a notice."""
    logging.info("Lookup started")
    try:
        if args.city:
            report = weather_for_city(service, args.city)
            store.add_recent_search(args.city)
        else:
            report = weather_for_current_location(service, resolver)
        for line in format_weather_lines(report, store.unit):
            print(line)
        return True
    except LocationError as err:
        logging.error("Location lookup failed [%s]: %s", err.code, err.detail)
        show_notice(err.message)
    except WeatherProviderError as err:
        logging.error("Weather lookup failed [%s]: %s", err.code, err)
        show_notice(err.message)
    finally:
        logging.info("Lookup finished")
    return False


def signal_handler(signum, frame):
    logging.info("Received signal %s, shutting down", signum)
    raise KeyboardInterrupt()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    config = load_config()
    store = PreferencesStore(config.state_file)

    if args.history:
        for term in store.recent_searches():
            print(term)
        return 0

    service = build_weather_service(config, args)

    if args.units and args.units != store.unit:
        store.unit = args.units
        clear_cache(service)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    ok = False
    try:
        while True:
            ok = run_lookup(service, build_resolver(config), store, args)
            if args.refresh <= 0:
                break
            time.sleep(max(args.refresh, 1.0))
    except KeyboardInterrupt:
        logging.info("Stopping weather lookup")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
