"""Map raw OpenWeather payloads onto the domain model - pure functions for testability."""
import math
from datetime import datetime, tzinfo
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional
from weather_data import ForecastDay, WeatherSnapshot
from weather_provider import MalformedResponseError

MAX_FORECAST_DAYS = 5


def round_one_decimal(value: float) -> float:
    """
    Round to one decimal place, halves away from zero.

    Works on the decimal text of the value; the builtin round() would send
    halves to the nearest even digit.

    Args:
        value: Number to round

    Returns:
        Rounded float, e.g. 21.349 -> 21.3 and 21.35 -> 21.4
    """
    scaled = Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(scaled)


def local_date(timestamp: int, tz: Optional[tzinfo] = None) -> str:
    """Calendar date (YYYY-MM-DD) of a UNIX timestamp; local timezone when tz is None."""
    return datetime.fromtimestamp(timestamp, tz).strftime("%Y-%m-%d")


def _reading(block: Dict[str, Any], key: str, default: Any) -> Any:
    """A measurement from a payload block; null counts as absent."""
    value = block.get(key)
    return default if value is None else value


def _decimal_field(value: Any, name: str) -> float:
    try:
        number = float(value)
        if not math.isfinite(number):
            raise ValueError(value)
        return round_one_decimal(number)
    except (TypeError, ValueError, InvalidOperation):
        raise MalformedResponseError(f"Field '{name}' is not a number: {value!r}")


def _percent_field(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MalformedResponseError(f"Field '{name}' is not a number: {value!r}")


def _condition(entry: Dict[str, Any]) -> Dict[str, Any]:
    weather_array = entry.get("weather") or []
    if not weather_array:
        raise MalformedResponseError("Response missing 'weather' array")
    weather = weather_array[0]
    if not (weather.get("icon") or weather.get("main")):
        raise MalformedResponseError("Response missing weather condition")
    return weather


def normalize_current(raw: Dict[str, Any], tz: Optional[tzinfo] = None) -> WeatherSnapshot:
    """
    Build a WeatherSnapshot from a Current Weather response.

    Raises:
        MalformedResponseError: If the temperature or condition is missing, or a
            reading is not a finite number. Null readings count as absent.
    """
    if not isinstance(raw, dict):
        raise MalformedResponseError("Current weather response is not an object")

    main_data = raw.get("main") or {}
    if main_data.get("temp") is None:
        raise MalformedResponseError("Response missing 'main.temp'")
    weather = _condition(raw)

    wind_data = raw.get("wind") or {}
    temperature = main_data["temp"]
    return WeatherSnapshot(
        date=local_date(_reading(raw, "dt", 0), tz),
        temperature=_decimal_field(temperature, "main.temp"),
        feels_like=_decimal_field(_reading(main_data, "feels_like", temperature), "main.feels_like"),
        humidity=_percent_field(_reading(main_data, "humidity", 0), "main.humidity"),
        wind_speed=_decimal_field(_reading(wind_data, "speed", 0.0), "wind.speed"),
        condition_code=weather.get("icon") or weather["main"],
        description=weather.get("description", ""),
    )


def normalize_forecast(raw: Dict[str, Any], tz: Optional[tzinfo] = None) -> List[ForecastDay]:
    """
    Collapse 3-hour forecast entries into one entry per calendar day.

    Entries come from the provider in chronological order; the first one
    seen for a date wins. At most MAX_FORECAST_DAYS days are returned and an
    empty forecast gives an empty list.
    """
    entries = (raw or {}).get("list") or []
    days: List[ForecastDay] = []
    seen = set()

    for entry in entries:
        if entry.get("dt") is None:
            raise MalformedResponseError("Forecast entry missing 'dt'")
        date = local_date(entry["dt"], tz)
        if date in seen:
            continue
        seen.add(date)

        main_data = entry.get("main") or {}
        if main_data.get("temp_min") is None or main_data.get("temp_max") is None:
            raise MalformedResponseError(f"Forecast entry for {date} missing temperatures")
        weather = _condition(entry)
        wind_data = entry.get("wind") or {}

        days.append(ForecastDay(
            date=date,
            temp_min=_decimal_field(main_data["temp_min"], "main.temp_min"),
            temp_max=_decimal_field(main_data["temp_max"], "main.temp_max"),
            humidity=_percent_field(_reading(main_data, "humidity", 0), "main.humidity"),
            wind_speed=_decimal_field(_reading(wind_data, "speed", 0.0), "wind.speed"),
            condition_code=weather.get("icon") or weather["main"],
        ))
        if len(days) == MAX_FORECAST_DAYS:
            break

    return days
