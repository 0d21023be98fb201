"""Weather service with caching, rate limiting and retries."""
import logging
import threading
import time
from typing import Any, Callable, Dict, Mapping, Optional
from weather_data import CacheEntry
from weather_provider import (
    ConfigurationError,
    EndpointKind,
    FetchError,
    NetworkFailure,
    ParamValue,
    RequestTimeoutError,
    WeatherProviderBase,
)


def create_cache_key(kind: EndpointKind, params: Mapping[str, ParamValue]) -> str:
    """Fingerprint a request; parameter order does not matter."""
    query = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return f"{kind.value}?{query}"


class WeatherService:
    """
    Service that wraps a weather provider with caching and rate limiting.

    One instance owns the response cache and the rate-limit timestamp for
    every endpoint. Build it once and pass it to whoever needs weather data.
    Both pieces of state are lock-protected so the instance can be shared
    between threads.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        cache_ttl_seconds: float = 300,  # 5 minutes
        max_retries: int = 2,
        min_interval_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
            cache_ttl_seconds: How long a cached response stays fresh
            max_retries: Retries after the first failed attempt
            min_interval_seconds: Minimum spacing between network calls
            clock: Monotonic time source (seconds)
            sleep: Blocking delay function
        """
        self.provider = provider
        self.cache_ttl_seconds = cache_ttl_seconds
        self.max_retries = max_retries
        self.min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._sleep = sleep

        self._cache: Dict[str, CacheEntry] = {}
        self._cache_lock = threading.Lock()
        self._rate_lock = threading.Lock()
        self.last_request_time: Optional[float] = None

    def fetch_data(self, kind: EndpointKind, params: Optional[Mapping[str, ParamValue]] = None) -> Any:
        """
        Get a provider payload, using cache if still fresh.

        Returns:
            Decoded JSON payload (may be cached)

        Raises:
            ConfigurationError: If no credential is configured or kind is unset
            MalformedResponseError: If the provider returned something unparsable
            FetchError: If every attempt failed
        """
        if kind is None:
            raise ConfigurationError("Endpoint is required")
        if not self.provider.configured:
            raise ConfigurationError("API key not configured")

        params = dict(params or {})
        cache_key = create_cache_key(kind, params)

        cached = self._cached_payload(cache_key)
        if cached is not None:
            return cached.payload

        total_attempts = max(self.max_retries, 0) + 1
        last_error = None
        for attempt in range(total_attempts):
            self._enforce_rate_limit()
            try:
                logging.debug(f"Weather fetch attempt {attempt + 1}/{total_attempts} for {cache_key}")
                payload = self.provider.fetch(kind, params)
            except (NetworkFailure, RequestTimeoutError) as e:
                last_error = e
                logging.warning(f"Weather fetch attempt {attempt + 1} failed: {e}")
                continue

            with self._cache_lock:
                self._cache[cache_key] = CacheEntry(cache_key, payload, self._clock())
            logging.info(f"Weather fetch successful for {cache_key}")
            return payload

        logging.error(f"Failed to fetch {kind.name} after {total_attempts} attempts")
        raise FetchError(
            f"Failed to fetch {kind.name} after {total_attempts} attempts: {last_error}",
            cause=last_error,
            attempts=total_attempts,
        ) from last_error

    def clear_cache(self) -> None:
        """Drop every cached response (new location, unit change, ...)."""
        with self._cache_lock:
            self._cache.clear()
        logging.info("Weather cache cleared")

    def _cached_payload(self, cache_key: str) -> Optional[CacheEntry]:
        with self._cache_lock:
            entry = self._cache.get(cache_key)
            if entry is None:
                return None
            now = self._clock()
            if entry.is_fresh(now, self.cache_ttl_seconds):
                logging.debug(f"Using cached data for {cache_key} (age: {entry.age(now):.1f}s)")
                return entry
            logging.info(f"Cache expired for {cache_key} (age: {entry.age(now):.1f}s > TTL: {self.cache_ttl_seconds}s)")
            del self._cache[cache_key]
            return None

    def _enforce_rate_limit(self) -> None:
        # Held across the sleep so concurrent callers queue up
        with self._rate_lock:
            if self.last_request_time is not None:
                elapsed = self._clock() - self.last_request_time
                if elapsed < self.min_interval_seconds:
                    delay = self.min_interval_seconds - elapsed
                    logging.debug(f"Rate limiting - delaying {delay:.3f}s")
                    self._sleep(delay)
            self.last_request_time = self._clock()
