"""OpenWeatherMap API client."""

from dataclasses import dataclass
from typing import Any

import httpx
from prometheus_client import Counter, Histogram

from weather_lookup.config import Settings

# Upstream error bodies are logged, never returned, and only this much of them.
MAX_ERROR_BODY_CHARS = 200


class OpenWeatherError(Exception):
    """Base exception for OpenWeatherMap client errors."""


class OpenWeatherTimeoutError(OpenWeatherError):
    """Raised when upstream request times out."""


class OpenWeatherAPIError(OpenWeatherError):
    """Raised when upstream returns an error."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


# Metrics
upstream_requests = Counter(
    "upstream_requests_total",
    "Total upstream API requests",
    ["endpoint", "status"],
)
upstream_duration = Histogram(
    "upstream_request_duration_seconds",
    "Upstream request duration in seconds",
    ["endpoint"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


@dataclass
class CurrentConditions:
    """Parsed current weather from the OpenWeatherMap data API."""

    city: str
    country: str
    temperature_c: float
    humidity: float
    wind_speed_ms: float
    description: str
    icon: str


@dataclass
class GeocodedCity:
    """One locality returned by the geocoding API."""

    name: str
    country: str
    state: str | None = None


class OpenWeatherClient:
    """HTTP client for the OpenWeatherMap weather and geocoding APIs."""

    def __init__(self, settings: Settings) -> None:
        """Initialize client with settings."""
        self._weather_url = f"{settings.weather_base_url.rstrip('/')}/weather"
        self._geocoding_url = settings.geocoding_url
        self._api_key = settings.weather_api_key
        self._timeout = settings.upstream_timeout_seconds

    async def get_current_weather(self, city: str) -> CurrentConditions:
        """Fetch current conditions for a city in metric units.

        Raises:
            OpenWeatherTimeoutError: If request times out
            OpenWeatherAPIError: If upstream returns an error
            OpenWeatherError: If the request fails or the payload is malformed
        """
        params = {"q": city, "appid": self._api_key, "units": "metric"}
        data = await self._get("weather", self._weather_url, params)
        return self._parse_weather(data)

    async def search_cities(self, query: str, limit: int = 5) -> list[GeocodedCity]:
        """Look up localities matching a free-text query, provider-ranked."""
        params: dict[str, str | int] = {"q": query, "limit": limit, "appid": self._api_key}
        data = await self._get("geocoding", self._geocoding_url, params)
        if not isinstance(data, list):
            raise OpenWeatherError("Geocoding response is not a list")
        return [self._parse_city(item) for item in data[:limit]]

    async def _get(self, endpoint: str, url: str, params: dict[str, Any]) -> Any:
        with upstream_duration.labels(endpoint=endpoint).time():
            try:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, params=params)

                if not response.is_success:
                    upstream_requests.labels(endpoint=endpoint, status="error").inc()
                    raise OpenWeatherAPIError(
                        f"OpenWeatherMap returned {response.status_code}: "
                        f"{response.text[:MAX_ERROR_BODY_CHARS]}",
                        response.status_code,
                    )

                upstream_requests.labels(endpoint=endpoint, status="success").inc()
                return response.json()

            except httpx.TimeoutException as e:
                upstream_requests.labels(endpoint=endpoint, status="timeout").inc()
                raise OpenWeatherTimeoutError(
                    f"OpenWeatherMap request timed out after {self._timeout}s"
                ) from e

            except httpx.RequestError as e:
                upstream_requests.labels(endpoint=endpoint, status="error").inc()
                raise OpenWeatherError(f"OpenWeatherMap request failed: {e}") from e

            except ValueError as e:
                upstream_requests.labels(endpoint=endpoint, status="error").inc()
                raise OpenWeatherError("OpenWeatherMap returned invalid JSON") from e

    def _parse_weather(self, data: Any) -> CurrentConditions:
        """Flatten the nested weather payload.

        Raises:
            OpenWeatherError: If required fields are missing from response
        """
        try:
            main = data["main"]
            conditions = data["weather"][0]
            return CurrentConditions(
                city=data["name"],
                country=data["sys"]["country"],
                temperature_c=main["temp"],
                humidity=main["humidity"],
                wind_speed_ms=data["wind"]["speed"],
                description=conditions["description"],
                icon=conditions["icon"],
            )
        except (KeyError, IndexError, TypeError) as e:
            raise OpenWeatherError(f"Missing required weather data in response: {e}") from e

    def _parse_city(self, item: Any) -> GeocodedCity:
        try:
            return GeocodedCity(
                name=item["name"],
                country=item["country"],
                state=item.get("state"),
            )
        except (KeyError, TypeError) as e:
            raise OpenWeatherError(f"Missing required city data in response: {e}") from e
