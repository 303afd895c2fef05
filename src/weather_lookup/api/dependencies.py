"""FastAPI dependencies."""

from typing import Annotated

import structlog
from fastapi import Depends, Query, status

from weather_lookup.api.errors import ApiError
from weather_lookup.config import Settings, get_settings
from weather_lookup.services.openweather import OpenWeatherClient
from weather_lookup.services.weather import WeatherService

logger = structlog.get_logger()

MAX_PARAM_LENGTH = 100

# Singleton instance for the upstream client
_openweather_client: OpenWeatherClient | None = None


def sanitize_place(value: str) -> str:
    """Keep letters, whitespace and commas; trim the result.

    >>> sanitize_place("New York123!")
    'New York'
    """
    kept = "".join(ch for ch in value if ch.isalpha() or ch.isspace() or ch == ",")
    return kept.strip()


def validated_city(
    city: Annotated[str | None, Query(description="City name")] = None,
) -> str:
    """Validate and sanitize the ``city`` query parameter."""
    if city is None or not city.strip() or len(city) > MAX_PARAM_LENGTH:
        logger.warning("Invalid city parameter received", city=city)
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Invalid city parameter")

    sanitized = sanitize_place(city)
    if not sanitized:
        logger.warning("City parameter empty after sanitizing", city=city)
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Invalid city parameter")

    logger.info("Sanitized city parameter", city=sanitized)
    return sanitized


def validated_query(
    query: Annotated[str | None, Query(description="Partial city name")] = None,
) -> str | None:
    """Validate and sanitize the ``query`` query parameter.

    Returns None when the query is absent or blank, which means "no suggestions".
    """
    if query is None or not query.strip():
        return None

    sanitized = sanitize_place(query) if len(query) <= MAX_PARAM_LENGTH else ""
    if not sanitized:
        logger.warning("Invalid query parameter received", query=query)
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Invalid query parameter")

    logger.info("Sanitized query parameter", query=sanitized)
    return sanitized


def get_openweather_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> OpenWeatherClient:
    """Get OpenWeatherMap client instance (singleton)."""
    global _openweather_client
    if _openweather_client is None:
        _openweather_client = OpenWeatherClient(settings)
    return _openweather_client


def get_weather_service(
    client: Annotated[OpenWeatherClient, Depends(get_openweather_client)],
) -> WeatherService:
    """Get weather service instance."""
    return WeatherService(client)


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
WeatherServiceDep = Annotated[WeatherService, Depends(get_weather_service)]
CityDep = Annotated[str, Depends(validated_city)]
QueryDep = Annotated[str | None, Depends(validated_query)]


def reset_singletons() -> None:
    """Reset singleton instances (for testing)."""
    global _openweather_client
    _openweather_client = None
