"""API route definitions."""

import structlog
from fastapi import APIRouter, Response, status

from weather_lookup.api.dependencies import CityDep, QueryDep, WeatherServiceDep
from weather_lookup.api.errors import ApiError
from weather_lookup.api.schemas import (
    CitySuggestion,
    ErrorResponse,
    StatusResponse,
    WeatherResponse,
)
from weather_lookup.services.openweather import (
    OpenWeatherAPIError,
    OpenWeatherError,
    OpenWeatherTimeoutError,
)

logger = structlog.get_logger()

# Root router for the health check
root_router = APIRouter(tags=["root"])

# API router for weather endpoints
api_router = APIRouter(prefix="/api", tags=["weather"])

WEATHER_CACHE_CONTROL = "public, max-age=300"
CITIES_CACHE_CONTROL = "public, max-age=3600"

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ErrorResponse, "description": "Invalid parameter"},
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    500: {"model": ErrorResponse, "description": "Upstream or internal error"},
}


def _log_upstream_failure(event: str, exc: OpenWeatherError, **context: object) -> None:
    if isinstance(exc, OpenWeatherTimeoutError):
        logger.error(event, reason="timeout", error=str(exc), **context)
    elif isinstance(exc, OpenWeatherAPIError):
        logger.error(event, reason="api_error", status_code=exc.status_code, error=str(exc), **context)
    else:
        logger.error(event, reason="request_failed", error=str(exc), **context)


@root_router.get("/", response_model=StatusResponse)
async def health_check() -> StatusResponse:
    """Health check endpoint."""
    logger.info("Health check endpoint accessed")
    return StatusResponse(message="Weather API is running")


@api_router.get("/test", response_model=StatusResponse)
async def reachability_test() -> StatusResponse:
    """Liveness endpoint probed by clients to pick a reachable backend URL."""
    logger.info("Test endpoint accessed")
    return StatusResponse(message="Backend is reachable")


@api_router.get("/weather", response_model=WeatherResponse, responses=_ERROR_RESPONSES)
async def get_weather(
    city: CityDep,
    weather_service: WeatherServiceDep,
    response: Response,
) -> WeatherResponse:
    """Get current weather for a city.

    The city is stripped of everything but letters, whitespace and commas
    before it is forwarded upstream.
    """
    try:
        weather = await weather_service.get_weather(city)
    except OpenWeatherError as e:
        _log_upstream_failure("Error fetching weather data", e, city=city)
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch weather data"
        ) from e

    response.headers["Cache-Control"] = WEATHER_CACHE_CONTROL
    return weather


@api_router.get("/cities", response_model=list[CitySuggestion], responses=_ERROR_RESPONSES)
async def get_cities(
    query: QueryDep,
    weather_service: WeatherServiceDep,
    response: Response,
) -> list[CitySuggestion]:
    """Get up to five city suggestions for a partial name.

    A missing or blank query yields an empty list without calling upstream.
    """
    if query is None:
        return []

    try:
        suggestions = await weather_service.search_cities(query)
    except OpenWeatherError as e:
        _log_upstream_failure("Error fetching city suggestions", e, query=query)
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch city suggestions"
        ) from e

    response.headers["Cache-Control"] = CITIES_CACHE_CONTROL
    return suggestions
