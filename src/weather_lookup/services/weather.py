"""Weather service reshaping upstream data into API responses."""

import structlog

from weather_lookup.api.schemas import CitySuggestion, WeatherResponse
from weather_lookup.services.openweather import OpenWeatherClient

logger = structlog.get_logger()

SUGGESTION_LIMIT = 5


class WeatherService:
    """Service for current weather and city suggestions.

    Results are built fresh for every call; nothing is cached server side.
    """

    def __init__(self, client: OpenWeatherClient) -> None:
        """Initialize service with the upstream client."""
        self._client = client

    async def get_weather(self, city: str) -> WeatherResponse:
        """Get current weather for a sanitized city name.

        Args:
            city: City name, already validated and sanitized

        Returns:
            Flat weather response
        """
        logger.info("Fetching weather data", city=city)

        conditions = await self._client.get_current_weather(city)

        response = WeatherResponse(
            temperature=conditions.temperature_c,
            description=conditions.description,
            humidity=conditions.humidity,
            windSpeed=conditions.wind_speed_ms,
            icon=conditions.icon,
            city=conditions.city,
            country=conditions.country,
        )

        logger.info("Fetched weather data", city=city, resolved_city=response.city)
        return response

    async def search_cities(self, query: str) -> list[CitySuggestion]:
        """Get up to five provider-ranked city suggestions for a query."""
        logger.info("Searching cities", query=query)

        matches = await self._client.search_cities(query, limit=SUGGESTION_LIMIT)
        suggestions = [
            CitySuggestion(name=match.name, country=match.country, state=match.state)
            for match in matches[:SUGGESTION_LIMIT]
        ]

        logger.info("Found city suggestions", query=query, count=len(suggestions))
        return suggestions
