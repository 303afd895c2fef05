"""Client query layer: backend discovery, suggestions and weather search."""

from weather_lookup.client.backend import BackendClient, BackendError, BackendUnreachableError
from weather_lookup.client.config import ClientSettings
from weather_lookup.client.endpoints import (
    ClientEnvironment,
    ConnectivityResolver,
    candidate_base_urls,
)
from weather_lookup.client.forecast import DetailedForecast, build_detailed_forecast
from weather_lookup.client.search import WeatherSearch
from weather_lookup.client.suggestions import (
    SuggestionFetcher,
    SuggestionResult,
    SuggestionsFailed,
    SuggestionsFound,
)

__all__ = [
    "BackendClient",
    "BackendError",
    "BackendUnreachableError",
    "ClientEnvironment",
    "ClientSettings",
    "ConnectivityResolver",
    "DetailedForecast",
    "SuggestionFetcher",
    "SuggestionResult",
    "SuggestionsFailed",
    "SuggestionsFound",
    "WeatherSearch",
    "build_detailed_forecast",
    "candidate_base_urls",
]
