"""Test fixtures."""

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from weather_lookup.api.dependencies import reset_singletons
from weather_lookup.client.backend import BackendClient
from weather_lookup.client.endpoints import ConnectivityResolver
from weather_lookup.client.search import WeatherSearch
from weather_lookup.client.suggestions import SuggestionFetcher
from weather_lookup.config import Settings, get_settings
from weather_lookup.main import create_app

from payloads import BACKEND_URL, GEOCODING_URL, WEATHER_BASE_URL


@pytest.fixture(autouse=True)
def environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Provide required settings and reset cached state around each test."""
    monkeypatch.setenv("WEATHER_API_KEY", "test-key")
    monkeypatch.setenv("WEATHER_BASE_URL", WEATHER_BASE_URL)
    monkeypatch.setenv("GEOCODING_URL", GEOCODING_URL)
    reset_singletons()
    get_settings.cache_clear()
    yield
    reset_singletons()
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        weather_api_key="test-key",
        weather_base_url=WEATHER_BASE_URL,
        geocoding_url=GEOCODING_URL,
        upstream_timeout_seconds=1.0,
        log_level="DEBUG",
        log_format="text",
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """Create test application."""
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def backend() -> BackendClient:
    return BackendClient(timeout=1.0)


@pytest.fixture
def resolver() -> ConnectivityResolver:
    return ConnectivityResolver([BACKEND_URL], BACKEND_URL, probe_timeout=0.5)


@pytest.fixture
def fetcher(backend: BackendClient, resolver: ConnectivityResolver) -> SuggestionFetcher:
    return SuggestionFetcher(backend, resolver, debounce_seconds=0.1)


@pytest.fixture
def search(
    backend: BackendClient, resolver: ConnectivityResolver, fetcher: SuggestionFetcher
) -> WeatherSearch:
    return WeatherSearch(backend, resolver, fetcher)
