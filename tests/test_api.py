"""Tests for API endpoints."""

import httpx
import pytest
import respx
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import Response

from weather_lookup.api.dependencies import get_weather_service
from weather_lookup.config import Settings
from weather_lookup.main import create_app

from payloads import GEOCODING_URL, WEATHER_BASE_URL, owm_geocoding_payload, owm_weather_payload

WEATHER_URL = f"{WEATHER_BASE_URL}/weather"


class TestWeatherEndpoint:
    """Tests for /api/weather endpoint."""

    def test_get_weather_success(self, client: TestClient) -> None:
        """Test successful weather request returns the flat shape."""
        with respx.mock:
            route = respx.get(WEATHER_URL).mock(
                return_value=Response(200, json=owm_weather_payload())
            )

            response = client.get("/api/weather", params={"city": "New York"})

            assert response.status_code == 200
            assert response.json() == {
                "temperature": 21.4,
                "description": "scattered clouds",
                "humidity": 64,
                "windSpeed": 3.6,
                "icon": "03d",
                "city": "New York",
                "country": "US",
            }
            assert response.headers["cache-control"] == "public, max-age=300"

            params = route.calls.last.request.url.params
            assert params["q"] == "New York"
            assert params["units"] == "metric"
            assert params["appid"] == "test-key"

    def test_get_weather_sanitizes_city(self, client: TestClient) -> None:
        """Test digits and symbols are stripped before forwarding."""
        with respx.mock:
            route = respx.get(WEATHER_URL).mock(
                return_value=Response(200, json=owm_weather_payload())
            )

            response = client.get("/api/weather", params={"city": "New York123!"})

            assert response.status_code == 200
            assert route.calls.last.request.url.params["q"] == "New York"

    def test_get_weather_keeps_commas_and_accents(self, client: TestClient) -> None:
        """Test commas and non-ASCII letters survive sanitizing."""
        with respx.mock:
            route = respx.get(WEATHER_URL).mock(
                return_value=Response(200, json=owm_weather_payload("São Paulo", "BR"))
            )

            response = client.get("/api/weather", params={"city": "São Paulo, BR"})

            assert response.status_code == 200
            assert route.calls.last.request.url.params["q"] == "São Paulo, BR"

    def test_get_weather_missing_city(self, client: TestClient) -> None:
        """Test missing city returns 400."""
        with respx.mock:
            response = client.get("/api/weather")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid city parameter"}

    @pytest.mark.parametrize("city", ["", "   ", "x" * 101, "1234!?"])
    def test_get_weather_invalid_city(self, client: TestClient, city: str) -> None:
        """Test blank, oversized and all-symbol cities are rejected without upstream calls."""
        with respx.mock:
            response = client.get("/api/weather", params={"city": city})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid city parameter"}

    def test_get_weather_max_length_accepted(self, client: TestClient) -> None:
        """Test a 100 character city is still accepted."""
        with respx.mock:
            respx.get(WEATHER_URL).mock(return_value=Response(200, json=owm_weather_payload()))

            response = client.get("/api/weather", params={"city": "a" * 100})

        assert response.status_code == 200

    def test_get_weather_upstream_timeout(self, client: TestClient) -> None:
        """Test upstream timeout returns 500."""
        with respx.mock:
            respx.get(WEATHER_URL).mock(side_effect=httpx.TimeoutException("timeout"))

            response = client.get("/api/weather", params={"city": "London"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch weather data"}

    def test_get_weather_upstream_error_not_leaked(self, client: TestClient) -> None:
        """Test upstream error payloads never reach the client."""
        with respx.mock:
            respx.get(WEATHER_URL).mock(
                return_value=Response(401, json={"cod": 401, "message": "Invalid API key"})
            )

            response = client.get("/api/weather", params={"city": "London"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch weather data"}
        assert "Invalid API key" not in response.text

    def test_get_weather_upstream_not_found(self, client: TestClient) -> None:
        """Test unknown cities surface as the generic upstream error."""
        with respx.mock:
            respx.get(WEATHER_URL).mock(
                return_value=Response(404, json={"cod": "404", "message": "city not found"})
            )

            response = client.get("/api/weather", params={"city": "Atlantis"})

        assert response.status_code == 500

    def test_get_weather_connection_error(self, client: TestClient) -> None:
        """Test network failure returns 500."""
        with respx.mock:
            respx.get(WEATHER_URL).mock(side_effect=httpx.ConnectError("refused"))

            response = client.get("/api/weather", params={"city": "London"})

        assert response.status_code == 500

    def test_get_weather_malformed_upstream(self, client: TestClient) -> None:
        """Test upstream payload missing fields returns 500."""
        with respx.mock:
            respx.get(WEATHER_URL).mock(return_value=Response(200, json={"name": "London"}))

            response = client.get("/api/weather", params={"city": "London"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch weather data"}


class TestCitiesEndpoint:
    """Tests for /api/cities endpoint."""

    def test_get_cities_success(self, client: TestClient) -> None:
        """Test suggestions keep provider order and optional state."""
        with respx.mock:
            route = respx.get(GEOCODING_URL).mock(
                return_value=Response(200, json=owm_geocoding_payload(3))
            )

            response = client.get("/api/cities", params={"query": "Lon"})

            assert response.status_code == 200
            assert response.json() == [
                {"name": "London", "country": "GB", "state": "England"},
                {"name": "London", "country": "CA", "state": "Ontario"},
                {"name": "Londrina", "country": "BR", "state": None},
            ]
            assert response.headers["cache-control"] == "public, max-age=3600"

            params = route.calls.last.request.url.params
            assert params["q"] == "Lon"
            assert params["limit"] == "5"

    def test_get_cities_capped_at_five(self, client: TestClient) -> None:
        """Test at most five suggestions are returned."""
        with respx.mock:
            respx.get(GEOCODING_URL).mock(
                return_value=Response(200, json=owm_geocoding_payload(7))
            )

            response = client.get("/api/cities", params={"query": "Lon"})

        assert response.status_code == 200
        assert len(response.json()) == 5

    @pytest.mark.parametrize("params", [{}, {"query": ""}, {"query": "   "}])
    def test_get_cities_absent_query_is_empty(self, client: TestClient, params: dict) -> None:
        """Test a missing or blank query yields no suggestions and no upstream call."""
        with respx.mock:
            response = client.get("/api/cities", params=params)

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.parametrize("query", ["x" * 101, "42", "@#$"])
    def test_get_cities_invalid_query(self, client: TestClient, query: str) -> None:
        """Test present but invalid queries are rejected."""
        with respx.mock:
            response = client.get("/api/cities", params={"query": query})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid query parameter"}

    def test_get_cities_sanitizes_query(self, client: TestClient) -> None:
        """Test the forwarded query is sanitized."""
        with respx.mock:
            route = respx.get(GEOCODING_URL).mock(return_value=Response(200, json=[]))

            response = client.get("/api/cities", params={"query": "Lon<script>"})

            assert response.status_code == 200
            assert route.calls.last.request.url.params["q"] == "Lonscript"

    def test_get_cities_upstream_error(self, client: TestClient) -> None:
        """Test upstream failure returns 500."""
        with respx.mock:
            respx.get(GEOCODING_URL).mock(return_value=Response(503, text="unavailable"))

            response = client.get("/api/cities", params={"query": "Lon"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch city suggestions"}


class TestLivenessEndpoints:
    """Tests for the routes clients probe."""

    def test_root(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"status": "OK", "message": "Weather API is running"}

    def test_api_test(self, client: TestClient) -> None:
        response = client.get("/api/test")
        assert response.status_code == 200
        assert response.json() == {"status": "OK", "message": "Backend is reachable"}

    def test_request_id_header(self, client: TestClient) -> None:
        response = client.get("/api/test")
        assert len(response.headers["x-request-id"]) == 8


class TestErrorHandling:
    """Tests for the JSON error envelope."""

    def test_unhandled_exception(self, app: FastAPI) -> None:
        """Test unexpected exceptions become a generic 500."""

        def broken_service() -> None:
            raise RuntimeError("boom")

        app.dependency_overrides[get_weather_service] = broken_service
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/api/weather", params={"city": "London"})

        assert response.status_code == 500
        assert response.json() == {"error": "Something went wrong!"}
        assert "boom" not in response.text

    def test_unhandled_exception_keeps_response_headers(self, app: FastAPI) -> None:
        """Test the generic 500 still passes through the outer middleware."""

        def broken_service() -> None:
            raise RuntimeError("boom")

        app.dependency_overrides[get_weather_service] = broken_service
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get(
            "/api/weather",
            params={"city": "London"},
            headers={"Origin": "http://localhost:8081"},
        )

        assert response.status_code == 500
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["access-control-allow-origin"] == "*"
        assert len(response.headers["x-request-id"]) == 8


class TestRateLimiting:
    """Tests for per-client rate limiting."""

    def test_rate_limit_exceeded(self, settings: Settings) -> None:
        """Test the request past the limit gets a 429."""
        app = create_app(settings.model_copy(update={"rate_limit": "3/minute"}))
        client = TestClient(app)

        for _ in range(3):
            assert client.get("/api/test").status_code == 200

        response = client.get("/api/test")

        assert response.status_code == 429
        assert response.json() == {"error": "Too many requests, please try again later."}
        assert response.headers["x-content-type-options"] == "nosniff"

    def test_rate_limit_applies_to_api_routes(self, settings: Settings) -> None:
        """Test routes from the included API router are counted against the limit."""
        app = create_app(settings.model_copy(update={"rate_limit": "2/minute"}))
        client = TestClient(app)

        assert client.get("/api/cities").status_code == 200
        assert client.get("/api/cities").status_code == 200

        response = client.get("/api/cities")

        assert response.status_code == 429
        assert response.json() == {"error": "Too many requests, please try again later."}

    def test_rate_limit_per_app_instance(self, settings: Settings) -> None:
        """Test limiter state is not shared between application instances."""
        limited = settings.model_copy(update={"rate_limit": "1/minute"})
        first = TestClient(create_app(limited))
        second = TestClient(create_app(limited))

        assert first.get("/api/test").status_code == 200
        assert first.get("/api/test").status_code == 429
        assert second.get("/api/test").status_code == 200


class TestSecurityPolicies:
    """Tests for CORS, security headers and body limits."""

    def test_security_headers(self, client: TestClient) -> None:
        response = client.get("/api/test")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "SAMEORIGIN"
        assert response.headers["strict-transport-security"].startswith("max-age=")
        assert response.headers["content-security-policy"].startswith("default-src 'none'")

    def test_security_headers_on_errors(self, client: TestClient) -> None:
        response = client.get("/api/weather")

        assert response.status_code == 400
        assert response.headers["x-content-type-options"] == "nosniff"

    def test_docs_without_csp(self, client: TestClient) -> None:
        response = client.get("/docs")

        assert response.status_code == 200
        assert "content-security-policy" not in response.headers

    def test_cors_development_allows_any_origin(self, client: TestClient) -> None:
        response = client.get("/api/test", headers={"Origin": "http://localhost:8081"})

        assert response.headers["access-control-allow-origin"] == "*"

    def test_cors_production_restricts_origins(self, settings: Settings) -> None:
        production = settings.model_copy(
            update={"environment": "production", "cors_origins": ["https://app.example.com"]}
        )
        client = TestClient(create_app(production))

        allowed = client.get("/api/test", headers={"Origin": "https://app.example.com"})
        denied = client.get("/api/test", headers={"Origin": "https://evil.example.com"})

        assert allowed.headers["access-control-allow-origin"] == "https://app.example.com"
        assert "access-control-allow-origin" not in denied.headers

    def test_cors_preflight(self, client: TestClient) -> None:
        response = client.options(
            "/api/weather",
            headers={
                "Origin": "http://localhost:8081",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-max-age"] == "86400"

    def test_body_too_large(self, client: TestClient) -> None:
        response = client.request("GET", "/api/test", content=b"x" * (10 * 1024 + 1))

        assert response.status_code == 413
        assert response.json() == {"error": "Request body too large"}

    def test_small_body_accepted(self, client: TestClient) -> None:
        response = client.request("GET", "/api/test", content=b"{}")

        assert response.status_code == 200


class TestMetricsEndpoint:
    """Tests for metrics endpoint."""

    def test_metrics(self, client: TestClient) -> None:
        client.get("/api/test")
        response = client.get("/metrics/")
        assert response.status_code == 200
        assert "http_requests_total" in response.text


class TestOpenAPIEndpoints:
    """Tests for OpenAPI documentation endpoints."""

    def test_openapi_json(self, client: TestClient) -> None:
        response = client.get("/openapi.json")
        assert response.status_code == 200
        data = response.json()
        assert data["info"]["title"] == "Weather Lookup API"
        assert "/api/weather" in data["paths"]
