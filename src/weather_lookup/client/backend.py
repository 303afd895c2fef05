"""HTTP client for the weather lookup backend."""

from typing import Any

import httpx
from pydantic import ValidationError

from weather_lookup.api.schemas import CitySuggestion, WeatherResponse


class BackendError(Exception):
    """Raised when the backend cannot serve a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendUnreachableError(BackendError):
    """Raised when the backend could not be contacted at all."""


class BackendClient:
    """Calls ``/api/weather`` and ``/api/cities`` on a given base URL."""

    def __init__(self, timeout: float = 10.0) -> None:
        self._timeout = timeout

    async def get_weather(self, base_url: str, city: str) -> WeatherResponse:
        """Fetch current weather for ``city``.

        Raises:
            BackendUnreachableError: On timeouts and transport errors
            BackendError: On non-2xx responses or malformed payloads
        """
        data = await self._get(base_url, "/api/weather", {"city": city})
        try:
            return WeatherResponse.model_validate(data)
        except ValidationError as e:
            raise BackendError(f"Malformed weather payload: {e}") from e

    async def search_cities(self, base_url: str, query: str) -> list[CitySuggestion]:
        """Fetch city suggestions for a partial name."""
        data = await self._get(base_url, "/api/cities", {"query": query})
        if not isinstance(data, list):
            raise BackendError("Malformed suggestions payload: expected a list")
        try:
            return [CitySuggestion.model_validate(item) for item in data]
        except ValidationError as e:
            raise BackendError(f"Malformed suggestions payload: {e}") from e

    async def _get(self, base_url: str, path: str, params: dict[str, str]) -> Any:
        url = f"{base_url.rstrip('/')}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise BackendUnreachableError(f"Request to {url} timed out after {self._timeout}s") from e
        except httpx.RequestError as e:
            raise BackendUnreachableError(f"Request to {url} failed: {e}") from e

        if not response.is_success:
            raise BackendError(
                f"Backend returned {response.status_code} for {path}",
                response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Backend returned invalid JSON for {path}") from e
