"""Weather search orchestration for the client."""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from weather_lookup.api.schemas import CitySuggestion, WeatherResponse
from weather_lookup.client.backend import BackendClient, BackendError, BackendUnreachableError
from weather_lookup.client.config import ClientSettings
from weather_lookup.client.endpoints import ConnectivityResolver
from weather_lookup.client.suggestions import SuggestionFetcher

logger = structlog.get_logger()

CONNECTIVITY_ALERT = "Cannot connect to the weather server. Please check your connection."
FETCH_ERROR = "Failed to fetch weather data. Please try again."


class WeatherSearch:
    """State behind the search screen: input text, suggestions and results.

    ``weather`` and ``error`` are mutually exclusive after a completed
    submit. ``connectivity_alert`` is set only when no backend was reachable.
    """

    def __init__(
        self,
        backend: BackendClient,
        resolver: ConnectivityResolver,
        suggestions: SuggestionFetcher,
    ) -> None:
        self._backend = backend
        self._resolver = resolver
        self._suggestions = suggestions
        self._in_flight = 0
        self._closed = False

        self.city_text = ""
        self.weather: WeatherResponse | None = None
        self.error: str | None = None
        self.connectivity_alert: str | None = None

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "WeatherSearch":
        """Wire a search screen from client settings."""
        resolver = ConnectivityResolver(
            settings.candidate_urls or [settings.default_base_url],
            settings.default_base_url,
            probe_timeout=settings.probe_timeout_seconds,
        )
        backend = BackendClient(timeout=settings.request_timeout_seconds)
        fetcher = SuggestionFetcher(
            backend,
            resolver,
            debounce_seconds=settings.debounce_seconds,
            min_query_length=settings.min_query_length,
        )
        return cls(backend, resolver, fetcher)

    @property
    def resolver(self) -> ConnectivityResolver:
        """Connectivity resolver shared with the suggestion fetcher."""
        return self._resolver

    @property
    def fetcher(self) -> SuggestionFetcher:
        """Debounced suggestion fetcher fed by set_text."""
        return self._suggestions

    @property
    def loading(self) -> bool:
        """Whether any submit is still in flight."""
        return self._in_flight > 0

    @property
    def suggestions(self) -> list[CitySuggestion]:
        """Current suggestion list for the input text."""
        return self._suggestions.suggestions

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed

    def set_text(self, text: str) -> None:
        """Record a keystroke and reschedule the suggestion lookup."""
        self.city_text = text
        self._suggestions.on_text_changed(text)

    async def select_suggestion(self, suggestion: CitySuggestion) -> None:
        """Fill the input with the suggestion's label and search for it."""
        self.city_text = suggestion.label
        self._suggestions.clear()
        await self.submit()

    async def submit(self) -> None:
        """Search for the current input text.

        Blank input is ignored. Probes for a backend first if none has
        answered yet this session.
        """
        city = self.city_text.strip()
        if not city:
            return

        with self._loading():
            self.error = None
            self.connectivity_alert = None

            if not self._resolver.is_connected:
                reachable = await self._resolver.probe()
                if self._closed:
                    return
                if not reachable:
                    self.connectivity_alert = CONNECTIVITY_ALERT
                    return

            try:
                weather = await self._backend.get_weather(self._resolver.active_base_url(), city)
            except BackendError as e:
                if isinstance(e, BackendUnreachableError):
                    self._resolver.invalidate()
                logger.warning("Weather fetch failed", city=city, error=str(e))
                if not self._closed:
                    self.weather = None
                    self.error = FETCH_ERROR
                return

            if self._closed:
                logger.debug("Discarding weather response after close", city=city)
                return
            self.weather = weather
            self.error = None

    def close(self) -> None:
        """Stop acting on responses; cancels any pending suggestion lookup."""
        self._closed = True
        self._suggestions.cancel()

    @contextmanager
    def _loading(self) -> Iterator[None]:
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1
