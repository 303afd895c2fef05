"""Debounced city suggestions."""

import asyncio
from dataclasses import dataclass, field

import structlog

from weather_lookup.api.schemas import CitySuggestion
from weather_lookup.client.backend import BackendClient, BackendError
from weather_lookup.client.endpoints import ConnectivityResolver

logger = structlog.get_logger()

UNREACHABLE_REASON = "backend unreachable"


@dataclass(frozen=True)
class SuggestionsFound:
    """A lookup that completed, possibly with no matches."""

    suggestions: list[CitySuggestion] = field(default_factory=list)


@dataclass(frozen=True)
class SuggestionsFailed:
    """A lookup that could not be completed."""

    reason: str


SuggestionResult = SuggestionsFound | SuggestionsFailed


class SuggestionFetcher:
    """Turns keystrokes into at most one geocoding lookup per quiet period.

    Every text change replaces the pending timer. Input shorter than
    ``min_query_length`` after trimming clears the list and schedules nothing.
    Failures leave an empty list; ``last_result`` tells them apart from
    "no matches".
    """

    def __init__(
        self,
        backend: BackendClient,
        resolver: ConnectivityResolver,
        debounce_seconds: float = 0.3,
        min_query_length: int = 2,
    ) -> None:
        self._backend = backend
        self._resolver = resolver
        self._debounce_seconds = debounce_seconds
        self._min_query_length = min_query_length
        self._pending: asyncio.Task[None] | None = None
        self.suggestions: list[CitySuggestion] = []
        self.last_result: SuggestionResult | None = None

    @property
    def pending(self) -> bool:
        """Whether a lookup is scheduled or running."""
        return self._pending is not None and not self._pending.done()

    def on_text_changed(self, text: str) -> None:
        """Reschedule the lookup for the latest input.

        Must be called from within a running event loop.
        """
        self.cancel()

        query = text.strip()
        if len(query) < self._min_query_length:
            self.suggestions = []
            return

        self._pending = asyncio.get_running_loop().create_task(self._fire_after_quiet(query))

    def cancel(self) -> None:
        """Drop the scheduled lookup, if any."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def clear(self) -> None:
        """Cancel any pending lookup and hide the current suggestions."""
        self.cancel()
        self.suggestions = []

    async def wait(self) -> None:
        """Wait for the scheduled lookup to finish or be cancelled.

        A cancelled lookup returns normally; cancelling the waiter itself
        still raises.
        """
        task = self._pending
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise

    async def fetch(self, query: str) -> SuggestionResult:
        """Look up suggestions now, without debouncing.

        Probes for a backend first if none has answered yet.
        """
        if not self._resolver.is_connected and not await self._resolver.probe():
            logger.info("Suggestion lookup skipped, backend unreachable", query=query)
            return SuggestionsFailed(reason=UNREACHABLE_REASON)

        try:
            suggestions = await self._backend.search_cities(self._resolver.active_base_url(), query)
        except BackendError as e:
            logger.info("Suggestion lookup failed", query=query, error=str(e))
            return SuggestionsFailed(reason=str(e))
        return SuggestionsFound(suggestions=suggestions)

    async def _fire_after_quiet(self, query: str) -> None:
        await asyncio.sleep(self._debounce_seconds)
        result = await self.fetch(query)

        self.last_result = result
        if isinstance(result, SuggestionsFound):
            self.suggestions = result.suggestions
        else:
            self.suggestions = []
