"""Backend endpoint selection and connectivity probing."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

import httpx
import structlog

logger = structlog.get_logger()

# Host loopback as seen from inside the Android emulator.
ANDROID_EMULATOR_HOST = "10.0.2.2"


@dataclass(frozen=True)
class ClientEnvironment:
    """Where the client runs, as far as reaching the backend is concerned."""

    platform: Literal["android", "ios", "web", "desktop"] = "desktop"
    is_emulator: bool = False
    production_url: str | None = None
    lan_host: str | None = None
    port: int = 3000
    scheme: str = "http"


def candidate_base_urls(env: ClientEnvironment) -> list[str]:
    """Ordered backend base URLs to try for ``env``, most preferred first.

    Production URL, then the LAN host, then the Android emulator loopback
    alias (emulators only), then localhost. Duplicates are dropped.
    """
    urls: list[str] = []
    if env.production_url:
        urls.append(env.production_url.rstrip("/"))
    if env.lan_host:
        urls.append(f"{env.scheme}://{env.lan_host}:{env.port}")
    if env.platform == "android" and env.is_emulator:
        urls.append(f"{env.scheme}://{ANDROID_EMULATOR_HOST}:{env.port}")
    urls.append(f"{env.scheme}://localhost:{env.port}")
    return list(dict.fromkeys(urls))


class ConnectivityResolver:
    """Finds the first candidate base URL that answers a liveness probe.

    The last successful candidate is remembered for the lifetime of the
    resolver. A failed probe round leaves it untouched.
    """

    def __init__(
        self,
        candidates: Sequence[str],
        default_base_url: str,
        probe_timeout: float = 3.0,
        probe_path: str = "/api/test",
    ) -> None:
        self._candidates = [candidate.rstrip("/") for candidate in candidates]
        self._default_base_url = default_base_url.rstrip("/")
        self._probe_timeout = probe_timeout
        self._probe_path = probe_path
        self._active: str | None = None
        self._connected = False

    @property
    def candidates(self) -> list[str]:
        """Candidate base URLs in probe order."""
        return list(self._candidates)

    @property
    def is_connected(self) -> bool:
        """Whether a probe has succeeded since the last invalidation."""
        return self._connected

    def active_base_url(self) -> str:
        """Last candidate that answered a probe, or the configured default."""
        return self._active or self._default_base_url

    def invalidate(self) -> None:
        """Force a fresh probe on next use; the last good candidate is kept."""
        self._connected = False

    async def probe(self) -> bool:
        """Probe candidates in order and stop at the first healthy one.

        Returns:
            True if a candidate answered with a 2xx status, False otherwise
        """
        async with httpx.AsyncClient(timeout=self._probe_timeout) as client:
            for candidate in self._candidates:
                if await self._probe_one(client, candidate):
                    self._active = candidate
                    self._connected = True
                    logger.info("Backend reachable", base_url=candidate)
                    return True

        logger.warning(
            "No backend candidate reachable",
            candidates=self._candidates,
            active_base_url=self._active,
        )
        return False

    async def _probe_one(self, client: httpx.AsyncClient, candidate: str) -> bool:
        url = f"{candidate}{self._probe_path}"
        try:
            response = await client.get(url)
        except httpx.TimeoutException:
            logger.info("Probe timed out", url=url, timeout=self._probe_timeout)
            return False
        except httpx.RequestError as e:
            logger.info("Probe failed", url=url, error=str(e))
            return False

        if not response.is_success:
            logger.info("Probe rejected", url=url, status_code=response.status_code)
            return False
        return True
