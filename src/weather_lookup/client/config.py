"""Client configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Client settings loaded from ``WEATHER_CLIENT_*`` environment variables.

    ``WEATHER_CLIENT_CANDIDATE_URLS`` is a JSON list, most preferred first.
    """

    model_config = SettingsConfigDict(
        env_prefix="WEATHER_CLIENT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    candidate_urls: list[str] = Field(
        default_factory=list,
        description="Backend base URLs to probe, in order of preference",
    )
    default_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL used until a candidate answers a probe",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for weather and suggestion requests",
        ge=0.1,
        le=60.0,
    )
    probe_timeout_seconds: float = Field(
        default=3.0,
        description="Timeout for each liveness probe",
        ge=0.1,
        le=30.0,
    )
    debounce_seconds: float = Field(
        default=0.3,
        description="Quiet period before a suggestion lookup fires",
        ge=0.0,
        le=5.0,
    )
    min_query_length: int = Field(
        default=2,
        description="Minimum trimmed input length that triggers suggestions",
        ge=1,
    )
