"""Application configuration management."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Backend settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    app_host: str = Field(default="0.0.0.0", description="Server bind host")
    app_port: int = Field(default=3000, description="Server bind port")
    environment: Literal["development", "production"] = Field(
        default="development",
        description="Deployment environment, selects the CORS policy",
    )

    # Upstream API settings
    weather_api_key: str = Field(
        ...,
        min_length=1,
        description="OpenWeatherMap API key",
    )
    weather_base_url: str = Field(
        ...,
        min_length=1,
        description="OpenWeatherMap data API base URL, e.g. https://api.openweathermap.org/data/2.5",
    )
    geocoding_url: str = Field(
        default="https://api.openweathermap.org/geo/1.0/direct",
        description="OpenWeatherMap direct geocoding endpoint",
    )
    upstream_timeout_seconds: float = Field(
        default=5.0,
        description="Upstream request timeout in seconds",
        ge=0.1,
        le=30.0,
    )

    # Request policy settings
    rate_limit: str = Field(
        default="100/15 minutes",
        description="Per-client rate limit in slowapi notation",
    )
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["https://your-frontend-domain.com"],
        description="Allowed origins in production (comma separated)",
    )
    max_body_bytes: int = Field(
        default=10 * 1024,
        description="Maximum accepted request body size in bytes",
        ge=0,
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: str = Field(
        default="json",
        description="Log format (json or text)",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def allowed_origins(self) -> list[str]:
        """Origins allowed by the CORS policy for the current environment."""
        if self.environment == "production":
            return self.cors_origins
        return ["*"]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()  # type: ignore[call-arg]
