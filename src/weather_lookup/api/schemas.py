"""API request and response schemas."""

from pydantic import BaseModel, Field


class WeatherResponse(BaseModel):
    """Current conditions for a city."""

    temperature: float = Field(..., description="Temperature in Celsius")
    description: str = Field(..., description="Human readable conditions")
    humidity: float = Field(..., description="Relative humidity in percent")
    windSpeed: float = Field(..., description="Wind speed in m/s")  # noqa: N815
    icon: str = Field(..., description="Provider icon code, e.g. 01d")
    city: str = Field(..., description="Resolved city name")
    country: str = Field(..., description="ISO country code")


class CitySuggestion(BaseModel):
    """Geocoding match offered while the user types."""

    name: str = Field(..., description="City name")
    country: str = Field(..., description="ISO country code")
    state: str | None = Field(default=None, description="State or region, when known")

    @property
    def label(self) -> str:
        """Canonical "City, State, Country" text, state omitted when absent."""
        parts = [self.name, self.state, self.country]
        return ", ".join(part for part in parts if part)


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error message")


class StatusResponse(BaseModel):
    """Liveness response."""

    status: str = Field(default="OK", description="Service status")
    message: str = Field(..., description="Status message")
