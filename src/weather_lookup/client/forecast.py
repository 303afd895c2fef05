"""View model for the detailed forecast screen.

Only the current conditions are real. The rest mirrors the placeholder
content the screen has always shown.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime

from weather_lookup.api.schemas import WeatherResponse

ICON_URL_TEMPLATE = "http://openweathermap.org/img/wn/{icon}@{size}x.png"


def icon_url(icon: str, size: int = 2) -> str:
    """URL of the provider's icon image at the given scale."""
    return ICON_URL_TEMPLATE.format(icon=icon, size=size)


@dataclass(frozen=True)
class DailyForecast:
    day: str
    temperature: int
    icon: str


@dataclass(frozen=True)
class HourlyForecast:
    time: str
    temperature: int
    icon: str


@dataclass(frozen=True)
class ForecastDetail:
    title: str
    value: str


@dataclass(frozen=True)
class DetailedForecast:
    location: str
    date_label: str
    temperature: int
    description: str
    humidity: str
    wind: str
    pressure: str
    icon_url: str
    is_night: bool
    daily: list[DailyForecast] = field(default_factory=list)
    hourly: list[HourlyForecast] = field(default_factory=list)
    details: list[ForecastDetail] = field(default_factory=list)


_LATER_DAYS = [
    DailyForecast("Wednesday", 24, "01d"),
    DailyForecast("Thursday", 24, "03d"),
    DailyForecast("Friday", 21, "10d"),
    DailyForecast("Saturday", 22, "02d"),
]

_LATER_HOURS = [
    HourlyForecast("9 PM", 23, "01n"),
    HourlyForecast("12 AM", 22, "01n"),
]

_DETAILS = [
    ForecastDetail("Feels Like", "24°C"),
    ForecastDetail("UV Index", "Moderate"),
    ForecastDetail("Visibility", "10 km"),
    ForecastDetail("Pressure", "1015 hPa"),
    ForecastDetail("Sunrise", "6:23 AM"),
    ForecastDetail("Sunset", "6:45 PM"),
]


def build_detailed_forecast(
    weather: WeatherResponse,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> DetailedForecast:
    """Assemble the detailed forecast for ``weather``.

    Tomorrow's temperature is today's plus a jitter in [-2, 3).
    """
    rng = rng or random.Random()
    now = now or datetime.now()

    tomorrow = round(weather.temperature + rng.random() * 5 - 2)
    current = round(weather.temperature)

    return DetailedForecast(
        location=f"{weather.city}, {weather.country}",
        date_label=f"{now:%A}, {now:%B} {now.day}",
        temperature=current,
        description=weather.description,
        humidity=f"{weather.humidity:g}%",
        wind=f"{weather.windSpeed:g} m/s",
        pressure="1015",
        icon_url=icon_url(weather.icon, size=4),
        is_night=now.hour < 6 or now.hour > 18,
        daily=[DailyForecast("Tomorrow", tomorrow, weather.icon), *_LATER_DAYS],
        hourly=[HourlyForecast("Now", current, weather.icon), *_LATER_HOURS],
        details=list(_DETAILS),
    )
