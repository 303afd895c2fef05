"""Terminal front end for the weather lookup client."""

import argparse
import asyncio
import logging
import sys

import structlog

from weather_lookup.api.schemas import WeatherResponse
from weather_lookup.client.config import ClientSettings
from weather_lookup.client.forecast import build_detailed_forecast, icon_url
from weather_lookup.client.search import WeatherSearch
from weather_lookup.client.suggestions import SuggestionsFound


def format_weather_card(weather: WeatherResponse) -> str:
    """Render the summary card shown after a search."""
    return "\n".join(
        [
            f"{weather.city}, {weather.country}",
            f"{round(weather.temperature)}°C  {weather.description}",
            f"Humidity: {weather.humidity:g}%  Wind: {weather.windSpeed:g} m/s",
            f"Icon: {icon_url(weather.icon)}",
        ]
    )


def format_detailed_forecast(weather: WeatherResponse) -> str:
    """Render the detailed forecast view for a fetched weather record."""
    forecast = build_detailed_forecast(weather)
    lines = [
        "Detailed Forecast",
        f"{forecast.location} - {forecast.date_label}",
        f"{forecast.temperature}°  {forecast.description}",
        f"Humidity {forecast.humidity} | Wind {forecast.wind} | Pressure {forecast.pressure}",
        "",
        "Hourly: " + "  ".join(f"{h.time} {h.temperature}°" for h in forecast.hourly),
        "Daily:  " + "  ".join(f"{d.day} {d.temperature}°" for d in forecast.daily),
        "",
    ]
    lines.extend(f"{detail.title}: {detail.value}" for detail in forecast.details)
    return "\n".join(lines)


async def _run(args: argparse.Namespace, settings: ClientSettings) -> int:
    """Run one lookup and return the process exit code."""
    search = WeatherSearch.from_settings(settings)
    search.city_text = args.city

    if args.suggest:
        result = await search.fetcher.fetch(args.city.strip())
        if not isinstance(result, SuggestionsFound):
            print(f"Suggestion lookup failed: {result.reason}", file=sys.stderr)
            return 1
        for suggestion in result.suggestions:
            print(suggestion.label)
        return 0

    await search.submit()
    if search.connectivity_alert:
        print(search.connectivity_alert, file=sys.stderr)
        return 1
    if search.error or search.weather is None:
        print(search.error or "No weather data.", file=sys.stderr)
        return 1

    print(format_weather_card(search.weather))
    if args.detailed:
        print()
        print(format_detailed_forecast(search.weather))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the weather-lookup-client command."""
    parser = argparse.ArgumentParser(description="Look up current weather for a city")
    parser.add_argument("city", help="City name, e.g. 'London' or 'Paris, FR'")
    parser.add_argument("--suggest", action="store_true", help="List matching cities instead")
    parser.add_argument("--detailed", action="store_true", help="Also show the detailed forecast")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show client logs")
    args = parser.parse_args(argv)

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if args.verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    return asyncio.run(_run(args, ClientSettings()))


if __name__ == "__main__":
    sys.exit(main())
