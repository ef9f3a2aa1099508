"""Weather API Tool - Dark Sky style daily forecast integration."""

import os

import httpx

from observability import trace_tool

from src.tools.shared_libraries.helpers import format_display_date

DEFAULT_WEATHER_URL = 'https://api.darksky.net/forecast'


@trace_tool(name="api.get_daily_forecast")
def get_daily_forecast(
    latitude: float,
    longitude: float,
) -> dict:
    """Get the daily forecast for a coordinate.

    Args:
        latitude: Latitude of the location.
        longitude: Longitude of the location.

    Returns:
        A dictionary whose "forecasts" list holds one {forecast, time} entry
        per day. Returns an error message if the request fails.
    """
    api_key = os.getenv('WEATHER_API_KEY')
    if not api_key:
        return {'error': 'WEATHER_API_KEY environment variable not set.'}

    base_url = os.getenv('WEATHER_API_URL') or DEFAULT_WEATHER_URL

    try:
        response = httpx.get(
            f'{base_url.rstrip("/")}/{api_key}/{latitude},{longitude}',
            timeout=10.0,
        )
        response.raise_for_status()

        data = response.json()
        forecasts = [
            {
                'forecast': day.get('summary'),
                'time': format_display_date(day['time']) if 'time' in day else None,
            }
            for day in data.get('daily', {}).get('data', [])
        ]

        return {'forecasts': forecasts}
    except httpx.HTTPError as e:
        return {'error': f'API request failed: {e}'}
    except (ValueError, AttributeError, TypeError):
        return {'error': 'Invalid JSON response from API.'}
