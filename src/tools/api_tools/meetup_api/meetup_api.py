"""Meetup API Tool - upcoming events near a coordinate."""

import os

import httpx

from observability import trace_tool

from src.tools.shared_libraries.helpers import format_display_date

MEETUP_URL = 'https://api.meetup.com/find/events'
MAX_EVENTS = 5


@trace_tool(name="api.find_meetups")
def find_meetups(
    latitude: float,
    longitude: float,
) -> dict:
    """Find upcoming meetups near a coordinate.

    Args:
        latitude: Latitude of the location.
        longitude: Longitude of the location.

    Returns:
        A dictionary whose "events" list holds at most five
        {link, name, creation_date, host} entries. Returns an error message
        if the request fails.
    """
    api_key = os.getenv('MEETUP_API_KEY')
    if not api_key:
        return {'error': 'MEETUP_API_KEY environment variable not set.'}

    try:
        response = httpx.get(
            MEETUP_URL,
            params={
                'key': api_key,
                'lat': latitude,
                'lon': longitude,
            },
            timeout=10.0,
        )
        response.raise_for_status()

        events = []
        for item in response.json() or []:
            created = item.get('created')
            events.append({
                'link': item.get('link'),
                'name': item.get('name'),
                # Meetup reports creation time in milliseconds
                'creation_date': format_display_date(created / 1000) if created else None,
                'host': (item.get('group') or {}).get('name'),
            })
            if len(events) >= MAX_EVENTS:
                break

        return {'events': events}
    except httpx.HTTPError as e:
        return {'error': f'API request failed: {e}'}
    except (ValueError, AttributeError, TypeError):
        return {'error': 'Invalid JSON response from API.'}
