"""Geocode API Tool - Google Geocoding integration."""

import os

import httpx

from observability import trace_tool

GEOCODE_URL = 'https://maps.googleapis.com/maps/api/geocode/json'


@trace_tool(name="api.geocode_address")
def geocode_address(query: str) -> dict:
    """Resolve a free-text location query to coordinates.

    Args:
        query: The location as typed by the user (e.g., "Seattle", "Lynnwood, WA").

    Returns:
        A dictionary with search_query, formatted_query, latitude and longitude
        taken from the best match. Returns an error message if the request
        fails or nothing matches.
    """
    api_key = os.getenv('GEOCODE_API_KEY')
    if not api_key:
        return {'error': 'GEOCODE_API_KEY environment variable not set.'}

    try:
        response = httpx.get(
            GEOCODE_URL,
            params={
                'address': query,
                'key': api_key,
            },
            timeout=10.0,
        )
        response.raise_for_status()

        results = response.json().get('results') or []
        if not results:
            return {'error': f'No location found for "{query}".'}

        best = results[0]
        coordinates = best.get('geometry', {}).get('location', {})
        return {
            'search_query': query,
            'formatted_query': best.get('formatted_address'),
            'latitude': coordinates['lat'],
            'longitude': coordinates['lng'],
        }
    except httpx.HTTPError as e:
        return {'error': f'API request failed: {e}'}
    except KeyError:
        return {'error': f'No coordinates returned for "{query}".'}
    except (ValueError, AttributeError, TypeError):
        return {'error': 'Invalid JSON response from API.'}
