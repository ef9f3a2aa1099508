"""Yelp API Tool - nearby business search."""

import os

import httpx

from observability import trace_tool

YELP_SEARCH_URL = 'https://api.yelp.com/v3/businesses/search'


@trace_tool(name="api.search_businesses")
def search_businesses(
    latitude: float,
    longitude: float,
) -> dict:
    """Search businesses around a coordinate.

    Args:
        latitude: Latitude of the location.
        longitude: Longitude of the location.

    Returns:
        A dictionary whose "businesses" list holds
        {name, image_url, price, rating, url} entries. Returns an error
        message if the request fails.
    """
    api_key = os.getenv('YELP_API_KEY')
    if not api_key:
        return {'error': 'YELP_API_KEY environment variable not set.'}

    try:
        response = httpx.get(
            YELP_SEARCH_URL,
            params={
                'latitude': latitude,
                'longitude': longitude,
            },
            headers={'Authorization': f'Bearer {api_key}'},
            timeout=10.0,
        )
        response.raise_for_status()

        businesses = [
            {
                'name': business.get('name'),
                'image_url': business.get('image_url'),
                'price': business.get('price'),
                'rating': business.get('rating'),
                'url': business.get('url'),
            }
            for business in response.json().get('businesses', [])
        ]

        return {'businesses': businesses}
    except httpx.HTTPError as e:
        return {'error': f'API request failed: {e}'}
    except (ValueError, AttributeError, TypeError):
        return {'error': 'Invalid JSON response from API.'}
