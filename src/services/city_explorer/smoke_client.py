"""Smoke client for a running City Explorer server."""

import json
import logging
import sys

import httpx


async def main(base_url: str = 'http://localhost:3000', query: str = 'Seattle') -> None:
    """Resolve a location, then query every endpoint that depends on it."""
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        logger.info('=' * 50)
        logger.info(f'Location lookup: {query}')
        logger.info('=' * 50)

        try:
            response = await client.get('/location', params={'data': query})
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f'Failed to resolve location: {e}', exc_info=True)
            raise RuntimeError('Failed to resolve location.') from e

        location = response.json()
        print(json.dumps(location, indent=2))

        for path in ('/weather', '/meetups', '/yelp'):
            logger.info('=' * 50)
            logger.info(f'GET {path}')
            logger.info('=' * 50)

            response = await client.get(path, params={'data': json.dumps(location)})
            if response.is_success:
                records = response.json()
                logger.info(f'{len(records)} records')
                print(json.dumps(records, indent=2))
            else:
                logger.error(f'{path} returned {response.status_code}: {response.text}')

        # Second round should be served from the store
        logger.info('=' * 50)
        logger.info('Repeat location lookup')
        logger.info('=' * 50)
        response = await client.get('/location', params={'data': query})
        print(response.json())


if __name__ == '__main__':
    import asyncio

    asyncio.run(main(*sys.argv[1:]))
