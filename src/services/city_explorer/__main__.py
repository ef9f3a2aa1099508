"""City Explorer Server - Entry point for the HTTP server."""

import logging
import os
import sys

import click
import uvicorn
from dotenv import load_dotenv

from observability import init_tracing
from src.tools.data_tools.explorer_db.explorer_db import init_db

from .app import create_app


load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REQUIRED_API_KEYS = (
    'GEOCODE_API_KEY',
    'WEATHER_API_KEY',
    'MEETUP_API_KEY',
    'YELP_API_KEY',
)


class MissingAPIKeyError(Exception):
    """Exception for missing API key."""


@click.command()
@click.option('--host', 'host', default='localhost', envvar='HOST', help='Server host')
@click.option('--port', 'port', default=3000, envvar='PORT', type=int, help='Server port')
@click.option('--tracing/--no-tracing', 'tracing', default=False, help='Send traces to Phoenix')
def main(host: str, port: int, tracing: bool):
    """Starts the City Explorer server."""
    try:
        for key in REQUIRED_API_KEYS:
            if not os.getenv(key):
                raise MissingAPIKeyError(f'{key} environment variable not set.')

        if tracing:
            init_tracing(project_name='city-explorer')

        init_db()
        app = create_app()

        logger.info(f'App is up on http://{host}:{port}')
        uvicorn.run(app, host=host, port=port)

    except MissingAPIKeyError as e:
        logger.error(f'Error: {e}')
        sys.exit(1)
    except Exception as e:
        logger.error(f'An error occurred during server startup: {e}')
        sys.exit(1)


if __name__ == '__main__':
    main()
