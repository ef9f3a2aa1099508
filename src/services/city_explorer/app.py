"""City Explorer HTTP application - the four cache-or-fetch endpoints."""

import logging
import sqlite3

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from observability import trace_span
from src.tools.data_tools.explorer_db.models import (
    Business,
    Location,
    Meetup,
    Weather,
)

from .handlers import (
    BusinessHandler,
    InvalidLocationError,
    LocationHandler,
    LocationNotFoundError,
    MeetupHandler,
    WeatherHandler,
    parse_location,
)


logger = logging.getLogger(__name__)

ERROR_MESSAGE = 'Sorry, something went wrong'


def create_app() -> FastAPI:
    """Build the FastAPI application with CORS and error handlers."""
    app = FastAPI(title='City Explorer', version='1.0.0')
    app.add_middleware(
        CORSMiddleware,
        allow_origins=['*'],
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    location_handler = LocationHandler()
    weather_handler = WeatherHandler()
    meetup_handler = MeetupHandler()
    business_handler = BusinessHandler()

    @app.exception_handler(LocationNotFoundError)
    async def location_not_found(request: Request, exc: LocationNotFoundError) -> PlainTextResponse:
        logger.error(f'Location lookup failed: {exc}')
        return PlainTextResponse(ERROR_MESSAGE, status_code=500)

    @app.exception_handler(sqlite3.Error)
    async def store_error(request: Request, exc: sqlite3.Error) -> PlainTextResponse:
        logger.error(f'Store query failed on {request.url.path}', exc_info=exc)
        return PlainTextResponse(ERROR_MESSAGE, status_code=500)

    @app.exception_handler(InvalidLocationError)
    async def invalid_location(request: Request, exc: InvalidLocationError) -> PlainTextResponse:
        logger.warning(f'Rejected request to {request.url.path}: {exc}')
        return PlainTextResponse(str(exc), status_code=400)

    @app.get('/location')
    @trace_span('route.location')
    def get_location(data: str) -> Location:
        return location_handler.resolve(data)

    @app.get('/weather')
    @trace_span('route.weather')
    def get_weather(data: str, background_tasks: BackgroundTasks) -> list[Weather]:
        return weather_handler.resolve(parse_location(data), background_tasks)

    @app.get('/meetups')
    @trace_span('route.meetups')
    def get_meetups(data: str, background_tasks: BackgroundTasks) -> list[Meetup]:
        return meetup_handler.resolve(parse_location(data), background_tasks)

    @app.get('/yelp')
    @trace_span('route.yelp')
    def get_yelp(data: str, background_tasks: BackgroundTasks) -> list[Business]:
        return business_handler.resolve(parse_location(data), background_tasks)

    return app
