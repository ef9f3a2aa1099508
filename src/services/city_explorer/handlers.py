"""Cache-or-fetch handlers - bridge the HTTP routes with the store and providers."""

import logging
from abc import ABC, abstractmethod

from fastapi import BackgroundTasks
from pydantic import BaseModel, ValidationError

from src.tools.api_tools.geocode_api.geocode_api import geocode_address
from src.tools.api_tools.meetup_api.meetup_api import MAX_EVENTS, find_meetups
from src.tools.api_tools.weather_api.weather_api import get_daily_forecast
from src.tools.api_tools.yelp_api.yelp_api import search_businesses
from src.tools.data_tools.explorer_db.explorer_db import (
    delete_records,
    get_cached_records,
    get_location,
    lookup_location,
    save_location,
    save_records,
)
from src.tools.data_tools.explorer_db.models import (
    Business,
    Location,
    Meetup,
    Weather,
)
from src.tools.shared_libraries.helpers import get_max_age_minutes, is_fresh


logger = logging.getLogger(__name__)


class LocationNotFoundError(Exception):
    """Exception for a query the geocoder could not resolve."""


class InvalidLocationError(Exception):
    """Exception for a location payload that names no known location."""


def parse_location(data: str) -> Location:
    """Load the stored location named by the client's location JSON.

    The payload only identifies the location: by id when it has one,
    otherwise by search_query. Coordinates always come from the store.

    Raises:
        InvalidLocationError: If the payload is malformed, unknown, or its
            id and search_query disagree with the store.
    """
    try:
        location = Location.model_validate_json(data)
    except (ValidationError, ValueError) as e:
        raise InvalidLocationError(f'Invalid location data: {e}') from e

    if location.id is None:
        stored = lookup_location(location.search_query)
    else:
        stored = get_location(location.id)

    if stored is None:
        raise InvalidLocationError(
            f'Unknown location "{location.search_query}", resolve it with /location first.'
        )
    if stored['search_query'] != location.search_query:
        raise InvalidLocationError(
            f'Location {location.id} is not "{location.search_query}".'
        )

    return Location(**stored)


class LocationHandler:
    """Resolves search queries to locations. Locations never go stale."""

    def resolve(self, query: str) -> Location:
        """Return the stored location for ``query``, geocoding it on first use.

        Raises:
            LocationNotFoundError: If the geocoder fails or finds nothing.
        """
        cached = lookup_location(query)
        if cached is not None:
            logger.info(f'Location "{query}" served from store')
            return Location(**cached)

        result = geocode_address(query)
        if 'error' in result:
            raise LocationNotFoundError(result['error'])

        logger.info(f'Location "{query}" fetched from geocoder')
        return Location(**save_location(result))


class CachedRecordHandler(ABC):
    """Serves records cached per location, refetching once they go stale.

    Subclasses name the table, the record model, the provider call and the
    key of the provider result holding the records.
    """

    table: str
    record_type: type[BaseModel]
    result_key: str
    max_age_env: str
    limit: int | None = None

    @abstractmethod
    def fetch(self, location: Location) -> dict:
        """Call the provider for ``location``; errors come back as {'error': ...}."""

    @property
    def max_age_minutes(self) -> float:
        return get_max_age_minutes(self.max_age_env)

    def resolve(
        self,
        location: Location,
        background_tasks: BackgroundTasks | None = None,
    ) -> list[BaseModel]:
        """Return fresh records for ``location``.

        Freshly fetched records are persisted by ``background_tasks`` after
        the response is sent, or immediately when no task queue is given.
        """
        rows = get_cached_records(self.table, location.id)
        if rows:
            if is_fresh(rows[0]['created_at'], self.max_age_minutes):
                logger.info(f'{self.table} for location {location.id} served from store')
                return self._limit([self.record_type(**row) for row in rows])

            logger.info(f'{self.table} for location {location.id} too old, refetching')
            delete_records(self.table, location.id)
        else:
            logger.info(f'No {self.table} stored for location {location.id}')

        result = self.fetch(location)
        if 'error' in result:
            logger.error(f'Fetching {self.table} for location {location.id} failed: {result["error"]}')
            return []

        records = self._limit([self.record_type(**item) for item in result.get(self.result_key, [])])
        if records:
            payload = [record.model_dump() for record in records]
            if background_tasks is not None:
                background_tasks.add_task(save_records, self.table, location.id, payload)
            else:
                save_records(self.table, location.id, payload)

        return records

    def _limit(self, records: list[BaseModel]) -> list[BaseModel]:
        if self.limit is None:
            return records
        return records[:self.limit]


class WeatherHandler(CachedRecordHandler):
    table = 'weathers'
    record_type = Weather
    result_key = 'forecasts'
    max_age_env = 'WEATHER_MAX_AGE_MINUTES'

    def fetch(self, location: Location) -> dict:
        return get_daily_forecast(location.latitude, location.longitude)


class MeetupHandler(CachedRecordHandler):
    table = 'meetups'
    record_type = Meetup
    result_key = 'events'
    max_age_env = 'MEETUPS_MAX_AGE_MINUTES'
    limit = MAX_EVENTS

    def fetch(self, location: Location) -> dict:
        return find_meetups(location.latitude, location.longitude)


class BusinessHandler(CachedRecordHandler):
    table = 'yelps'
    record_type = Business
    result_key = 'businesses'
    max_age_env = 'YELP_MAX_AGE_MINUTES'

    def fetch(self, location: Location) -> dict:
        return search_businesses(location.latitude, location.longitude)
