"""Database models and schema for City Explorer storage."""

from pydantic import BaseModel, Field


# SQLite schema definitions
SCHEMA_SQL = """
-- Geocoded locations, cached forever
CREATE TABLE IF NOT EXISTS locations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    search_query TEXT NOT NULL UNIQUE,
    formatted_query TEXT,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL
);

-- Daily forecasts per location
CREATE TABLE IF NOT EXISTS weathers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    forecast TEXT,
    time TEXT,
    location_id INTEGER NOT NULL REFERENCES locations(id) ON DELETE CASCADE,
    created_at INTEGER NOT NULL
);

-- Upcoming meetup events per location
CREATE TABLE IF NOT EXISTS meetups (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    link TEXT,
    name TEXT,
    creation_date TEXT,
    host TEXT,
    location_id INTEGER NOT NULL REFERENCES locations(id) ON DELETE CASCADE,
    created_at INTEGER NOT NULL
);

-- Nearby businesses per location
CREATE TABLE IF NOT EXISTS yelps (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    image_url TEXT,
    price TEXT,
    rating REAL,
    url TEXT,
    location_id INTEGER NOT NULL REFERENCES locations(id) ON DELETE CASCADE,
    created_at INTEGER NOT NULL
);

-- Index for faster lookups
CREATE INDEX IF NOT EXISTS idx_weathers_location_id ON weathers(location_id);
CREATE INDEX IF NOT EXISTS idx_meetups_location_id ON meetups(location_id);
CREATE INDEX IF NOT EXISTS idx_yelps_location_id ON yelps(location_id);
"""


class Location(BaseModel):
    """A geocoded search query."""

    id: int | None = Field(default=None, description='Store id, absent until saved')
    search_query: str
    formatted_query: str | None = None
    latitude: float
    longitude: float


class Weather(BaseModel):
    """One day of forecast."""

    forecast: str | None = None
    time: str | None = None


class Meetup(BaseModel):
    """An upcoming event near a location."""

    link: str | None = None
    name: str | None = None
    creation_date: str | None = None
    host: str | None = None


class Business(BaseModel):
    """A business listing near a location."""

    name: str | None = None
    image_url: str | None = None
    price: str | None = None
    rating: float | None = None
    url: str | None = None


# Cached tables keyed by location_id, and the record fields each one stores.
RECORD_COLUMNS: dict[str, tuple[str, ...]] = {
    'weathers': tuple(Weather.model_fields),
    'meetups': tuple(Meetup.model_fields),
    'yelps': tuple(Business.model_fields),
}
