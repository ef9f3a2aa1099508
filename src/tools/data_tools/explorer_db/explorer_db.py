"""City Explorer Database Tool - SQLite operations for cached provider data."""

import logging
import os
import sqlite3
from pathlib import Path

from observability import trace_tool

from src.tools.shared_libraries.helpers import now_ms

from .models import RECORD_COLUMNS, SCHEMA_SQL


logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = './data/city_explorer.db'
SQLITE_PREFIX = 'sqlite:///'


def get_db_path() -> str:
    """Get the database file path from DATABASE_URL."""
    url = os.getenv('DATABASE_URL') or DEFAULT_DATABASE_URL
    if url.startswith(SQLITE_PREFIX):
        url = url[len(SQLITE_PREFIX):]
    db_path = Path(url)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return str(db_path)


def get_connection() -> sqlite3.Connection:
    """Get a database connection with foreign keys enforced."""
    conn = sqlite3.connect(get_db_path())
    conn.row_factory = sqlite3.Row
    conn.execute('PRAGMA foreign_keys = ON')
    return conn


def init_db() -> None:
    """Initialize the database with required tables."""
    conn = get_connection()
    try:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()


def _columns_for(table: str) -> tuple[str, ...]:
    try:
        return RECORD_COLUMNS[table]
    except KeyError:
        raise ValueError(f'Unknown cache table: {table}') from None


@trace_tool(name="db.lookup_location")
def lookup_location(search_query: str) -> dict | None:
    """Find a cached location by its search query.

    Args:
        search_query: The free-text query the location was geocoded from.

    Returns:
        The stored location row, or None if the query was never seen.
    """
    init_db()
    conn = get_connection()
    try:
        row = conn.execute(
            """
            SELECT id, search_query, formatted_query, latitude, longitude
            FROM locations
            WHERE search_query = ?
            """,
            (search_query,),
        ).fetchone()
        return dict(row) if row else None
    finally:
        conn.close()


@trace_tool(name="db.get_location")
def get_location(location_id: int) -> dict | None:
    """Find a stored location by id."""
    init_db()
    conn = get_connection()
    try:
        row = conn.execute(
            """
            SELECT id, search_query, formatted_query, latitude, longitude
            FROM locations
            WHERE id = ?
            """,
            (location_id,),
        ).fetchone()
        return dict(row) if row else None
    finally:
        conn.close()


@trace_tool(name="db.save_location")
def save_location(location: dict) -> dict:
    """Persist a geocoded location.

    If another request stored the same query first, the existing row wins.

    Args:
        location: Location fields without an id.

    Returns:
        The stored location including its id.
    """
    init_db()
    conn = get_connection()
    try:
        cursor = conn.execute(
            """
            INSERT INTO locations (search_query, formatted_query, latitude, longitude)
            VALUES (?, ?, ?, ?)
            """,
            (
                location['search_query'],
                location.get('formatted_query'),
                location['latitude'],
                location['longitude'],
            ),
        )
        conn.commit()
        return {**location, 'id': cursor.lastrowid}
    except sqlite3.IntegrityError:
        conn.rollback()
        logger.info(f"Location '{location['search_query']}' was stored concurrently")
        existing = conn.execute(
            'SELECT * FROM locations WHERE search_query = ?',
            (location['search_query'],),
        ).fetchone()
        return dict(existing)
    finally:
        conn.close()


@trace_tool(name="db.delete_location")
def delete_location(location_id: int) -> int:
    """Delete a location together with every record cached for it.

    Returns:
        The number of location rows removed.
    """
    init_db()
    conn = get_connection()
    try:
        cursor = conn.execute('DELETE FROM locations WHERE id = ?', (location_id,))
        conn.commit()
        return cursor.rowcount
    finally:
        conn.close()


@trace_tool(name="db.get_cached_records", capture_output=False)
def get_cached_records(table: str, location_id: int) -> list[dict]:
    """Get the records cached for a location.

    Args:
        table: One of the cache tables (weathers, meetups, yelps).
        location_id: The owning location.

    Returns:
        Stored rows in insertion order, each with its record fields and
        ``created_at`` in epoch milliseconds.
    """
    columns = _columns_for(table)
    init_db()
    conn = get_connection()
    try:
        cursor = conn.execute(
            f"""
            SELECT {', '.join(columns)}, created_at
            FROM {table}
            WHERE location_id = ?
            ORDER BY id
            """,
            (location_id,),
        )
        return [dict(row) for row in cursor.fetchall()]
    finally:
        conn.close()


@trace_tool(name="db.save_records", capture_output=False)
def save_records(
    table: str,
    location_id: int,
    records: list[dict],
    created_at: int | None = None,
) -> dict:
    """Cache freshly fetched records for a location, replacing any it had.

    Runs after the response has been sent, so failures are logged rather
    than raised. The old rows are removed in the same transaction, so two
    overlapping writes for one location leave a single set behind.

    Args:
        table: One of the cache tables (weathers, meetups, yelps).
        location_id: The owning location.
        records: Record dicts holding the table's fields.
        created_at: Timestamp to stamp the rows with, defaults to now.

    Returns:
        A confirmation with the number of saved rows, or an error message.
    """
    columns = _columns_for(table)
    stamp = created_at if created_at is not None else now_ms()
    placeholders = ', '.join('?' for _ in range(len(columns) + 2))
    init_db()
    conn = get_connection()
    try:
        conn.execute(f'DELETE FROM {table} WHERE location_id = ?', (location_id,))
        conn.executemany(
            f"""
            INSERT INTO {table} ({', '.join(columns)}, location_id, created_at)
            VALUES ({placeholders})
            """,
            [
                tuple(record.get(column) for column in columns) + (location_id, stamp)
                for record in records
            ],
        )
        conn.commit()
        return {'success': True, 'count': len(records)}
    except sqlite3.Error as e:
        logger.error(f'Failed to cache {table} for location {location_id}: {e}')
        return {'error': f'Database error: {e}'}
    finally:
        conn.close()


@trace_tool(name="db.delete_records")
def delete_records(table: str, location_id: int) -> int:
    """Delete every record cached for a location.

    Returns:
        The number of rows removed.
    """
    _columns_for(table)
    init_db()
    conn = get_connection()
    try:
        cursor = conn.execute(
            f'DELETE FROM {table} WHERE location_id = ?',
            (location_id,),
        )
        conn.commit()
        logger.info(f'Deleted {cursor.rowcount} {table} rows for location {location_id}')
        return cursor.rowcount
    finally:
        conn.close()
