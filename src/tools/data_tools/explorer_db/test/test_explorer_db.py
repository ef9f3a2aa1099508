"""Unit tests for City Explorer DB tool."""

import os
import pytest
import sqlite3
import tempfile

from src.tools.data_tools.explorer_db.explorer_db import (
    delete_location,
    delete_records,
    get_cached_records,
    get_db_path,
    get_location,
    init_db,
    lookup_location,
    save_location,
    save_records,
)


SEATTLE = {
    'search_query': 'seattle',
    'formatted_query': 'Seattle, WA, USA',
    'latitude': 47.6062095,
    'longitude': -122.3320708,
}


@pytest.fixture
def temp_db_dir():
    """Create a temporary directory for test database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        os.environ['DATABASE_URL'] = os.path.join(tmpdir, 'explorer.db')
        yield tmpdir
        # Cleanup
        if 'DATABASE_URL' in os.environ:
            del os.environ['DATABASE_URL']


class TestExplorerDb:
    """Tests for City Explorer database operations."""

    def test_init_db(self, temp_db_dir):
        """Test database initialization."""
        init_db()
        db_path = get_db_path()
        assert os.path.exists(db_path)

    def test_sqlite_url_prefix(self, temp_db_dir):
        """Test that a sqlite:/// connection string resolves to a file path."""
        os.environ['DATABASE_URL'] = 'sqlite:///' + os.path.join(temp_db_dir, 'other.db')
        assert get_db_path() == os.path.join(temp_db_dir, 'other.db')

    def test_save_and_lookup_location(self, temp_db_dir):
        """Test saving and retrieving a location."""
        saved = save_location(SEATTLE)
        assert saved['id'] is not None

        found = lookup_location('seattle')
        assert found == {**SEATTLE, 'id': saved['id']}

    def test_lookup_unknown_location(self, temp_db_dir):
        """Test looking up a query that was never stored."""
        assert lookup_location('atlantis') is None

    def test_save_location_twice_keeps_first_row(self, temp_db_dir):
        """Test that a duplicate search query returns the stored row."""
        first = save_location(SEATTLE)
        second = save_location({**SEATTLE, 'formatted_query': 'Somewhere else'})

        assert second['id'] == first['id']
        assert second['formatted_query'] == 'Seattle, WA, USA'

    def test_save_and_get_records(self, temp_db_dir):
        """Test caching records for a location."""
        location = save_location(SEATTLE)
        records = [
            {'forecast': 'Rain.', 'time': 'Mon Jan 01 2024'},
            {'forecast': 'Clouds.', 'time': 'Tue Jan 02 2024'},
        ]

        result = save_records('weathers', location['id'], records, created_at=1704067200000)
        assert result == {'success': True, 'count': 2}

        rows = get_cached_records('weathers', location['id'])
        assert rows == [
            {'forecast': 'Rain.', 'time': 'Mon Jan 01 2024', 'created_at': 1704067200000},
            {'forecast': 'Clouds.', 'time': 'Tue Jan 02 2024', 'created_at': 1704067200000},
        ]

    def test_save_records_replaces_previous_set(self, temp_db_dir):
        """Test that a second write for a location replaces the first."""
        location = save_location(SEATTLE)
        save_records('weathers', location['id'], [{'forecast': 'Rain.'}, {'forecast': 'Clouds.'}])
        save_records('weathers', location['id'], [{'forecast': 'Rain.'}, {'forecast': 'Clouds.'}])

        rows = get_cached_records('weathers', location['id'])
        assert [row['forecast'] for row in rows] == ['Rain.', 'Clouds.']

    def test_failed_write_keeps_previous_set(self, temp_db_dir):
        """Test that a rejected write does not remove the rows already cached."""
        location = save_location(SEATTLE)
        save_records('yelps', location['id'], [{'name': 'Chowder'}])

        result = save_records('yelps', location['id'], [{'name': 'Bad', 'rating': object()}])

        assert 'error' in result
        assert [row['name'] for row in get_cached_records('yelps', location['id'])] == ['Chowder']

    def test_get_location_by_id(self, temp_db_dir):
        """Test loading a stored location by id."""
        saved = save_location(SEATTLE)
        assert get_location(saved['id']) == saved
        assert get_location(saved['id'] + 1) is None

    def test_get_records_empty(self, temp_db_dir):
        """Test getting records when nothing is cached."""
        location = save_location(SEATTLE)
        assert get_cached_records('yelps', location['id']) == []

    def test_save_records_for_unknown_location(self, temp_db_dir):
        """Test that a write failure is reported instead of raised."""
        result = save_records('meetups', 9999, [{'name': 'Orphan'}])
        assert 'error' in result

    def test_delete_records(self, temp_db_dir):
        """Test removing the records of one location only."""
        seattle = save_location(SEATTLE)
        portland = save_location({**SEATTLE, 'search_query': 'portland'})
        save_records('yelps', seattle['id'], [{'name': 'A'}, {'name': 'B'}])
        save_records('yelps', portland['id'], [{'name': 'C'}])

        assert delete_records('yelps', seattle['id']) == 2
        assert get_cached_records('yelps', seattle['id']) == []
        assert len(get_cached_records('yelps', portland['id'])) == 1

    def test_delete_location_cascades(self, temp_db_dir):
        """Test that dependent records go away with their location."""
        location = save_location(SEATTLE)
        save_records('weathers', location['id'], [{'forecast': 'Rain.'}])
        save_records('meetups', location['id'], [{'name': 'Pythonistas'}])
        save_records('yelps', location['id'], [{'name': 'Chowder'}])

        assert delete_location(location['id']) == 1

        conn = sqlite3.connect(get_db_path())
        try:
            for table in ('weathers', 'meetups', 'yelps'):
                count = conn.execute(f'SELECT COUNT(*) FROM {table}').fetchone()[0]
                assert count == 0
        finally:
            conn.close()

    def test_unknown_table(self, temp_db_dir):
        """Test that only the cache tables can be addressed."""
        with pytest.raises(ValueError):
            get_cached_records('locations; DROP TABLE locations', 1)
