"""Unit tests for Meetup API tool."""

from unittest.mock import patch, MagicMock

from src.tools.api_tools.meetup_api.meetup_api import MAX_EVENTS, find_meetups


def make_event(index: int) -> dict:
    return {
        'link': f'https://www.meetup.com/group-{index}/events/{index}/',
        'name': f'Event {index}',
        'created': 1704067200000,
        'group': {'name': f'Group {index}'},
    }


class TestFindMeetups:
    """Tests for find_meetups function."""

    @patch('src.tools.api_tools.meetup_api.meetup_api.os.getenv')
    @patch('src.tools.api_tools.meetup_api.meetup_api.httpx.get')
    def test_successful_query(self, mock_get, mock_getenv):
        """Test that events are mapped to meetup records."""
        mock_getenv.return_value = 'test_api_key'
        mock_response = MagicMock()
        mock_response.json.return_value = [make_event(1)]
        mock_response.raise_for_status = MagicMock()
        mock_get.return_value = mock_response

        result = find_meetups(47.6, -122.3)

        assert result == {
            'events': [
                {
                    'link': 'https://www.meetup.com/group-1/events/1/',
                    'name': 'Event 1',
                    'creation_date': 'Mon Jan 01 2024',
                    'host': 'Group 1',
                },
            ],
        }
        assert mock_get.call_args.kwargs['params'] == {
            'key': 'test_api_key',
            'lat': 47.6,
            'lon': -122.3,
        }

    @patch('src.tools.api_tools.meetup_api.meetup_api.os.getenv')
    @patch('src.tools.api_tools.meetup_api.meetup_api.httpx.get')
    def test_caps_results_at_five(self, mock_get, mock_getenv):
        """Test that no more than five events are returned."""
        mock_getenv.return_value = 'test_api_key'
        mock_response = MagicMock()
        mock_response.json.return_value = [make_event(i) for i in range(12)]
        mock_get.return_value = mock_response

        result = find_meetups(47.6, -122.3)

        assert MAX_EVENTS == 5
        assert len(result['events']) == 5
        assert result['events'][-1]['name'] == 'Event 4'

    @patch('src.tools.api_tools.meetup_api.meetup_api.os.getenv')
    @patch('src.tools.api_tools.meetup_api.meetup_api.httpx.get')
    def test_no_events(self, mock_get, mock_getenv):
        """Test that an empty provider answer yields no events."""
        mock_getenv.return_value = 'test_api_key'
        mock_response = MagicMock()
        mock_response.json.return_value = []
        mock_get.return_value = mock_response

        assert find_meetups(47.6, -122.3) == {'events': []}

    @patch('src.tools.api_tools.meetup_api.meetup_api.os.getenv')
    def test_missing_api_key(self, mock_getenv):
        """Test error when API key is missing."""
        mock_getenv.return_value = None

        result = find_meetups(47.6, -122.3)

        assert 'MEETUP_API_KEY' in result['error']
