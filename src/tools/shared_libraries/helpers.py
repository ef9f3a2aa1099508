"""Shared helper functions for provider and store tools."""

import os
import time
from datetime import datetime, timezone

DISPLAY_DATE_FORMAT = '%a %b %d %Y'
DEFAULT_MAX_AGE_MINUTES = 30


def now_ms() -> int:
    """Get the current time as epoch milliseconds.

    Returns:
        Milliseconds since the epoch.
    """
    return int(time.time() * 1000)


def format_display_date(epoch_seconds: float) -> str:
    """Format an epoch timestamp as a short date, e.g. "Mon Jan 01 2024".

    Args:
        epoch_seconds: Seconds since the epoch.

    Returns:
        The UTC date of the timestamp.
    """
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return moment.strftime(DISPLAY_DATE_FORMAT)


def age_minutes(created_at_ms: int, current_ms: int | None = None) -> float:
    """Age in minutes of a row stamped with ``created_at_ms``."""
    if current_ms is None:
        current_ms = now_ms()
    return (current_ms - created_at_ms) / (1000 * 60)


def is_fresh(
    created_at_ms: int,
    max_age_minutes: float,
    current_ms: int | None = None,
) -> bool:
    """Check whether a cached row is still within its freshness threshold.

    Args:
        created_at_ms: Creation time of the row in epoch milliseconds.
        max_age_minutes: Freshness threshold in minutes.
        current_ms: Reference time, defaults to now.

    Returns:
        True if the row is young enough to be served from the store.
    """
    return age_minutes(created_at_ms, current_ms) <= max_age_minutes


def get_max_age_minutes(env_var: str) -> float:
    """Read a freshness threshold from the environment."""
    value = os.getenv(env_var)
    if not value:
        return DEFAULT_MAX_AGE_MINUTES
    try:
        return float(value)
    except ValueError:
        return DEFAULT_MAX_AGE_MINUTES
