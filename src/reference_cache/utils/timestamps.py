"""Timestamp helpers.

All persisted date-times are naive local times at second precision, written
as ``YYYY-MM-DDTHH:MM:SS``.
"""

from datetime import datetime

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def now() -> datetime:
    """Current local time truncated to whole seconds."""
    return datetime.now().replace(microsecond=0)


def format_datetime(value: datetime | None) -> str | None:
    """Format a datetime in the persisted representation."""
    if value is None:
        return None
    return value.strftime(DATETIME_FORMAT)
