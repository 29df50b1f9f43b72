"""
Serialization Utilities

Timestamp helpers shared by the record types. Records are exchanged with
ISO-8601 strings; reads also accept the JavaScript ``Z`` suffix.
"""

import datetime
from typing import Optional, Union


def utc_now() -> datetime.datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def format_timestamp(value: Optional[datetime.datetime]) -> Optional[str]:
    """Render a datetime as ISO-8601, passing ``None`` through."""
    if value is None:
        return None
    return value.isoformat()


def parse_timestamp(value: Union[str, datetime.datetime, None]) -> Optional[datetime.datetime]:
    """
    Parse an ISO-8601 timestamp.

    Accepts the trailing ``Z`` that JavaScript's ``Date.toJSON`` produces.
    Naive values are assumed to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        parsed = value
    else:
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        parsed = datetime.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed
