# arrivals/utils/dates.py
"""Calendar-date helpers. Every date crossing an API boundary is YYYY-MM-DD."""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from arrivals.errors import ValidationError

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_event_date(value: Optional[str], field: str = "date") -> str:
    """Return value unchanged if it is a real YYYY-MM-DD date, else raise ValidationError."""
    if not value or not _DATE_RE.match(value):
        raise ValidationError(f"Invalid {field} format. Expected YYYY-MM-DD")
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value} is not a calendar date")
    return value


def optional_event_date(value: Optional[str], field: str = "date") -> Optional[str]:
    if value is None or value == "":
        return None
    return validate_event_date(value, field)


def today() -> str:
    return date.today().isoformat()


def next_day(value: str) -> str:
    return (datetime.strptime(value, "%Y-%m-%d") + timedelta(days=1)).strftime("%Y-%m-%d")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an upstream ISO-8601 timestamp into an aware UTC datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_date_of(value: Optional[str]) -> Optional[str]:
    """UTC calendar date (YYYY-MM-DD) of an upstream timestamp, or None if unparseable."""
    parsed = parse_timestamp(value)
    return parsed.date().isoformat() if parsed else None
