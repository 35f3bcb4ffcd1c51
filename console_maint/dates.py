"""
Date parsing and formatting.

Two textual encodings are accepted:
- Regional DD/MM/YYYY, normalized to local noon so that later timezone
  conversions cannot move it onto a neighbouring day
- ISO-8601 (date or date-time, with or without offset)

Instants are naive local datetimes; offset-aware ISO input is converted
to local time first.
"""

import re
from datetime import date, datetime, time
from typing import Union

from dateutil.parser import isoparse

from .errors import InvalidDateFormat

REGIONAL_FORMAT = "%d/%m/%Y"
MIN_YEAR = 1900

_REGIONAL_RE = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})\s*$")


def parse_date(text: str) -> datetime:
    """Parse a regional or ISO-8601 date string into a local instant."""
    if not isinstance(text, str):
        raise InvalidDateFormat(text)

    match = _REGIONAL_RE.match(text)
    if match:
        day, month, year = (int(g) for g in match.groups())
        if not (1 <= day <= 31 and 1 <= month <= 12 and year >= MIN_YEAR):
            raise InvalidDateFormat(text)
        try:
            return datetime(year, month, day, 12, 0)
        except ValueError as exc:  # e.g. 31/02
            raise InvalidDateFormat(text) from exc

    try:
        parsed = isoparse(text.strip())
    except (ValueError, OverflowError) as exc:
        raise InvalidDateFormat(text) from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_date(instant: Union[datetime, date]) -> str:
    """Format an instant as zero-padded DD/MM/YYYY."""
    return f"{instant.day:02d}/{instant.month:02d}/{instant.year:04d}"


def start_of_day(instant: datetime) -> datetime:
    """Truncate an instant to local midnight."""
    return datetime.combine(instant.date(), time.min)


def days_remaining(due: datetime, now: datetime) -> int:
    """
    Whole calendar days from now until due.

    Both sides are truncated to the start of their day, so a due date of
    today is 0, yesterday is -1 and tomorrow is 1.
    """
    return (start_of_day(due) - start_of_day(now)).days
