"""Date manipulation utilities"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple

# Fractional seconds; Postgres drops trailing zeros ("10:30:00.12345")
_FRACTION = re.compile(r"\.(\d+)")


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def trailing_window(today: date, days: int) -> List[date]:
    """The `days` calendar days ending at `today` (inclusive), ascending"""
    return generate_date_range(today - timedelta(days=days - 1), today)


def month_bounds(today: date) -> Tuple[date, date]:
    """First and last calendar day of the month containing `today`"""
    first = today.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    return first, next_first - timedelta(days=1)


def start_of_day_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse a backend timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings (PostgREST returns "+00:00" offsets, some clients send
    "Z") and datetime objects. Naive values are taken to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], text, count=1)
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value) -> Optional[date]:
    """Parse a date-only column (also accepts full timestamps)"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return parse_timestamp(value).date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return parse_timestamp(text).date()
