"""
Kiosk clock helpers - epoch milliseconds and en-US display formats
"""
import time
from datetime import date, datetime, tzinfo

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE


def now_ms() -> int:
    return int(time.time() * MS_PER_SECOND)


def to_local_datetime(timestamp_ms: int, tz: tzinfo) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / MS_PER_SECOND, tz)


def date_key(value: date) -> str:
    """en-US calendar date with dashes, no zero padding: 10-19-2026"""
    return f"{value.month}-{value.day}-{value.year}"


def display_date(value: datetime) -> str:
    """en-US short date: 10/19/2026"""
    return f"{value.month}/{value.day}/{value.year}"


def display_time(value: datetime) -> str:
    """en-US 12-hour clock: 2:05:09 PM"""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d}:{value.second:02d} {meridiem}"
