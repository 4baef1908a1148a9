"""
Duplicate Guard - at most one event per type per session per employee
"""
from datetime import tzinfo
from typing import Iterable

from attendance_kiosk.schemas.attendance import AttendanceRecordBase
from attendance_kiosk.services.session_resolver import event_session_key


def is_duplicate(
    events: Iterable[AttendanceRecordBase],
    session_key: str,
    event_type: str,
    tz: tzinfo
) -> bool:
    return any(
        event.ar_event_type == event_type and event_session_key(event, tz) == session_key
        for event in events
    )


def duplicate_message(event_type: str) -> str:
    return f"{event_type} has already been recorded today."
