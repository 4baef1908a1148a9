"""
Session Resolver - Maps attendance events onto logical work sessions

A session is keyed by the kiosk-local calendar date of its TimeIn event and
may run past midnight while overtime is open. Sessions are never stored; they
are derived from the event set every time.
"""
from datetime import timedelta, tzinfo
from typing import Dict, Iterable, List, Optional

from attendance_kiosk.core.clock import MS_PER_HOUR, date_key, to_local_datetime
from attendance_kiosk.schemas.attendance import AttendanceRecordBase

TIME_IN = "TimeIn"
TIME_OUT = "TimeOut"
OVERTIME_IN = "Overtime-TimeIn"
OVERTIME_OUT = "Overtime-TimeOut"

EVENT_TYPES = (TIME_IN, TIME_OUT, OVERTIME_IN, OVERTIME_OUT)

OVERTIME_THRESHOLD_HOURS = 9


def session_key_for(timestamp_ms: int, tz: tzinfo) -> str:
    return date_key(to_local_datetime(timestamp_ms, tz).date())


def previous_session_key(now_ms: int, tz: tzinfo) -> str:
    today = to_local_datetime(now_ms, tz).date()
    return date_key(today - timedelta(days=1))


def event_session_key(event: AttendanceRecordBase, tz: tzinfo) -> str:
    """Stored session tag, falling back to the calendar date of the event's own timestamp"""
    return event.ar_session_key or session_key_for(event.ar_timestamp, tz)


def find_event(events: Iterable[AttendanceRecordBase], event_type: str) -> Optional[AttendanceRecordBase]:
    """Latest event of the given type, if any"""
    matches = [event for event in events if event.ar_event_type == event_type]
    if not matches:
        return None
    return max(matches, key=lambda event: event.ar_timestamp)


def resolve_session(events: Iterable[AttendanceRecordBase], now_ms: int, tz: tzinfo) -> str:
    """
    Session key for an event set

    Returns the calendar date of the TimeIn event when one exists,
    otherwise today's date.
    """
    time_in = find_event(events, TIME_IN)
    if time_in is not None:
        return session_key_for(time_in.ar_timestamp, tz)
    return session_key_for(now_ms, tz)


def partition_by_session(
    events: Iterable[AttendanceRecordBase],
    tz: tzinfo
) -> Dict[str, List[AttendanceRecordBase]]:
    sessions: Dict[str, List[AttendanceRecordBase]] = {}
    for event in events:
        sessions.setdefault(event_session_key(event, tz), []).append(event)
    return sessions


def events_in_session(
    events: Iterable[AttendanceRecordBase],
    session_key: str,
    tz: tzinfo
) -> List[AttendanceRecordBase]:
    return [event for event in events if event_session_key(event, tz) == session_key]


def is_session_open(session_events: List[AttendanceRecordBase]) -> bool:
    """A session is open until Time Out, or until Overtime Out once overtime has started"""
    if find_event(session_events, TIME_IN) is None:
        return False
    if find_event(session_events, TIME_OUT) is None:
        return True
    return (
        find_event(session_events, OVERTIME_IN) is not None
        and find_event(session_events, OVERTIME_OUT) is None
    )


def awaits_overtime(
    session_events: List[AttendanceRecordBase],
    today: str,
    tz: tzinfo,
    threshold_hours: float = OVERTIME_THRESHOLD_HOURS
) -> bool:
    """
    Shift closed past midnight with overtime still to be recorded

    True when TimeOut landed on today's date at least threshold_hours after
    TimeIn and no Overtime-TimeOut exists yet.
    """
    time_in = find_event(session_events, TIME_IN)
    time_out = find_event(session_events, TIME_OUT)
    if time_in is None or time_out is None:
        return False
    if find_event(session_events, OVERTIME_OUT) is not None:
        return False
    if session_key_for(time_out.ar_timestamp, tz) != today:
        return False
    return time_out.ar_timestamp - time_in.ar_timestamp >= threshold_hours * MS_PER_HOUR


def resolve_current_session(
    events: Iterable[AttendanceRecordBase],
    now_ms: int,
    tz: tzinfo,
    carryover_hours: float = 24,
    threshold_hours: float = OVERTIME_THRESHOLD_HOURS
) -> str:
    """
    Session key the next attendance action belongs to

    Events loaded from several calendar days are grouped by session. The
    session of the latest TimeIn stays current while it is younger than
    carryover_hours and either still open or waiting for overtime after a
    shift that ended past midnight. Otherwise today's session is current.
    """
    today = session_key_for(now_ms, tz)
    sessions = partition_by_session(events, tz)

    latest_key = None
    latest_time_in = None
    for key, session_events in sessions.items():
        time_in = find_event(session_events, TIME_IN)
        if time_in is None:
            continue
        if latest_time_in is None or time_in.ar_timestamp > latest_time_in.ar_timestamp:
            latest_key, latest_time_in = key, time_in

    if latest_time_in is None or latest_key == today:
        return today

    if now_ms - latest_time_in.ar_timestamp >= carryover_hours * MS_PER_HOUR:
        return today

    session_events = sessions[latest_key]
    if is_session_open(session_events) or awaits_overtime(session_events, today, tz, threshold_hours):
        return latest_key
    return today
