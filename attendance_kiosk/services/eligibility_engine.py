"""
Eligibility Engine - which attendance actions are actionable right now

Pure function of the current session's events, the clock and whether a photo
has been captured during this screen visit. Recomputed on every request and
every clock tick; nothing here is cached.
"""
from typing import List

from attendance_kiosk.core.clock import MS_PER_HOUR, MS_PER_MINUTE, MS_PER_SECOND
from attendance_kiosk.schemas.attendance import AttendanceRecordBase, Eligibility
from attendance_kiosk.services.session_resolver import (
    TIME_IN,
    TIME_OUT,
    OVERTIME_IN,
    OVERTIME_OUT,
    OVERTIME_THRESHOLD_HOURS,
    find_event,
)

STATUS_REQUIRES_TIME_IN = "Overtime requires Time In first."
STATUS_NOT_ELIGIBLE = "Your attendance is not eligible for OT."
STATUS_ELIGIBLE = "You are eligible for overtime."


def format_countdown(remaining_ms: int) -> str:
    hours = remaining_ms // MS_PER_HOUR
    minutes = (remaining_ms % MS_PER_HOUR) // MS_PER_MINUTE
    seconds = (remaining_ms % MS_PER_MINUTE) // MS_PER_SECOND
    return f"Overtime available in {hours}h {minutes}m {seconds}s"


def compute_eligibility(
    session_events: List[AttendanceRecordBase],
    now_ms: int,
    has_capture: bool,
    threshold_hours: float = OVERTIME_THRESHOLD_HOURS
) -> Eligibility:
    """
    Compute allowed actions and the overtime notice for one session

    Worked time runs from TimeIn to now while the session has no TimeOut,
    and from TimeIn to TimeOut afterwards, so a short shift never turns
    eligible later on.
    """
    time_in = find_event(session_events, TIME_IN)
    if time_in is None:
        return Eligibility(
            time_in_allowed=has_capture,
            overtime_status_text=STATUS_REQUIRES_TIME_IN,
        )

    time_out = find_event(session_events, TIME_OUT)
    has_overtime_in = find_event(session_events, OVERTIME_IN) is not None
    has_overtime_out = find_event(session_events, OVERTIME_OUT) is not None

    threshold_ms = int(threshold_hours * MS_PER_HOUR)
    end_ms = time_out.ar_timestamp if time_out is not None else now_ms
    worked_ms = end_ms - time_in.ar_timestamp
    overtime_eligible = worked_ms >= threshold_ms

    remaining_ms = None
    if overtime_eligible:
        status_text = STATUS_ELIGIBLE
    elif time_out is not None:
        status_text = STATUS_NOT_ELIGIBLE
    else:
        remaining_ms = threshold_ms - worked_ms
        status_text = format_countdown(remaining_ms)

    return Eligibility(
        time_in_allowed=False,
        time_out_allowed=has_capture and time_out is None,
        overtime_in_allowed=has_capture and overtime_eligible and not has_overtime_in,
        overtime_out_allowed=(
            has_capture and overtime_eligible and has_overtime_in and not has_overtime_out
        ),
        overtime_eligible=overtime_eligible,
        overtime_status_text=status_text,
        overtime_section_visible=overtime_eligible,
        hours_worked=round(worked_ms / MS_PER_HOUR, 2),
        remaining_ms=remaining_ms,
    )


def is_action_allowed(eligibility: Eligibility, event_type: str) -> bool:
    allowed = {
        TIME_IN: eligibility.time_in_allowed,
        TIME_OUT: eligibility.time_out_allowed,
        OVERTIME_IN: eligibility.overtime_in_allowed,
        OVERTIME_OUT: eligibility.overtime_out_allowed,
    }
    return allowed.get(event_type, False)
