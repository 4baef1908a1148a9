import pytest

from attendance_kiosk.core.clock import MS_PER_HOUR, MS_PER_MINUTE, MS_PER_SECOND
from attendance_kiosk.services.eligibility_engine import (
    STATUS_ELIGIBLE,
    STATUS_NOT_ELIGIBLE,
    STATUS_REQUIRES_TIME_IN,
    compute_eligibility,
    format_countdown,
    is_action_allowed,
)
from tests.conftest import make_event, manila_ms

T = manila_ms(2026, 10, 19, 8)


def test_empty_session_with_capture_allows_only_time_in():
    result = compute_eligibility([], T, has_capture=True)

    assert result.time_in_allowed is True
    assert result.time_out_allowed is False
    assert result.overtime_in_allowed is False
    assert result.overtime_out_allowed is False
    assert result.overtime_eligible is False
    assert result.overtime_section_visible is False
    assert result.overtime_status_text == STATUS_REQUIRES_TIME_IN


def test_empty_session_without_capture_allows_nothing():
    result = compute_eligibility([], T, has_capture=False)
    assert result.time_in_allowed is False


def test_eight_hours_in_without_capture_counts_down_one_hour():
    events = [make_event("TimeIn", T)]
    result = compute_eligibility(events, T + 8 * MS_PER_HOUR, has_capture=False)

    assert result.time_out_allowed is False
    assert result.overtime_eligible is False
    assert result.overtime_section_visible is False
    assert result.overtime_status_text == "Overtime available in 1h 0m 0s"
    assert result.remaining_ms == MS_PER_HOUR


def test_eight_hours_in_with_capture_allows_time_out():
    events = [make_event("TimeIn", T)]
    result = compute_eligibility(events, T + 8 * MS_PER_HOUR, has_capture=True)

    assert result.time_in_allowed is False
    assert result.time_out_allowed is True
    assert result.overtime_in_allowed is False


def test_long_shift_with_time_out_is_eligible():
    events = [make_event("TimeIn", T), make_event("TimeOut", T + 9 * MS_PER_HOUR + 30 * MS_PER_MINUTE)]
    result = compute_eligibility(events, T + 10 * MS_PER_HOUR, has_capture=True)

    assert result.overtime_status_text == STATUS_ELIGIBLE
    assert result.overtime_section_visible is True
    assert result.overtime_in_allowed is True
    assert result.overtime_out_allowed is False
    assert result.time_out_allowed is False


@pytest.mark.parametrize("hours_later", [5, 9, 12, 48])
def test_short_shift_never_becomes_eligible(hours_later):
    events = [make_event("TimeIn", T), make_event("TimeOut", T + 5 * MS_PER_HOUR)]
    result = compute_eligibility(events, T + hours_later * MS_PER_HOUR, has_capture=True)

    assert result.overtime_status_text == STATUS_NOT_ELIGIBLE
    assert result.overtime_section_visible is False
    assert result.overtime_in_allowed is False
    assert result.overtime_eligible is False


def test_eligible_at_exact_threshold():
    events = [make_event("TimeIn", T)]
    result = compute_eligibility(events, T + 9 * MS_PER_HOUR, has_capture=True)

    assert result.overtime_eligible is True
    assert result.overtime_status_text == STATUS_ELIGIBLE
    assert result.overtime_in_allowed is True


def test_eligibility_is_monotonic_in_time():
    events = [make_event("TimeIn", T)]
    became_eligible = False
    for minutes in range(0, 24 * 60, 7):
        result = compute_eligibility(events, T + minutes * MS_PER_MINUTE, has_capture=True)
        if became_eligible:
            assert result.overtime_eligible is True
        became_eligible = became_eligible or result.overtime_eligible
    assert became_eligible is True


def test_overtime_out_needs_overtime_in():
    events = [make_event("TimeIn", T), make_event("Overtime-TimeIn", T + 9 * MS_PER_HOUR + MS_PER_MINUTE)]
    result = compute_eligibility(events, T + 11 * MS_PER_HOUR, has_capture=True)

    assert result.overtime_in_allowed is False
    assert result.overtime_out_allowed is True


def test_completed_overtime_allows_nothing_more():
    events = [
        make_event("TimeIn", T),
        make_event("TimeOut", T + 10 * MS_PER_HOUR),
        make_event("Overtime-TimeIn", T + 10 * MS_PER_HOUR + MS_PER_MINUTE),
        make_event("Overtime-TimeOut", T + 12 * MS_PER_HOUR),
    ]
    result = compute_eligibility(events, T + 13 * MS_PER_HOUR, has_capture=True)

    for event_type in ("TimeIn", "TimeOut", "Overtime-TimeIn", "Overtime-TimeOut"):
        assert is_action_allowed(result, event_type) is False


def test_custom_threshold():
    events = [make_event("TimeIn", T)]
    result = compute_eligibility(events, T + 2 * MS_PER_HOUR, has_capture=True, threshold_hours=2)
    assert result.overtime_eligible is True


def test_hours_worked_is_reported():
    events = [make_event("TimeIn", T)]
    result = compute_eligibility(events, T + 4 * MS_PER_HOUR + 30 * MS_PER_MINUTE, has_capture=False)
    assert result.hours_worked == 4.5


def test_format_countdown():
    remaining = 2 * MS_PER_HOUR + 3 * MS_PER_MINUTE + 4 * MS_PER_SECOND + 999
    assert format_countdown(remaining) == "Overtime available in 2h 3m 4s"
