from .employee import Employee, PinVerifyRequest, HandoffPayload, HandoffResponse
from .attendance import (
    EventType,
    AttendanceType,
    Location,
    AttendanceRecordBase,
    AttendanceRecord,
    Eligibility,
    RecordAttendanceRequest,
    ProfileStateResponse,
    RecordAttendanceResponse
)
from .common import DataResponse, PaginationResponse

__all__ = [
    # Employee schemas
    "Employee",
    "PinVerifyRequest",
    "HandoffPayload",
    "HandoffResponse",
    # Attendance schemas
    "EventType",
    "AttendanceType",
    "Location",
    "AttendanceRecordBase",
    "AttendanceRecord",
    "Eligibility",
    "RecordAttendanceRequest",
    "ProfileStateResponse",
    "RecordAttendanceResponse",
    # Common schemas
    "DataResponse",
    "PaginationResponse"
]
