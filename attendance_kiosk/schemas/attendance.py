"""
Attendance Schemas for records, eligibility and profile state
"""
import re
from typing import List, Optional, Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

EventType = Literal["TimeIn", "TimeOut", "Overtime-TimeIn", "Overtime-TimeOut"]
AttendanceType = Literal["On-Site", "WFH"]


class Location(BaseModel):
    """Geolocation fix reported by the kiosk browser"""
    latitude: float
    longitude: float
    accuracy: float = 0
    timestamp: Optional[int] = None  # Epoch milliseconds
    address: Optional[str] = None


class AttendanceRecordBase(BaseModel):
    ar_employee_id: str
    ar_session_key: Optional[str] = None
    ar_event_type: EventType
    ar_time: str
    ar_timestamp: int
    ar_image: str
    ar_filename: Optional[str] = None
    ar_attendance_type: AttendanceType = "On-Site"
    ar_latitude: Optional[float] = None
    ar_longitude: Optional[float] = None
    ar_accuracy: Optional[float] = None
    ar_location_timestamp: Optional[int] = None
    ar_address: Optional[str] = None


class AttendanceRecordInDB(AttendanceRecordBase):
    model_config = ConfigDict(from_attributes=True)

    ar_id: int
    ar_created_at: datetime

    @field_validator('ar_created_at', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        """Fix datetime timezone format from PostgreSQL"""
        if v == '' or v is None:
            return None

        if isinstance(v, str):
            pattern = r'([+-]\d{2})$'
            match = re.search(pattern, v)
            if match:
                v = v + ':00'

        return v


class AttendanceRecord(AttendanceRecordInDB):
    pass


class Eligibility(BaseModel):
    """Which attendance actions are currently actionable"""
    time_in_allowed: bool = False
    time_out_allowed: bool = False
    overtime_in_allowed: bool = False
    overtime_out_allowed: bool = False
    overtime_eligible: bool = False
    overtime_status_text: str
    overtime_section_visible: bool = False
    hours_worked: Optional[float] = None
    remaining_ms: Optional[int] = None  # Until the overtime threshold, while counting down


# Request/Response schemas for API endpoints
class RecordAttendanceRequest(BaseModel):
    """Request schema for recording an attendance event"""
    event_type: EventType
    image: Optional[str] = Field(None, description="Captured photo as a data URL")
    location: Optional[Location] = None


class ProfileStateResponse(BaseModel):
    """Response schema for the profile screen"""
    employee_id: str
    employee_name: str
    attendance_type: AttendanceType
    session_key: str
    records: List[AttendanceRecord]
    eligibility: Eligibility
    server_time: datetime
    notice: Optional[str] = None


class RecordAttendanceResponse(BaseModel):
    """Response schema for a recorded attendance event"""
    record: AttendanceRecord
    path: str
    message: str
    eligibility: Eligibility
