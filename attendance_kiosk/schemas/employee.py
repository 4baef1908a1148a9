"""
Employee Schemas and the PIN gate / screen handoff payloads
"""
import re
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator

from .attendance import AttendanceType


class EmployeeBase(BaseModel):
    em_name: str


class EmployeeInDB(EmployeeBase):
    model_config = ConfigDict(from_attributes=True)

    em_id: str
    em_created_at: datetime
    em_updated_at: Optional[datetime] = None

    @field_validator('em_updated_at', 'em_created_at', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        """
        Fix datetime timezone format from PostgreSQL
        PostgreSQL returns: '2025-10-01 09:17:39.587802+00'
        Pydantic expects: '2025-10-01 09:17:39.587802+00:00'
        """
        if v == '' or v is None:
            return None

        if isinstance(v, str):
            match = re.search(r'([+-]\d{2})$', v)
            if match:
                v = v + ':00'

        return v


class Employee(EmployeeInDB):
    pass


class PinVerifyRequest(BaseModel):
    """Request schema for the PIN gate"""
    pin: str
    attendance_type: AttendanceType = "On-Site"


class HandoffPayload(BaseModel):
    """State handed from the employee list to the profile screen"""
    employee_id: str
    employee_name: str
    attendance_type: AttendanceType
    timestamp: datetime
    date: str
    time: str


class HandoffResponse(BaseModel):
    """Response schema for a successful PIN check"""
    handoff_token: str
    expires_in: int
    payload: HandoffPayload
    message: str
