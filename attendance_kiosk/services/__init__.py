from .handoff_service import HandoffService
from .employee_service import EmployeeService
from .geocoding_service import GeocodingService
from .record_store import RecordStore
from .attendance_service import AttendanceService

__all__ = [
    "HandoffService",
    "EmployeeService",
    "GeocodingService",
    "RecordStore",
    "AttendanceService"
]
