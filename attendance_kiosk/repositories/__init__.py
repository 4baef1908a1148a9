from .employee_repository import EmployeeRepository
from .attendance_record_repository import AttendanceRecordRepository

__all__ = [
    "EmployeeRepository",
    "AttendanceRecordRepository"
]
