from .employee import Employee
from .attendance_record import AttendanceRecord

__all__ = [
    "Employee",
    "AttendanceRecord"
]
