"""
Attendance Record Model - One leaf per attendance/{employee}/{session}/{event_type}
"""
from sqlalchemy import (
    Column, BigInteger, Integer, String, Text, DateTime, Float, ForeignKey, UniqueConstraint
)
from sqlalchemy.sql import func
from atams.db import Base


class AttendanceRecord(Base):
    """Attendance Record model for kiosk schema - Table: kiosk.attendance_records"""
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint(
            "ar_employee_id", "ar_session_key", "ar_event_type",
            name="uq_attendance_records_leaf"
        ),
        {"schema": "kiosk"},
    )

    ar_id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True, autoincrement=True)
    ar_employee_id = Column(String(50), ForeignKey("kiosk.employees.em_id"), nullable=False, index=True)
    ar_session_key = Column(String(10), nullable=False, index=True)  # M-D-YYYY of the session's TimeIn
    ar_event_type = Column(String(20), nullable=False)  # TimeIn, TimeOut, Overtime-TimeIn, Overtime-TimeOut
    ar_time = Column(String(20), nullable=False)  # Display time, e.g. "2:05:09 PM"
    ar_timestamp = Column(BigInteger, nullable=False)  # Epoch milliseconds
    ar_image = Column(Text, nullable=False)  # Captured photo (data URL)
    ar_filename = Column(String(255), nullable=True)
    ar_attendance_type = Column(String(10), nullable=False, default="On-Site")  # 'On-Site' or 'WFH'
    ar_latitude = Column(Float, nullable=True)
    ar_longitude = Column(Float, nullable=True)
    ar_accuracy = Column(Float, nullable=True)  # Meters
    ar_location_timestamp = Column(BigInteger, nullable=True)  # Epoch milliseconds of the fix
    ar_address = Column(Text, nullable=True)  # Reverse-geocoded address
    ar_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
