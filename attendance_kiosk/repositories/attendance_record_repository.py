"""
Attendance Record Repository - Data access layer for attendance record leaves
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from atams.db import BaseRepository
from attendance_kiosk.models.attendance_record import AttendanceRecord


class AttendanceRecordRepository(BaseRepository[AttendanceRecord]):
    def __init__(self):
        super().__init__(AttendanceRecord)

    def get_partition(self, db: Session, employee_id: str, session_key: str) -> List[AttendanceRecord]:
        """Get every record under attendance/{employee_id}/{session_key} using ORM"""
        return db.query(AttendanceRecord).filter(
            AttendanceRecord.ar_employee_id == employee_id,
            AttendanceRecord.ar_session_key == session_key
        ).order_by(AttendanceRecord.ar_timestamp.asc()).all()

    def get_leaf(
        self,
        db: Session,
        employee_id: str,
        session_key: str,
        event_type: str
    ) -> Optional[AttendanceRecord]:
        """Get the single record at attendance/{employee_id}/{session_key}/{event_type}"""
        return db.query(AttendanceRecord).filter(
            AttendanceRecord.ar_employee_id == employee_id,
            AttendanceRecord.ar_session_key == session_key,
            AttendanceRecord.ar_event_type == event_type
        ).first()

    def create_record(self, db: Session, record_data: dict) -> Optional[AttendanceRecord]:
        """
        Create attendance record and return the created object.
        Returns None if the leaf already exists (unique constraint).
        """
        try:
            db_record = AttendanceRecord(**record_data)
            db.add(db_record)
            db.commit()
            db.refresh(db_record)
            return db_record
        except IntegrityError:
            db.rollback()
            return None
