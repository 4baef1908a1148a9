"""
Attendance Endpoints - back-office reads of attendance/{employee}/{session}/{event_type}
"""
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from attendance_kiosk.db.session import get_db
from attendance_kiosk.services.attendance_service import AttendanceService
from attendance_kiosk.schemas import EventType, DataResponse
from attendance_kiosk.api.deps import require_auth, require_min_role_level
from attendance_kiosk.core.config import settings
from atams.encryption import encrypt_response_data

router = APIRouter()
attendance_service = AttendanceService()

SESSION_KEY_PATTERN = r"^\d{1,2}-\d{1,2}-\d{4}$"


@router.get(
    "/{employee_id}/{session_key}",
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def get_session_records(
    employee_id: str,
    session_key: str = Path(..., pattern=SESSION_KEY_PATTERN, description="Session date, M-D-YYYY"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Get every record of one employee session

    **Authorization:**
    - Requires role level >= 50 (Admin or above)
    """
    records = attendance_service.get_partition(db, employee_id, session_key)

    response = DataResponse(
        success=True,
        message="Attendance records retrieved successfully",
        data=records
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/{employee_id}/{session_key}/{event_type}",
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def get_record(
    employee_id: str,
    event_type: EventType,
    session_key: str = Path(..., pattern=SESSION_KEY_PATTERN, description="Session date, M-D-YYYY"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Get a single attendance record

    **Authorization:**
    - Requires role level >= 50 (Admin or above)
    """
    record = attendance_service.get_record(db, employee_id, session_key, event_type)

    response = DataResponse(
        success=True,
        message="Attendance record retrieved successfully",
        data=record
    )

    return encrypt_response_data(response, settings)
