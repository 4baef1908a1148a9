"""
Kiosk Endpoints - Home, employee list / PIN gate and profile screens
"""
import asyncio
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from atams.encryption import encrypt_response_data
from atams.exceptions import UnauthorizedException
from atams.logging import get_logger
from attendance_kiosk.api.deps import handoff_service, require_handoff
from attendance_kiosk.core.clock import now_ms
from attendance_kiosk.core.config import settings
from attendance_kiosk.db.session import get_db
from attendance_kiosk.schemas import (
    PinVerifyRequest,
    HandoffPayload,
    HandoffResponse,
    AttendanceType,
    RecordAttendanceRequest,
    RecordAttendanceResponse,
    DataResponse,
    PaginationResponse
)
from attendance_kiosk.services.attendance_service import AttendanceService
from attendance_kiosk.services.employee_service import EmployeeService
from attendance_kiosk.services.profile_live_service import CLOSED, STORE_CHANGED, ProfileLiveSession

logger = get_logger(__name__)

router = APIRouter()
employee_service = EmployeeService()
attendance_service = AttendanceService()

ATTENDANCE_TYPES = ["On-Site", "WFH"]


@router.get(
    "/attendance-types",
    response_model=DataResponse[List[str]],
    status_code=status.HTTP_200_OK
)
async def list_attendance_types():
    """Attendance types offered on the home screen"""
    return DataResponse(
        success=True,
        message="Attendance types retrieved successfully",
        data=ATTENDANCE_TYPES
    )


@router.get(
    "/employees",
    status_code=status.HTTP_200_OK
)
async def list_employees(
    attendance_type: AttendanceType = Query("On-Site", description="On-Site or WFH"),
    search: str = Query("", description="Search by employee name or ID"),
    db: Session = Depends(get_db)
):
    """
    Get employees for the selection screen

    **Filtering:**
    - search: case-insensitive match on name or ID
    - WFH lists only employees enabled for WFH attendance
    """
    employees = employee_service.list_employees(db, attendance_type=attendance_type, search=search)

    response = PaginationResponse(
        success=True,
        message="Employees retrieved successfully",
        data=employees,
        total=len(employees),
        page=1,
        size=len(employees),
        pages=1
    )

    return encrypt_response_data(response, settings)


@router.post(
    "/employees/{em_id}/pin",
    response_model=DataResponse[HandoffResponse],
    status_code=status.HTTP_200_OK
)
async def verify_pin(
    em_id: str,
    request: PinVerifyRequest,
    db: Session = Depends(get_db)
):
    """
    PIN gate in front of the profile screen

    **Response:**
    - handoff_token: send as X-Kiosk-Handoff to the profile endpoints

    **Errors:**
    - 400: PIN is not 4 digits or does not match
    - 403: WFH requested for an employee not enabled for it
    - 404: Unknown employee
    """
    handoff = employee_service.verify_pin(db, em_id, request)

    return DataResponse(
        success=True,
        message=handoff.message,
        data=handoff
    )


@router.get(
    "/profile",
    status_code=status.HTTP_200_OK
)
async def get_profile(
    has_capture: bool = Query(False, description="A photo was captured during this visit"),
    handoff: HandoffPayload = Depends(require_handoff),
    db: Session = Depends(get_db)
):
    """
    Current session records, button states and overtime notice

    **Authentication:**
    - Requires X-Kiosk-Handoff header; missing or invalid redirects home (401)
    """
    state = await attendance_service.get_profile_state(db, handoff, has_capture=has_capture)

    response = DataResponse(
        success=True,
        message=state.notice or "Profile retrieved successfully",
        data=state
    )

    return encrypt_response_data(response, settings)


@router.post(
    "/profile/records",
    response_model=DataResponse[RecordAttendanceResponse],
    status_code=status.HTTP_201_CREATED
)
async def record_attendance(
    request: RecordAttendanceRequest,
    handoff: HandoffPayload = Depends(require_handoff),
    db: Session = Depends(get_db)
):
    """
    Record TimeIn, TimeOut, Overtime-TimeIn or Overtime-TimeOut

    **Errors:**
    - 400: No captured image, or action not allowed yet
    - 409: Event type already recorded in this session
    - 503: Record store rejected the write
    """
    result = await attendance_service.record_attendance(db, handoff, request)

    return DataResponse(
        success=True,
        message=result.message,
        data=result
    )


async def _receive_capture_state(websocket: WebSocket, live: ProfileLiveSession) -> None:
    """Apply {"has_capture": bool} messages until the kiosk disconnects"""
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except (ValueError, KeyError, TypeError) as e:
                # Malformed or binary frame; keep listening
                logger.warning(
                    f"Ignored malformed live profile message: {str(e)}",
                    extra={'extra_data': {'employee_id': live.handoff.employee_id}}
                )
                continue
            if isinstance(message, dict) and "has_capture" in message:
                live.set_capture(bool(message["has_capture"]))
    except WebSocketDisconnect:
        pass
    finally:
        live.mark_closed()


@router.websocket("/profile/live")
async def profile_live(
    websocket: WebSocket,
    handoff: Optional[str] = Query(None, description="Handoff token from the PIN gate"),
    db: Session = Depends(get_db)
):
    """
    Live profile state

    Pushes ProfileStateResponse on connect, on every clock tick, whenever the
    kiosk reports a capture change and whenever the session's records change.
    """
    try:
        payload = handoff_service.read(handoff)
    except UnauthorizedException as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return

    await websocket.accept()
    live = ProfileLiveSession(attendance_service, db, payload)
    receiver = asyncio.create_task(_receive_capture_state(websocket, live))

    try:
        await live.refresh(now_ms())
        while True:
            now = now_ms()
            if live.is_stale(now):
                await live.refresh(now)
            await websocket.send_json(jsonable_encoder(live.snapshot(now)))

            change = await live.next_change(settings.CLOCK_TICK_SECONDS)
            if change == CLOSED:
                break
            if change == STORE_CHANGED:
                await live.refresh(now_ms())
    except WebSocketDisconnect:
        logger.info(f"Live profile channel dropped for {payload.employee_id}")
    finally:
        receiver.cancel()
        for result in await asyncio.gather(receiver, return_exceptions=True):
            if isinstance(result, Exception):
                logger.error(
                    f"Live profile receiver failed: {str(result)}",
                    exc_info=result,
                    extra={'extra_data': {'employee_id': payload.employee_id}}
                )
        live.close()
