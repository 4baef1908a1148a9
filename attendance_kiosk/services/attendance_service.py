"""
Attendance Service - Main business logic for the profile screen
"""
from typing import List, NamedTuple, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from atams.logging import get_logger
from attendance_kiosk.core.clock import date_key, display_time, now_ms, to_local_datetime
from attendance_kiosk.core.config import settings
from attendance_kiosk.repositories.attendance_record_repository import AttendanceRecordRepository
from attendance_kiosk.schemas.attendance import (
    AttendanceRecord,
    Location,
    RecordAttendanceRequest,
    RecordAttendanceResponse,
    ProfileStateResponse
)
from attendance_kiosk.schemas.employee import HandoffPayload
from attendance_kiosk.services.duplicate_guard import duplicate_message, is_duplicate
from attendance_kiosk.services.eligibility_engine import compute_eligibility, is_action_allowed
from attendance_kiosk.services.geocoding_service import GeocodingService
from attendance_kiosk.services.record_store import RecordStore, record_path
from attendance_kiosk.services.session_resolver import (
    events_in_session,
    previous_session_key,
    resolve_current_session,
    session_key_for,
)
from atams.exceptions import (
    NotFoundException,
    BadRequestException,
    ConflictException,
    ServiceUnavailableException
)

logger = get_logger(__name__)

LOAD_ERROR_NOTICE = "Error loading attendance records."
NO_CAPTURE_MESSAGE = "Please capture an image first."
OVERTIME_NOT_ALLOWED_MESSAGE = (
    "Overtime can only be recorded after 9 hours from Time In and with a new capture."
)
ACTION_NOT_ALLOWED_MESSAGE = "Action not allowed at this time."
WRITE_ERROR_MESSAGE = "Error recording attendance. Please try again."


class LoadedSession(NamedTuple):
    session_key: str
    date_keys: List[str]
    events: List[AttendanceRecord]
    notice: Optional[str]


class AttendanceService:
    def __init__(
        self,
        store: Optional[RecordStore] = None,
        geocoder: Optional[GeocodingService] = None
    ) -> None:
        self.store = store or RecordStore()
        self.geocoder = geocoder or GeocodingService()
        self.record_repo = AttendanceRecordRepository()
        self.tz = settings.kiosk_tz
        self.threshold_hours = settings.OVERTIME_THRESHOLD_HOURS
        self.carryover_hours = settings.SESSION_CARRYOVER_HOURS

    def partition_keys(self, now: int) -> List[str]:
        """Yesterday's and today's partitions, so overtime past midnight is found"""
        return [previous_session_key(now, self.tz), session_key_for(now, self.tz)]

    async def load_session(self, db: Session, employee_id: str, now: int) -> LoadedSession:
        """
        Load the employee's current session

        Both date partitions must have answered before the session is
        resolved. A failed read falls back to an empty event set with a
        notice so the screen stays usable.
        """
        date_keys = self.partition_keys(now)
        load = await self.store.load_partitions(db, employee_id, date_keys)

        events = load.records
        notice = None
        if not load.complete:
            logger.warning(
                f"Attendance partitions unavailable for {employee_id}",
                extra={'extra_data': {'errors': load.errors}}
            )
            events = []
            notice = LOAD_ERROR_NOTICE

        session_key = resolve_current_session(
            events, now, self.tz, self.carryover_hours, self.threshold_hours
        )
        session_events = events_in_session(events, session_key, self.tz)
        return LoadedSession(session_key, date_keys, session_events, notice)

    def build_profile_state(
        self,
        handoff: HandoffPayload,
        loaded: LoadedSession,
        has_capture: bool,
        now: int
    ) -> ProfileStateResponse:
        return ProfileStateResponse(
            employee_id=handoff.employee_id,
            employee_name=handoff.employee_name,
            attendance_type=handoff.attendance_type,
            session_key=loaded.session_key,
            records=loaded.events,
            eligibility=compute_eligibility(loaded.events, now, has_capture, self.threshold_hours),
            server_time=to_local_datetime(now, self.tz),
            notice=loaded.notice
        )

    async def get_profile_state(
        self,
        db: Session,
        handoff: HandoffPayload,
        has_capture: bool = False,
        now: Optional[int] = None
    ) -> ProfileStateResponse:
        """Current session records and which buttons are actionable"""
        now = now if now is not None else now_ms()
        loaded = await self.load_session(db, handoff.employee_id, now)
        return self.build_profile_state(handoff, loaded, has_capture, now)

    async def _resolve_location(self, location: Optional[Location], now: int) -> Location:
        """Fall back to a zeroed placeholder when the kiosk has no position"""
        if location is None:
            return Location(latitude=0, longitude=0, accuracy=0, timestamp=now)

        if location.address is None:
            address = await self.geocoder.reverse(location.latitude, location.longitude)
            location = location.model_copy(update={"address": address})

        return location

    async def record_attendance(
        self,
        db: Session,
        handoff: HandoffPayload,
        request: RecordAttendanceRequest,
        now: Optional[int] = None
    ) -> RecordAttendanceResponse:
        """
        Record one attendance event in the current session

        Process:
        1. Require a photo captured in this visit
        2. Load the session (yesterday + today partitions)
        3. Duplicate guard
        4. Eligibility check
        5. Resolve location (placeholder / reverse geocode)
        6. Write attendance/{employee}/{session}/{event_type}

        Raises:
            BadRequestException: No capture or action not allowed yet
            ConflictException: Event type already recorded in this session
            ServiceUnavailableException: Store rejected the write
        """
        now = now if now is not None else now_ms()
        employee_id = handoff.employee_id
        event_type = request.event_type

        if not request.image:
            raise BadRequestException(NO_CAPTURE_MESSAGE)

        loaded = await self.load_session(db, employee_id, now)
        session_key = loaded.session_key

        if is_duplicate(loaded.events, session_key, event_type, self.tz):
            raise ConflictException(
                duplicate_message(event_type),
                details={"event_type": event_type, "session_key": session_key}
            )

        eligibility = compute_eligibility(loaded.events, now, True, self.threshold_hours)
        if not is_action_allowed(eligibility, event_type):
            if event_type.startswith("Overtime"):
                raise BadRequestException(
                    OVERTIME_NOT_ALLOWED_MESSAGE,
                    details={"overtime_status_text": eligibility.overtime_status_text}
                )
            raise BadRequestException(ACTION_NOT_ALLOWED_MESSAGE)

        location = await self._resolve_location(request.location, now)
        local_now = to_local_datetime(now, self.tz)

        event = {
            "ar_time": display_time(local_now),
            "ar_timestamp": now,
            "ar_image": request.image,
            "ar_filename": f"{employee_id}_{date_key(local_now.date())}_{event_type}_{now}.jpg",
            "ar_attendance_type": handoff.attendance_type,
            "ar_latitude": location.latitude,
            "ar_longitude": location.longitude,
            "ar_accuracy": location.accuracy,
            "ar_location_timestamp": location.timestamp,
            "ar_address": location.address,
        }

        try:
            record = await self.store.put(db, employee_id, session_key, event_type, event)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Error saving attendance: {str(e)}",
                exc_info=True,
                extra={'extra_data': {'path': record_path(employee_id, session_key, event_type)}}
            )
            raise ServiceUnavailableException(WRITE_ERROR_MESSAGE)

        if record is None:
            raise ConflictException(
                duplicate_message(event_type),
                details={"event_type": event_type, "session_key": session_key}
            )

        # The capture is consumed by this record
        session_events = loaded.events + [record]

        return RecordAttendanceResponse(
            record=record,
            path=record_path(employee_id, session_key, event_type),
            message=f"{event_type} recorded successfully!",
            eligibility=compute_eligibility(session_events, now, False, self.threshold_hours)
        )

    def get_partition(self, db: Session, employee_id: str, session_key: str) -> List[AttendanceRecord]:
        """Get every record under attendance/{employee_id}/{session_key}"""
        records = self.record_repo.get_partition(db, employee_id, session_key)
        return [AttendanceRecord.model_validate(r) for r in records]

    def get_record(self, db: Session, employee_id: str, session_key: str, event_type: str) -> AttendanceRecord:
        record = self.record_repo.get_leaf(db, employee_id, session_key, event_type)
        if not record:
            raise NotFoundException("Attendance record not found")
        return AttendanceRecord.model_validate(record)
