"""
Profile Live Service - per-connection state behind the live profile channel

Holds the loaded session, the capture flag reported by the kiosk and the
store subscriptions for the loaded partitions. Eligibility is recomputed from
this state on every clock tick; the session is reloaded whenever the store
pushes a change or the calendar date moves on.
"""
import asyncio
from typing import List, Optional

from sqlalchemy.orm import Session

from attendance_kiosk.schemas.attendance import ProfileStateResponse
from attendance_kiosk.schemas.employee import HandoffPayload
from attendance_kiosk.services.attendance_service import AttendanceService, LoadedSession
from attendance_kiosk.services.record_store import Subscription

TICK = "tick"
STORE_CHANGED = "store"
CAPTURE_CHANGED = "capture"
CLOSED = "closed"


class ProfileLiveSession:
    def __init__(self, service: AttendanceService, db: Session, handoff: HandoffPayload) -> None:
        self.service = service
        self.db = db
        self.handoff = handoff
        self.has_capture = False
        self.loaded: Optional[LoadedSession] = None
        self.changes: asyncio.Queue = asyncio.Queue()
        self._subscriptions: List[Subscription] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    async def refresh(self, now: int) -> None:
        """Reload the session and subscribe to the partitions it was loaded from"""
        self._loop = asyncio.get_running_loop()
        self.loaded = await self.service.load_session(self.db, self.handoff.employee_id, now)

        subscribed = [subscription.date_key for subscription in self._subscriptions]
        if subscribed != self.loaded.date_keys:
            self.close()
            self._subscriptions = [
                self.service.store.subscribe(self.handoff.employee_id, date_key, self._on_store_change)
                for date_key in self.loaded.date_keys
            ]

    def is_stale(self, now: int) -> bool:
        return self.loaded is None or self.loaded.date_keys != self.service.partition_keys(now)

    def snapshot(self, now: int) -> ProfileStateResponse:
        return self.service.build_profile_state(self.handoff, self.loaded, self.has_capture, now)

    def set_capture(self, has_capture: bool) -> None:
        self.has_capture = has_capture
        self.changes.put_nowait(CAPTURE_CHANGED)

    def mark_closed(self) -> None:
        self.changes.put_nowait(CLOSED)

    async def next_change(self, tick_seconds: float) -> str:
        try:
            return await asyncio.wait_for(self.changes.get(), timeout=tick_seconds)
        except asyncio.TimeoutError:
            return TICK

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []

    def _on_store_change(self, records) -> None:
        # Store writes may complete on another thread or loop
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self.changes.put_nowait, STORE_CHANGED)
