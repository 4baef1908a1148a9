"""
Record Store Adapter - asynchronous boundary over attendance record leaves

Records are addressed as attendance/{employee_id}/{session_key}/{event_type}.
Reads return an explicit StoreResult instead of raising; partition reads for
a session are joined with asyncio.gather so callers only see a PartitionLoad
once every partition has answered. Reads share the caller's Session and run
synchronously, so the partitions are queried one after another.
"""
import asyncio
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from atams.logging import get_logger
from attendance_kiosk.repositories.attendance_record_repository import AttendanceRecordRepository
from attendance_kiosk.schemas.attendance import AttendanceRecord

logger = get_logger(__name__)

SubscriptionCallback = Callable[[List[AttendanceRecord]], None]


def record_path(employee_id: str, session_key: str, event_type: Optional[str] = None) -> str:
    path = f"attendance/{employee_id}/{session_key}"
    if event_type:
        path = f"{path}/{event_type}"
    return path


class StoreResult(BaseModel):
    """Outcome of reading one date partition"""
    date_key: str
    ok: bool = True
    records: List[AttendanceRecord] = []
    error: Optional[str] = None


class PartitionLoad(BaseModel):
    """Joined outcome of reading several date partitions"""
    results: List[StoreResult]

    @property
    def complete(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def records(self) -> List[AttendanceRecord]:
        return [record for result in self.results for record in result.records]

    @property
    def errors(self) -> List[str]:
        return [result.error for result in self.results if not result.ok]


class Subscription:
    """Handle for a live partition subscription; cancel() releases it"""

    def __init__(self, store: "RecordStore", key: Tuple[str, str], callback: SubscriptionCallback):
        self._store = store
        self._key = key
        self._callback = callback
        self.active = True

    @property
    def date_key(self) -> str:
        return self._key[1]

    def cancel(self) -> None:
        if self.active:
            self._store._unsubscribe(self._key, self._callback)
            self.active = False


class RecordStore:
    def __init__(self, repo: Optional[AttendanceRecordRepository] = None) -> None:
        self.repo = repo or AttendanceRecordRepository()
        self._subscribers: Dict[Tuple[str, str], List[SubscriptionCallback]] = {}

    async def fetch(self, db: Session, employee_id: str, date_key: str) -> StoreResult:
        """Read every record under attendance/{employee_id}/{date_key}"""
        try:
            rows = self.repo.get_partition(db, employee_id, date_key)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Failed to read {record_path(employee_id, date_key)}: {str(e)}",
                extra={'extra_data': {'employee_id': employee_id, 'date_key': date_key}}
            )
            return StoreResult(date_key=date_key, ok=False, error=str(e))

        return StoreResult(
            date_key=date_key,
            records=[AttendanceRecord.model_validate(row) for row in rows]
        )

    async def load_partitions(
        self,
        db: Session,
        employee_id: str,
        date_keys: Sequence[str]
    ) -> PartitionLoad:
        """
        Read several partitions and wait until all of them have returned

        The reads run in order on the one Session; gather only joins their
        results into a single PartitionLoad.
        """
        results = await asyncio.gather(
            *(self.fetch(db, employee_id, date_key) for date_key in date_keys)
        )
        return PartitionLoad(results=list(results))

    async def put(
        self,
        db: Session,
        employee_id: str,
        session_key: str,
        event_type: str,
        event: dict
    ) -> Optional[AttendanceRecord]:
        """
        Write one leaf and notify subscribers of its partition

        Returns:
            The stored record, or None when the leaf already exists

        Raises:
            SQLAlchemyError: If the store rejects the write
        """
        record_data = {
            **event,
            "ar_employee_id": employee_id,
            "ar_session_key": session_key,
            "ar_event_type": event_type,
        }
        created = self.repo.create_record(db, record_data)
        if created is None:
            logger.info(f"Leaf already exists: {record_path(employee_id, session_key, event_type)}")
            return None

        record = AttendanceRecord.model_validate(created)
        logger.info(
            f"Stored {record_path(employee_id, session_key, event_type)}",
            extra={'extra_data': {'ar_id': record.ar_id, 'ar_timestamp': record.ar_timestamp}}
        )
        await self._notify(db, employee_id, session_key)
        return record

    def subscribe(self, employee_id: str, date_key: str, callback: SubscriptionCallback) -> Subscription:
        """Call callback with the full partition every time it changes"""
        key = (employee_id, date_key)
        self._subscribers.setdefault(key, []).append(callback)
        return Subscription(self, key, callback)

    def subscriber_count(self, employee_id: str, date_key: str) -> int:
        return len(self._subscribers.get((employee_id, date_key), []))

    def _unsubscribe(self, key: Tuple[str, str], callback: SubscriptionCallback) -> None:
        callbacks = self._subscribers.get(key, [])
        if callback in callbacks:
            callbacks.remove(callback)
        if not callbacks:
            self._subscribers.pop(key, None)

    async def _notify(self, db: Session, employee_id: str, date_key: str) -> None:
        callbacks = list(self._subscribers.get((employee_id, date_key), []))
        if not callbacks:
            return

        result = await self.fetch(db, employee_id, date_key)
        if not result.ok:
            return

        for callback in callbacks:
            callback(result.records)
