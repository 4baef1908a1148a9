import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from attendance_kiosk.repositories.attendance_record_repository import AttendanceRecordRepository
from attendance_kiosk.services.record_store import RecordStore, record_path
from tests.conftest import manila_ms


def event_data(timestamp, image="data:image/jpeg;base64,AAAA"):
    return {
        "ar_time": "8:00:00 AM",
        "ar_timestamp": timestamp,
        "ar_image": image,
        "ar_attendance_type": "On-Site",
    }


class FailingPartitionRepository(AttendanceRecordRepository):
    """Repository whose reads fail for one partition"""

    def __init__(self, failing_key):
        super().__init__()
        self.failing_key = failing_key

    def get_partition(self, db, employee_id, session_key):
        if session_key == self.failing_key:
            raise OperationalError("SELECT", {}, Exception("connection reset"))
        return super().get_partition(db, employee_id, session_key)


def test_record_path():
    assert record_path("EMP003", "10-19-2026") == "attendance/EMP003/10-19-2026"
    assert record_path("EMP003", "10-19-2026", "TimeIn") == "attendance/EMP003/10-19-2026/TimeIn"


@pytest.mark.asyncio
async def test_put_then_fetch(db_session, employees):
    store = RecordStore()
    record = await store.put(db_session, "EMP003", "10-19-2026", "TimeIn", event_data(manila_ms(2026, 10, 19, 8)))

    assert record is not None
    assert record.ar_session_key == "10-19-2026"
    assert record.ar_event_type == "TimeIn"

    result = await store.fetch(db_session, "EMP003", "10-19-2026")
    assert result.ok is True
    assert [r.ar_id for r in result.records] == [record.ar_id]


@pytest.mark.asyncio
async def test_put_existing_leaf_returns_none(db_session, employees):
    store = RecordStore()
    first = await store.put(db_session, "EMP003", "10-19-2026", "TimeIn", event_data(manila_ms(2026, 10, 19, 8)))
    second = await store.put(db_session, "EMP003", "10-19-2026", "TimeIn", event_data(manila_ms(2026, 10, 19, 9)))

    assert first is not None
    assert second is None

    result = await store.fetch(db_session, "EMP003", "10-19-2026")
    assert len(result.records) == 1
    assert result.records[0].ar_timestamp == manila_ms(2026, 10, 19, 8)


@pytest.mark.asyncio
async def test_load_partitions_joins_every_partition(db_session, employees):
    store = RecordStore()
    await store.put(db_session, "EMP003", "10-18-2026", "TimeIn", event_data(manila_ms(2026, 10, 18, 16)))
    await store.put(db_session, "EMP003", "10-19-2026", "TimeIn", event_data(manila_ms(2026, 10, 19, 8)))
    await store.put(db_session, "EMP001", "10-19-2026", "TimeIn", event_data(manila_ms(2026, 10, 19, 8)))

    load = await store.load_partitions(db_session, "EMP003", ["10-18-2026", "10-19-2026"])

    assert load.complete is True
    assert [result.date_key for result in load.results] == ["10-18-2026", "10-19-2026"]
    assert len(load.records) == 2
    assert load.errors == []


@pytest.mark.asyncio
async def test_failed_partition_is_reported_not_raised(db_session, employees):
    store = RecordStore(repo=FailingPartitionRepository("10-18-2026"))
    await store.put(db_session, "EMP003", "10-19-2026", "TimeIn", event_data(manila_ms(2026, 10, 19, 8)))

    load = await store.load_partitions(db_session, "EMP003", ["10-18-2026", "10-19-2026"])

    assert load.complete is False
    assert load.results[0].ok is False
    assert "connection reset" in load.errors[0]
    assert load.results[1].ok is True


@pytest.mark.asyncio
async def test_subscription_receives_partition_after_put(db_session, employees):
    store = RecordStore()
    pushed = []
    subscription = store.subscribe("EMP003", "10-19-2026", pushed.append)

    await store.put(db_session, "EMP003", "10-19-2026", "TimeIn", event_data(manila_ms(2026, 10, 19, 8)))
    await store.put(db_session, "EMP003", "10-19-2026", "TimeOut", event_data(manila_ms(2026, 10, 19, 17)))

    assert [len(records) for records in pushed] == [1, 2]
    assert subscription.active is True
    assert subscription.date_key == "10-19-2026"


@pytest.mark.asyncio
async def test_other_partitions_do_not_notify(db_session, employees):
    store = RecordStore()
    pushed = []
    store.subscribe("EMP003", "10-19-2026", pushed.append)

    await store.put(db_session, "EMP003", "10-20-2026", "TimeIn", event_data(manila_ms(2026, 10, 20, 8)))
    await store.put(db_session, "EMP001", "10-19-2026", "TimeIn", event_data(manila_ms(2026, 10, 19, 8)))

    assert pushed == []


@pytest.mark.asyncio
async def test_cancelled_subscription_is_released(db_session, employees):
    store = RecordStore()
    pushed = []
    subscription = store.subscribe("EMP003", "10-19-2026", pushed.append)
    assert store.subscriber_count("EMP003", "10-19-2026") == 1

    subscription.cancel()
    subscription.cancel()

    assert subscription.active is False
    assert store.subscriber_count("EMP003", "10-19-2026") == 0

    await store.put(db_session, "EMP003", "10-19-2026", "TimeIn", event_data(manila_ms(2026, 10, 19, 8)))
    assert pushed == []


@pytest.mark.asyncio
async def test_load_partitions_is_awaitable_concurrently(db_session, employees):
    store = RecordStore()
    await store.put(db_session, "EMP003", "10-19-2026", "TimeIn", event_data(manila_ms(2026, 10, 19, 8)))

    first, second = await asyncio.gather(
        store.load_partitions(db_session, "EMP003", ["10-19-2026"]),
        store.load_partitions(db_session, "EMP003", ["10-19-2026"]),
    )
    assert len(first.records) == len(second.records) == 1


class RecordingRepository(AttendanceRecordRepository):
    def __init__(self):
        super().__init__()
        self.calls = []

    def get_partition(self, db, employee_id, session_key):
        self.calls.append(session_key)
        return super().get_partition(db, employee_id, session_key)


@pytest.mark.asyncio
async def test_partitions_are_read_in_order_on_one_session(db_session, employees):
    repo = RecordingRepository()
    store = RecordStore(repo=repo)

    load = await store.load_partitions(db_session, "EMP003", ["10-18-2026", "10-19-2026", "10-20-2026"])

    assert repo.calls == ["10-18-2026", "10-19-2026", "10-20-2026"]
    assert [result.date_key for result in load.results] == repo.calls
    assert load.complete is True
