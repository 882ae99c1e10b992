"""
Factories y dobles de prueba compartidos.
"""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

from queuelens.domain.entities.queue_record import QueueRecord, QueueStatus
from queuelens.infrastructure.cache.memory_cache_store import InMemoryCacheStore

UTC = timezone.utc
FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)  # lunes

_counter = {"n": 0}


def make_record(
    created_at: datetime,
    status: QueueStatus = QueueStatus.COMPLETED,
    service_minutes: Optional[float] = None,
    wait: Optional[float] = None,
    service_id: Optional[str] = "svc-1",
    service_name: Optional[str] = "Haircut",
    amount: Optional[float] = None,
    employee_id: Optional[str] = None,
    department_id: Optional[str] = None,
    record_id: Optional[str] = None,
) -> QueueRecord:
    """Crea un QueueRecord; service_minutes define completed_at."""
    _counter["n"] += 1
    completed_at = None
    if service_minutes is not None:
        completed_at = created_at + timedelta(minutes=service_minutes)
    return QueueRecord(
        id=record_id or f"q-{_counter['n']}",
        status=status,
        created_at=created_at,
        service_id=service_id,
        service_name=service_name,
        completed_at=completed_at,
        actual_wait_time=wait,
        total_amount=amount,
        employee_id=employee_id,
        department_id=department_id,
    )


def january_records():
    """10 registros de enero 2024: 6 completados, 2 cancelados, 1 no-show, 1 esperando."""
    day = lambda d, h=10: datetime(2024, 1, d, h, 0, tzinfo=UTC)  # noqa: E731
    return [
        make_record(day(2), QueueStatus.COMPLETED, service_minutes=20, wait=10, amount=50),
        make_record(day(3), QueueStatus.COMPLETED, service_minutes=30, wait=20, amount=50),
        make_record(day(4), QueueStatus.COMPLETED, service_minutes=10, wait=5, amount=25),
        make_record(day(5), QueueStatus.COMPLETED, service_minutes=40, wait=15, amount=75),
        make_record(day(8), QueueStatus.COMPLETED, service_minutes=20, wait=10, amount=50),
        make_record(day(9), QueueStatus.COMPLETED, service_minutes=30, wait=0, amount=50),
        make_record(day(10), QueueStatus.CANCELLED, wait=5),
        make_record(day(11), QueueStatus.CANCELLED),
        make_record(day(12), QueueStatus.NO_SHOW),
        make_record(day(20), QueueStatus.WAITING, wait=12),
    ]


class FakeClock:
    """Reloj controlable para TTL y ventanas del resumen."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FailingRecordRepository:
    """Fuente de registros que siempre falla."""

    def __init__(self, exc: Exception = None):
        self.exc = exc or ConnectionError("db down")
        self.call_count = 0

    async def get_records(self, shop_id, date_from, date_to, filters=None):
        self.call_count += 1
        raise self.exc


class FailingCacheStore:
    """Cache Store que falla en todas las operaciones."""

    async def get(self, key):
        raise ConnectionError("cache down")

    async def set(self, key, value, ttl_seconds):
        raise ConnectionError("cache down")

    async def delete(self, key):
        raise ConnectionError("cache down")

    async def add_to_set(self, key, member, ttl_seconds):
        raise ConnectionError("cache down")

    async def set_members(self, key):
        raise ConnectionError("cache down")

    async def remove_from_set(self, key, *members):
        raise ConnectionError("cache down")


class YieldingCacheStore(InMemoryCacheStore):
    """Store en memoria que cede el event loop en cada operación, como Redis."""

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key, value, ttl_seconds):
        await asyncio.sleep(0)
        await super().set(key, value, ttl_seconds)

    async def delete(self, key):
        await asyncio.sleep(0)
        await super().delete(key)

    async def add_to_set(self, key, member, ttl_seconds):
        await asyncio.sleep(0)
        await super().add_to_set(key, member, ttl_seconds)

    async def set_members(self, key):
        await asyncio.sleep(0)
        return await super().set_members(key)

    async def remove_from_set(self, key, *members):
        await asyncio.sleep(0)
        await super().remove_from_set(key, *members)
