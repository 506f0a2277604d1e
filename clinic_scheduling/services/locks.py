"""Distributed locking around the validate-then-write booking section."""

import asyncio
import inspect
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Callable, Optional, Sequence

from ..config import BOOKING_LOCK_RETRIES, BOOKING_LOCK_TTL_MS
from ..exceptions import SlotLockBusyError
from ..models.scheduling import Appointment, BookingRequest, Service

logger = logging.getLogger(__name__)

# Lua script for atomic compare-and-delete
COMPARE_AND_DELETE = """
if redis.call("get", KEYS[1]) == ARGV[1] then
  return redis.call("del", KEYS[1])
else
  return 0
end
"""


class BookingSlotLock:
    """Token-based per-(doctor, date) lock held while a booking is validated and stored."""

    def __init__(self, redis_client, ttl_ms: int = BOOKING_LOCK_TTL_MS,
                 retries: int = BOOKING_LOCK_RETRIES, backoff_seconds: float = 0.05):
        """
        Args:
            redis_client: Synchronous Redis client (redis-py)
            ttl_ms: Lock TTL in milliseconds
            retries: Attempts after the first failed SET
            backoff_seconds: Linear backoff step between attempts
        """
        self.redis = redis_client
        self.ttl_ms = ttl_ms
        self.retries = retries
        self.backoff_seconds = backoff_seconds

    @staticmethod
    def key_for(doctor_id: str, on_date: date) -> str:
        return f"booking_lock:{doctor_id}:{on_date.isoformat()}"

    @asynccontextmanager
    async def acquire(self, doctor_id: str, on_date: date):
        """
        Hold the doctor/date lock for the duration of the block.

        Raises:
            SlotLockBusyError: If lock cannot be acquired after retries
        """
        lock_key = self.key_for(doctor_id, on_date)
        token = str(uuid.uuid4())
        acquired = False

        try:
            # NX = only if not exists, PX = TTL in ms
            acquired = self.redis.set(lock_key, token, nx=True, px=self.ttl_ms)

            if not acquired:
                for i in range(self.retries):
                    await asyncio.sleep(self.backoff_seconds * (i + 1))
                    acquired = self.redis.set(lock_key, token, nx=True, px=self.ttl_ms)
                    if acquired:
                        break

                if not acquired:
                    logger.warning(f"Booking lock busy: {lock_key}")
                    raise SlotLockBusyError(doctor_id, on_date.isoformat())

            logger.debug(f"Acquired booking lock: {lock_key} (token: {token[:8]})")
            yield

        finally:
            if acquired:
                try:
                    # Only delete if we still own the lock
                    self.redis.eval(COMPARE_AND_DELETE, 1, lock_key, token)
                    logger.debug(f"Released booking lock: {lock_key}")
                except Exception as e:
                    logger.warning(f"Failed to release lock {lock_key}: {e}")


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def commit_booking(
    lock: BookingSlotLock,
    engine,
    request: BookingRequest,
    service: Service,
    load_existing: Callable[[BookingRequest], Sequence[Appointment]],
    persist: Callable[[Appointment], Optional[Appointment]],
) -> Appointment:
    """
    Validate and store a booking while holding the doctor/date lock.

    Existing bookings are reloaded inside the lock so that a booking committed
    by a concurrent request is seen by the conflict check. ``load_existing``
    and ``persist`` may be plain or async callables.

    Returns:
        The stored appointment (what ``persist`` returned, or the draft)

    Raises:
        SlotLockBusyError: lock held elsewhere for too long
        SchedulingError: the booking was rejected
    """
    async with lock.acquire(request.doctor_id, request.appointment_date):
        existing = await _resolve(load_existing(request))
        appointment = engine.propose_booking(request, service, existing)
        stored = await _resolve(persist(appointment))

    return stored if stored is not None else appointment
