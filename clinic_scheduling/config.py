"""
Engine Configuration
Centralized configuration for scheduling rules and the booking lock backend
"""
import os

from dotenv import load_dotenv
from redis import Redis

load_dotenv()

# Availability / booking defaults (minutes)
DEFAULT_SLOT_MINUTES = int(os.getenv("SCHEDULING_DEFAULT_SLOT_MINUTES", "30"))
DEFAULT_DURATION_MINUTES = int(os.getenv("SCHEDULING_DEFAULT_DURATION_MINUTES", "30"))

# Multi-session service rules
MAX_SESSIONS_PER_SERVICE = int(os.getenv("SCHEDULING_MAX_SESSIONS", "50"))
MIN_SESSION_DURATION = int(os.getenv("SCHEDULING_MIN_SESSION_DURATION", "5"))
MAX_SESSION_DURATION = int(os.getenv("SCHEDULING_MAX_SESSION_DURATION", "480"))

# Lifecycle rules
MIN_DOCTOR_NOTES_LENGTH = int(os.getenv("SCHEDULING_MIN_DOCTOR_NOTES_LENGTH", "10"))

# Redis advisory lock around validate-then-write
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")
BOOKING_LOCK_TTL_MS = int(os.getenv("BOOKING_LOCK_TTL_MS", "5000"))
BOOKING_LOCK_RETRIES = int(os.getenv("BOOKING_LOCK_RETRIES", "8"))


def get_redis_client() -> Redis:
    """
    Get configured Redis client for booking locks

    Returns:
        Redis: Configured Redis client instance
    """
    return Redis.from_url(
        REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
        health_check_interval=30
    )
