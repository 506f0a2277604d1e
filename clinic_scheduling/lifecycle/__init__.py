"""
Appointment Lifecycle Package

Status state machine for appointments.

Exports:
- AppointmentStatus: Enum of appointment states
- VALID_TRANSITIONS: Status transition rules dictionary
- TERMINAL_STATUSES: States with no outgoing transitions
- INACTIVE_STATUSES: States that no longer occupy a time slot

StatusLifecycle lives in ``clinic_scheduling.lifecycle.manager`` (it depends on
the models, which depend on these constants).
"""

from .constants import (
    AppointmentStatus,
    INACTIVE_STATUSES,
    OPEN_SESSION_STATUSES,
    STARTABLE_STATUSES,
    STATUS_PRIORITY,
    TERMINAL_STATUSES,
    VALID_TRANSITIONS,
)

__all__ = [
    "AppointmentStatus",
    "INACTIVE_STATUSES",
    "OPEN_SESSION_STATUSES",
    "STARTABLE_STATUSES",
    "STATUS_PRIORITY",
    "TERMINAL_STATUSES",
    "VALID_TRANSITIONS",
]
