"""
Lifecycle Constants Module

Defines the appointment status enum and the transition table that is the single
source of truth for which status changes are legal.
"""

from enum import Enum


class AppointmentStatus(str, Enum):
    """
    Appointment lifecycle states.

    Normal flow:
    SCHEDULED -> CONFIRMED -> IN_PROGRESS -> COMPLETED

    Alternative paths:
    - CANCELLED: from SCHEDULED or CONFIRMED, requires a reason
    - NO_SHOW: from SCHEDULED or CONFIRMED
    """
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Status Transition Rules
# Terminal states (COMPLETED, CANCELLED, NO_SHOW) have empty transition lists
VALID_TRANSITIONS = {
    AppointmentStatus.SCHEDULED: [
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW
    ],
    AppointmentStatus.CONFIRMED: [
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW
    ],
    AppointmentStatus.IN_PROGRESS: [
        AppointmentStatus.COMPLETED
    ],
    AppointmentStatus.COMPLETED: [],  # Terminal state
    AppointmentStatus.CANCELLED: [],  # Terminal state
    AppointmentStatus.NO_SHOW: []  # Terminal state
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in VALID_TRANSITIONS.items() if not targets
)

# Appointments in these states no longer occupy their time slot
INACTIVE_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW})

# Preconditions for the start operation
STARTABLE_STATUSES = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED})

# Statuses that still hold a session for the patient
OPEN_SESSION_STATUSES = frozenset({
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.IN_PROGRESS,
})

# When a session has several appointments, the highest priority one is reported
STATUS_PRIORITY = {
    AppointmentStatus.COMPLETED: 6,
    AppointmentStatus.IN_PROGRESS: 5,
    AppointmentStatus.CONFIRMED: 4,
    AppointmentStatus.SCHEDULED: 3,
    AppointmentStatus.NO_SHOW: 2,
    AppointmentStatus.CANCELLED: 1,
}
