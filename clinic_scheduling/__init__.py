"""
Clinic appointment scheduling engine.

Pure decision logic for booking appointments: working hours, availability,
conflict detection, multi-session services and the appointment status
lifecycle. Callers supply records and persist the engine's decisions.
"""

from .exceptions import (
    BatchBookingFailedError,
    BreakOverlapError,
    CompletedSessionRebookingError,
    DoctorConflictError,
    DuplicateSessionBookingError,
    HolidayOrNonWorkingDayError,
    InvalidAppointmentDateError,
    InvalidSessionStructureError,
    InvalidStatusForStartError,
    InvalidStatusTransitionError,
    InvalidTimeIntervalError,
    MissingCancellationReasonError,
    MissingCompletionNotesError,
    OutsideWorkingHoursError,
    PatientConflictError,
    SchedulingError,
    SchedulingErrorKind,
    ServiceHasNoSessionsError,
    SessionIdRequiredError,
    SessionNotFoundError,
    SlotLockBusyError,
    TimeSlotBlockedError,
)
from .lifecycle.constants import AppointmentStatus, VALID_TRANSITIONS
from .services.overlap import overlaps
from .services.working_hours import (
    InMemoryWorkingHoursSource,
    WorkingHoursResolver,
    WorkingHoursSource,
    find_schedule_change_conflicts,
    validate_doctor_within_clinic,
)
from .services.availability import AvailabilityComputer, summarize_statuses
from .services.conflicts import ensure_no_conflicts, find_conflicts, resolve_booking_duration
from .services.sessions import SessionBookingValidator, session_progress
from .services.booking import BookingEngine
from .lifecycle.manager import StatusLifecycle
from .services.locks import BookingSlotLock, commit_booking

__version__ = "1.0.0"

__all__ = [
    "AppointmentStatus",
    "AvailabilityComputer",
    "BatchBookingFailedError",
    "BookingEngine",
    "BookingSlotLock",
    "BreakOverlapError",
    "CompletedSessionRebookingError",
    "DoctorConflictError",
    "DuplicateSessionBookingError",
    "HolidayOrNonWorkingDayError",
    "InvalidAppointmentDateError",
    "InMemoryWorkingHoursSource",
    "InvalidSessionStructureError",
    "InvalidStatusForStartError",
    "InvalidStatusTransitionError",
    "InvalidTimeIntervalError",
    "MissingCancellationReasonError",
    "MissingCompletionNotesError",
    "OutsideWorkingHoursError",
    "PatientConflictError",
    "SchedulingError",
    "SchedulingErrorKind",
    "ServiceHasNoSessionsError",
    "SessionBookingValidator",
    "SessionIdRequiredError",
    "SessionNotFoundError",
    "SlotLockBusyError",
    "StatusLifecycle",
    "TimeSlotBlockedError",
    "VALID_TRANSITIONS",
    "WorkingHoursResolver",
    "WorkingHoursSource",
    "commit_booking",
    "ensure_no_conflicts",
    "find_conflicts",
    "find_schedule_change_conflicts",
    "overlaps",
    "resolve_booking_duration",
    "session_progress",
    "summarize_statuses",
    "validate_doctor_within_clinic",
]
