"""
Error kinds raised by the scheduling engine.

Every failure is semantic, never transient: callers should not retry. Each
exception carries a stable ``kind`` plus structured ``details`` so the caller
can render a message in any language.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class SchedulingErrorKind(str, Enum):
    """Stable identifiers for every rule the engine can reject."""
    OUTSIDE_WORKING_HOURS = "outside_working_hours"
    HOLIDAY_OR_NON_WORKING_DAY = "holiday_or_non_working_day"
    BREAK_OVERLAP = "break_overlap"
    TIME_SLOT_BLOCKED = "time_slot_blocked"
    DOCTOR_CONFLICT = "doctor_conflict"
    PATIENT_CONFLICT = "patient_conflict"
    SESSION_ID_REQUIRED = "session_id_required"
    SESSION_NOT_FOUND = "session_not_found"
    SERVICE_HAS_NO_SESSIONS = "service_has_no_sessions"
    DUPLICATE_SESSION_BOOKING = "duplicate_session_booking"
    COMPLETED_SESSION_REBOOKING = "completed_session_rebooking"
    INVALID_SESSION_STRUCTURE = "invalid_session_structure"
    BATCH_BOOKING_FAILED = "batch_booking_failed"
    INVALID_STATUS_TRANSITION = "invalid_status_transition"
    INVALID_STATUS_FOR_START = "invalid_status_for_start"
    MISSING_CANCELLATION_REASON = "missing_cancellation_reason"
    MISSING_COMPLETION_NOTES = "missing_completion_notes"
    INVALID_TIME_INTERVAL = "invalid_time_interval"
    INVALID_APPOINTMENT_DATE = "invalid_appointment_date"


class SchedulingError(Exception):
    """Base class for all engine rejections."""

    kind: SchedulingErrorKind

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form for transport layers."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


class HolidayOrNonWorkingDayError(SchedulingError):
    """Raised when the date has no bookable window at all."""

    kind = SchedulingErrorKind.HOLIDAY_OR_NON_WORKING_DAY

    def __init__(self, on_date: str, holiday: bool = False):
        self.on_date = on_date
        self.holiday = holiday
        super().__init__(
            f"No working hours available on {on_date} (holiday or non-working day)",
            date=on_date,
            holiday=holiday,
        )


class OutsideWorkingHoursError(SchedulingError):
    """Raised when an appointment starts or ends outside the effective window."""

    kind = SchedulingErrorKind.OUTSIDE_WORKING_HOURS

    def __init__(self, start_time: str, end_time: str, opening_time: str, closing_time: str):
        super().__init__(
            f"Appointment {start_time}-{end_time} is outside working hours "
            f"({opening_time} - {closing_time})",
            start_time=start_time,
            end_time=end_time,
            opening_time=opening_time,
            closing_time=closing_time,
        )


class BreakOverlapError(SchedulingError):
    """Raised when an appointment intersects the doctor's break."""

    kind = SchedulingErrorKind.BREAK_OVERLAP

    def __init__(self, start_time: str, end_time: str, break_start: str, break_end: str):
        super().__init__(
            f"Appointment conflicts with break time ({break_start} - {break_end})",
            start_time=start_time,
            end_time=end_time,
            break_start=break_start,
            break_end=break_end,
        )


class TimeSlotBlockedError(SchedulingError):
    """Raised when the doctor has an ad hoc block (leave, maintenance) over the slot."""

    kind = SchedulingErrorKind.TIME_SLOT_BLOCKED

    def __init__(self, start_time: str, end_time: str, block_id: Optional[str] = None,
                 reason: Optional[str] = None):
        super().__init__(
            "This time slot is blocked or unavailable",
            start_time=start_time,
            end_time=end_time,
            block_id=block_id,
            reason=reason,
        )


class DoctorConflictError(SchedulingError):
    """Raised when the doctor already has an overlapping booking."""

    kind = SchedulingErrorKind.DOCTOR_CONFLICT

    def __init__(self, conflicting_appointment_id: Optional[str], message: Optional[str] = None,
                 **details: Any):
        self.conflicting_appointment_id = conflicting_appointment_id
        super().__init__(
            message or f"Doctor already has appointment {conflicting_appointment_id} at this time",
            conflicting_appointment_id=conflicting_appointment_id,
            **details,
        )


class SlotLockBusyError(DoctorConflictError):
    """
    Raised when another request holds the doctor/date booking lock.

    Reported as a doctor conflict: the caller cannot distinguish a lost race
    from a conflict found by the regular check, and does not need to.
    """

    def __init__(self, doctor_id: str, on_date: str):
        super().__init__(
            None,
            f"Another booking for doctor {doctor_id} on {on_date} is in progress",
            doctor_id=doctor_id,
            date=on_date,
        )


class PatientConflictError(SchedulingError):
    """Raised when the patient already has an overlapping booking."""

    kind = SchedulingErrorKind.PATIENT_CONFLICT

    def __init__(self, conflicting_appointment_id: str, message: Optional[str] = None,
                 **details: Any):
        self.conflicting_appointment_id = conflicting_appointment_id
        super().__init__(
            message or f"Patient already has appointment {conflicting_appointment_id} at this time",
            conflicting_appointment_id=conflicting_appointment_id,
            **details,
        )


class SessionIdRequiredError(SchedulingError):
    kind = SchedulingErrorKind.SESSION_ID_REQUIRED

    def __init__(self, service_id: str):
        super().__init__(
            f"Service {service_id} has sessions; a session_id is required",
            service_id=service_id,
        )


class SessionNotFoundError(SchedulingError):
    kind = SchedulingErrorKind.SESSION_NOT_FOUND

    def __init__(self, service_id: str, session_id: str, available_sessions: Optional[List[dict]] = None):
        super().__init__(
            f"Session {session_id} does not exist in service {service_id}",
            service_id=service_id,
            session_id=session_id,
            available_sessions=available_sessions or [],
        )


class ServiceHasNoSessionsError(SessionNotFoundError):
    """Raised when session-specific logic is applied to a service without sessions."""

    kind = SchedulingErrorKind.SERVICE_HAS_NO_SESSIONS

    def __init__(self, service_id: str):
        SchedulingError.__init__(
            self,
            f"Service {service_id} has no sessions",
            service_id=service_id,
        )


class DuplicateSessionBookingError(SchedulingError):
    kind = SchedulingErrorKind.DUPLICATE_SESSION_BOOKING

    def __init__(self, patient_id: str, service_id: str, session_id: str,
                 existing_appointment_id: str, existing_status: str):
        super().__init__(
            f"Patient {patient_id} already has an active booking for session {session_id}",
            patient_id=patient_id,
            service_id=service_id,
            session_id=session_id,
            existing_appointment_id=existing_appointment_id,
            existing_appointment_status=existing_status,
        )


class CompletedSessionRebookingError(SchedulingError):
    kind = SchedulingErrorKind.COMPLETED_SESSION_REBOOKING

    def __init__(self, patient_id: str, service_id: str, session_id: str,
                 completed_appointment_id: str):
        super().__init__(
            f"Patient {patient_id} has already completed session {session_id}",
            patient_id=patient_id,
            service_id=service_id,
            session_id=session_id,
            completed_appointment_id=completed_appointment_id,
        )


class InvalidSessionStructureError(SchedulingError):
    """
    Raised when a service's session list breaks a structural rule.

    ``reason`` is one of MAX_SESSIONS_EXCEEDED, EMPTY_SESSION_NAME,
    INVALID_SESSION_ORDER, INVALID_SESSION_DURATION, DUPLICATE_SESSION_ORDER.
    """

    kind = SchedulingErrorKind.INVALID_SESSION_STRUCTURE

    def __init__(self, reason: str, message: str, **details: Any):
        self.reason = reason
        super().__init__(message, reason=reason, **details)


class BatchBookingFailedError(SchedulingError):
    """Raised when any item of a batch session booking fails; nothing is booked."""

    kind = SchedulingErrorKind.BATCH_BOOKING_FAILED

    def __init__(self, total_requested: int, failures: List[dict]):
        self.failures = failures
        super().__init__(
            f"Batch booking failed: {len(failures)} of {total_requested} sessions rejected",
            total_requested=total_requested,
            success_count=0,
            failure_count=len(failures),
            failures=failures,
        )


class InvalidStatusTransitionError(SchedulingError):
    kind = SchedulingErrorKind.INVALID_STATUS_TRANSITION

    def __init__(self, current_status: str, new_status: str, allowed: Optional[List[str]] = None):
        self.current_status = current_status
        self.new_status = new_status
        super().__init__(
            f"Invalid status transition: {current_status} -> {new_status}",
            current_status=current_status,
            new_status=new_status,
            allowed_transitions=allowed or [],
        )


class InvalidStatusForStartError(SchedulingError):
    kind = SchedulingErrorKind.INVALID_STATUS_FOR_START

    def __init__(self, current_status: str):
        super().__init__(
            "Can only start scheduled or confirmed appointments",
            current_status=current_status,
        )


class MissingCancellationReasonError(SchedulingError):
    kind = SchedulingErrorKind.MISSING_CANCELLATION_REASON

    def __init__(self):
        super().__init__("Cancellation reason is required")


class MissingCompletionNotesError(SchedulingError):
    kind = SchedulingErrorKind.MISSING_COMPLETION_NOTES

    def __init__(self, min_length: int = 1):
        super().__init__(
            "Completion notes are required when marking appointment as completed",
            min_length=min_length,
        )


class InvalidTimeIntervalError(SchedulingError):
    """Raised for degenerate input such as a non-positive slot duration."""

    kind = SchedulingErrorKind.INVALID_TIME_INTERVAL

    def __init__(self, message: str, **details: Any):
        super().__init__(message, **details)


class InvalidAppointmentDateError(SchedulingError):
    """
    Raised when the requested start lies outside the booking horizon.

    ``reason`` is PAST_DATE or TOO_FAR_IN_ADVANCE.
    """

    kind = SchedulingErrorKind.INVALID_APPOINTMENT_DATE

    PAST_DATE = "PAST_DATE"
    TOO_FAR_IN_ADVANCE = "TOO_FAR_IN_ADVANCE"

    def __init__(self, reason: str, on_date: str, now: str, message: Optional[str] = None):
        self.reason = reason
        super().__init__(
            message or (
                "Cannot book appointments in the past" if reason == self.PAST_DATE
                else "Cannot book appointments more than one year in advance"
            ),
            reason=reason,
            date=on_date,
            now=now,
        )
