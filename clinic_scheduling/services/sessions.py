"""
Session Booking Validation

Rules for services made of ordered sessions (treatment plans with sequential
visits):
- Structure: at most 50 sessions, non-blank names, positive unique orders,
  durations within [5, 480] minutes
- Booking: session_id required and must exist, no second open booking of the
  same session, no rebooking of a completed session
- Progress: per-session status and completion percentage for a patient
"""

import logging
from typing import List, Optional, Sequence

from ..config import MAX_SESSION_DURATION, MAX_SESSIONS_PER_SERVICE, MIN_SESSION_DURATION
from ..exceptions import (
    BatchBookingFailedError,
    CompletedSessionRebookingError,
    DuplicateSessionBookingError,
    InvalidSessionStructureError,
    SchedulingError,
    ServiceHasNoSessionsError,
    SessionIdRequiredError,
    SessionNotFoundError,
)
from ..lifecycle.constants import OPEN_SESSION_STATUSES, STATUS_PRIORITY, AppointmentStatus
from ..models.scheduling import (
    Appointment,
    Service,
    Session,
    SessionBookingItem,
    SessionProgress,
    SessionProgressItem,
)
from ..utils.time_utils import minutes_to_time

logger = logging.getLogger(__name__)


class SessionBookingValidator:
    """
    Validates session structure and session bookings.

    Pure logic: existing appointments are passed in by the caller.
    """

    def __init__(
        self,
        max_sessions: int = MAX_SESSIONS_PER_SERVICE,
        min_duration: int = MIN_SESSION_DURATION,
        max_duration: int = MAX_SESSION_DURATION,
    ):
        self.max_sessions = max_sessions
        self.min_duration = min_duration
        self.max_duration = max_duration

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def validate_structure(self, sessions: Sequence[Session]) -> None:
        """
        Validate a full session list.

        Check order is fixed for deterministic error reporting: count first,
        then each session, then cross-session uniqueness.

        Raises:
            InvalidSessionStructureError
        """
        logger.debug(f"Validating session structure for {len(sessions)} sessions")

        self.validate_max_session_count(sessions)

        for session in sessions:
            if session.name is not None and not session.name.strip():
                raise InvalidSessionStructureError(
                    "EMPTY_SESSION_NAME",
                    "Session name cannot be empty",
                    session_order=session.order,
                )

            if isinstance(session.order, bool) or not isinstance(session.order, int) or session.order < 1:
                raise InvalidSessionStructureError(
                    "INVALID_SESSION_ORDER",
                    "Session order must be a positive integer",
                    session_order=session.order,
                )

            if session.duration_minutes is not None:
                self.validate_session_duration(session.duration_minutes)

        self.validate_unique_order_numbers(sessions)

    def validate_max_session_count(self, sessions: Sequence[Session]) -> None:
        if len(sessions) > self.max_sessions:
            raise InvalidSessionStructureError(
                "MAX_SESSIONS_EXCEEDED",
                f"A service can have at most {self.max_sessions} sessions",
                count=len(sessions),
                max=self.max_sessions,
            )

    def validate_session_duration(self, duration: int) -> None:
        if duration < self.min_duration or duration > self.max_duration:
            raise InvalidSessionStructureError(
                "INVALID_SESSION_DURATION",
                f"Session duration must be between {self.min_duration} and {self.max_duration} minutes",
                duration=duration,
                min=self.min_duration,
                max=self.max_duration,
            )

    def validate_unique_order_numbers(self, sessions: Sequence[Session]) -> None:
        """Report every duplicated order value, each once, in first-seen order."""
        seen = set()
        duplicates: List[int] = []
        for session in sessions:
            if session.order in seen and session.order not in duplicates:
                duplicates.append(session.order)
            seen.add(session.order)

        if duplicates:
            raise InvalidSessionStructureError(
                "DUPLICATE_SESSION_ORDER",
                "Session order numbers must be unique",
                duplicate_orders=duplicates,
            )

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def validate_session_reference(self, service: Service, session_id: Optional[str]) -> Optional[Session]:
        """
        Resolve the booked session.

        Returns:
            The Session, or None for services without sessions

        Raises:
            SessionIdRequiredError: service has sessions but none was given
            SessionNotFoundError: session_id is not part of the service
        """
        if not service.has_sessions:
            if session_id:
                raise ServiceHasNoSessionsError(service.id)
            return None

        if not session_id:
            raise SessionIdRequiredError(service.id)

        session = service.find_session(session_id)
        if session is None:
            raise SessionNotFoundError(
                service.id,
                session_id,
                available_sessions=[
                    {"id": s.id, "name": s.name, "order": s.order} for s in service.sessions
                ],
            )
        return session

    def check_duplicate_session_booking(
        self,
        patient_id: str,
        service_id: str,
        session_id: str,
        existing: Sequence[Appointment],
    ) -> None:
        """Reject a second open (scheduled/confirmed/in progress) booking of the same session."""
        for appointment in existing:
            if (appointment.patient_id == patient_id
                    and appointment.service_id == service_id
                    and appointment.session_id == session_id
                    and appointment.status in OPEN_SESSION_STATUSES):
                raise DuplicateSessionBookingError(
                    patient_id, service_id, session_id,
                    existing_appointment_id=appointment.id,
                    existing_status=appointment.status.value,
                )

    def check_completed_session_rebooking(
        self,
        patient_id: str,
        service_id: str,
        session_id: str,
        existing: Sequence[Appointment],
    ) -> None:
        """Reject booking a session the patient has already completed."""
        for appointment in existing:
            if (appointment.patient_id == patient_id
                    and appointment.service_id == service_id
                    and appointment.session_id == session_id
                    and appointment.status == AppointmentStatus.COMPLETED):
                raise CompletedSessionRebookingError(
                    patient_id, service_id, session_id,
                    completed_appointment_id=appointment.id,
                )

    def validate_booking(
        self,
        patient_id: str,
        service: Service,
        session_id: Optional[str],
        existing: Sequence[Appointment],
    ) -> Optional[Session]:
        """All booking-time session rules, in order; returns the resolved session."""
        session = self.validate_session_reference(service, session_id)
        if session is None:
            return None

        self.check_duplicate_session_booking(patient_id, service.id, session.id, existing)
        self.check_completed_session_rebooking(patient_id, service.id, session.id, existing)
        return session

    def validate_batch(
        self,
        patient_id: str,
        service: Service,
        bookings: Sequence[SessionBookingItem],
        existing: Sequence[Appointment],
    ) -> List[Session]:
        """
        Validate every item of a batch independently and collect all failures.

        Returns:
            Resolved sessions, in input order

        Raises:
            ServiceHasNoSessionsError: the service has no sessions at all
            BatchBookingFailedError: at least one item failed; nothing may be booked
        """
        if not service.has_sessions:
            raise ServiceHasNoSessionsError(service.id)

        sessions: List[Session] = []
        failures = []
        rejected = set()
        for item in bookings:
            try:
                sessions.append(self.validate_booking(patient_id, service, item.session_id, existing))
            except SchedulingError as exc:
                failures.append(batch_failure(item, exc))
                rejected.add(item.session_id)

        # Two items for the same session are duplicates of each other;
        # sessions already rejected on their own are reported once
        seen = set()
        for item in bookings:
            if item.session_id in seen and item.session_id not in rejected:
                failures.append(batch_failure(item, DuplicateSessionBookingError(
                    patient_id, service.id, item.session_id,
                    existing_appointment_id="",
                    existing_status="requested",
                )))
            seen.add(item.session_id)

        if failures:
            logger.warning(
                f"Batch booking for patient {patient_id} rejected: {len(failures)} failure(s)"
            )
            raise BatchBookingFailedError(len(bookings), failures)

        return sessions


def batch_failure(item: SessionBookingItem, exc: SchedulingError) -> dict:
    """Per-item failure record for BatchBookingFailedError."""
    return {
        "session_id": item.session_id,
        "appointment_date": item.appointment_date.isoformat(),
        "appointment_time": minutes_to_time(item.appointment_time),
        "error": exc.to_dict(),
    }


def session_progress(
    patient_id: str,
    service: Service,
    appointments: Sequence[Appointment],
) -> SessionProgress:
    """
    A patient's progress through all sessions of a service.

    Sessions without an appointment are reported as ``not_booked``. When a
    session has several appointments the highest-priority status wins
    (completed > in_progress > confirmed > scheduled > no_show > cancelled).
    Cancelled and no-show appointments never count as completed.

    Raises:
        ServiceHasNoSessionsError
    """
    if not service.has_sessions:
        raise ServiceHasNoSessionsError(service.id)

    best = {}
    for appointment in appointments:
        if (appointment.patient_id != patient_id
                or appointment.service_id != service.id
                or not appointment.session_id):
            continue
        current = best.get(appointment.session_id)
        if current is None or STATUS_PRIORITY[appointment.status] > STATUS_PRIORITY[current.status]:
            best[appointment.session_id] = appointment

    items = []
    for session in sorted(service.sessions, key=lambda s: s.order):
        appointment = best.get(session.id)
        items.append(SessionProgressItem(
            session_id=session.id,
            session_name=session.name,
            session_order=session.order,
            appointment_id=appointment.id if appointment else None,
            status=appointment.status.value if appointment else "not_booked",
            appointment_date=appointment.appointment_date if appointment else None,
            appointment_time=appointment.start_time if appointment else None,
            is_completed=bool(appointment and appointment.status == AppointmentStatus.COMPLETED),
        ))

    completed = sum(1 for item in items if item.is_completed)
    total = len(items)
    # Half-up rounding: 1 of 8 completed reports 13%
    percentage = int(completed * 100 / total + 0.5) if total else 0

    logger.debug(f"Session progress for patient {patient_id}: {completed}/{total} ({percentage}%)")

    return SessionProgress(
        patient_id=patient_id,
        service_id=service.id,
        service_name=service.name,
        total_sessions=total,
        completed_sessions=completed,
        completion_percentage=percentage,
        sessions=items,
    )
