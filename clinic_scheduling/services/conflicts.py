"""
Conflict Detection

Finds existing bookings that overlap a proposed one for the same doctor or the
same patient. Read-only: callers reject the booking when anything is returned,
or call ensure_no_conflicts to get the structured error directly.
"""

import logging
from typing import List, Optional, Sequence

from ..exceptions import DoctorConflictError, PatientConflictError
from ..models.scheduling import Appointment, Conflict, ConflictKind, ProposedBooking, Service
from .overlap import overlaps

logger = logging.getLogger(__name__)


def resolve_booking_duration(
    service: Service,
    session_id: Optional[str] = None,
    requested_minutes: Optional[int] = None,
) -> int:
    """
    Effective duration of a booking, in minutes.

    For session bookings the session's own duration wins, falling back to the
    service default. Without a session, an explicit request overrides the
    service default.
    """
    if session_id:
        session = service.find_session(session_id)
        if session is not None and session.duration_minutes:
            return session.duration_minutes
        return service.duration_minutes
    return requested_minutes or service.duration_minutes


def _describe(kind: ConflictKind, appointment: Appointment) -> str:
    who = "Doctor" if kind == ConflictKind.DOCTOR_BUSY else "Patient"
    return (
        f"{who} already has appointment {appointment.id} "
        f"from {appointment.start_time} to {appointment.end_time}"
    )


def find_conflicts(
    proposed: ProposedBooking,
    existing: Sequence[Appointment],
    exclude_appointment_id: Optional[str] = None,
) -> List[Conflict]:
    """
    List every active appointment overlapping the proposed booking.

    Doctor conflicts are listed before patient conflicts. Cancelled and
    no-show appointments are ignored, as is ``exclude_appointment_id`` (the
    appointment being rescheduled).

    Args:
        proposed: Doctor, patient, date, start and duration of the new booking
        existing: Candidate appointments (any doctor/patient/date)
        exclude_appointment_id: Appointment to skip

    Returns:
        Conflicts, empty when the slot is free
    """
    interval = proposed.interval
    candidates = [
        a for a in existing
        if a.is_active
        and a.appointment_date == proposed.appointment_date
        and a.id != exclude_appointment_id
    ]

    conflicts: List[Conflict] = []
    queries = (
        (ConflictKind.DOCTOR_BUSY, lambda a: a.doctor_id == proposed.doctor_id),
        (ConflictKind.PATIENT_BUSY, lambda a: a.patient_id == proposed.patient_id),
    )
    for kind, matches in queries:
        for appointment in candidates:
            if matches(appointment) and overlaps(interval, appointment.interval):
                conflicts.append(Conflict(
                    kind=kind,
                    conflicting_appointment_id=appointment.id,
                    message=_describe(kind, appointment),
                    appointment_date=appointment.appointment_date,
                    start_time=appointment.start_time,
                    end_time=appointment.end_time,
                ))

    if conflicts:
        logger.debug(
            f"Found {len(conflicts)} conflict(s) for doctor {proposed.doctor_id} "
            f"on {proposed.appointment_date}"
        )
    return conflicts


def raise_for_conflicts(conflicts: Sequence[Conflict]) -> None:
    """Raise the structured error for the first conflict, if any."""
    if not conflicts:
        return

    first = conflicts[0]
    details = {
        "appointment_date": first.appointment_date.isoformat(),
        "start_time": first.start_time,
        "end_time": first.end_time,
        "conflict_count": len(conflicts),
    }
    if first.kind == ConflictKind.DOCTOR_BUSY:
        raise DoctorConflictError(first.conflicting_appointment_id, first.message, **details)
    raise PatientConflictError(first.conflicting_appointment_id, first.message, **details)


def ensure_no_conflicts(
    proposed: ProposedBooking,
    existing: Sequence[Appointment],
    exclude_appointment_id: Optional[str] = None,
) -> None:
    """find_conflicts, raising DoctorConflictError/PatientConflictError on the first hit."""
    raise_for_conflicts(find_conflicts(proposed, existing, exclude_appointment_id))
