"""
Lifecycle Manager - status transitions for appointments.

This module provides the StatusLifecycle class that governs how an
appointment's status may evolve:
- Transition validation against VALID_TRANSITIONS
- Per-transition data requirements (cancellation reason, completion notes)
- Lifecycle stamps (cancelled_at, actual_start_time, actual_end_time, ...)
- Rescheduling with working-hours and conflict re-validation

Every operation returns a new Appointment and never mutates its input. Each
status change appends exactly one StatusHistoryEntry. Persisting the result is
the caller's job.
"""

import logging
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence, Union

from ..config import MIN_DOCTOR_NOTES_LENGTH
from ..exceptions import (
    InvalidStatusForStartError,
    InvalidStatusTransitionError,
    InvalidTimeIntervalError,
    MissingCancellationReasonError,
    MissingCompletionNotesError,
)
from ..models.scheduling import (
    Appointment,
    ProposedBooking,
    RescheduleEntry,
    StatusHistoryEntry,
    utc_now,
)
from ..services.conflicts import ensure_no_conflicts
from ..services.horizon import validate_not_past_date
from ..services.working_hours import WorkingHoursResolver
from ..utils.time_utils import coerce_minutes, minutes_to_time
from .constants import (
    STARTABLE_STATUSES,
    TERMINAL_STATUSES,
    VALID_TRANSITIONS,
    AppointmentStatus,
)

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class StatusLifecycle:
    """
    Appointment status state machine.

    Usage:
        lifecycle = StatusLifecycle(resolver)

        appointment = lifecycle.confirm(appointment, changed_by="user-1")
        appointment = lifecycle.start(appointment, changed_by="doctor-1")
        appointment = lifecycle.complete(appointment, "Treatment done", changed_by="doctor-1")

        # Reschedule re-validates working hours and conflicts
        appointment = lifecycle.reschedule(appointment, new_date, "14:00", existing)
    """

    def __init__(
        self,
        resolver: Optional[WorkingHoursResolver] = None,
        clock: Callable[[], datetime] = utc_now,
        min_doctor_notes_length: int = MIN_DOCTOR_NOTES_LENGTH,
    ):
        """
        Args:
            resolver: Needed for reschedule only
            clock: Returns the current time; injectable for tests
            min_doctor_notes_length: Minimum length of notes for conclude()
        """
        self.resolver = resolver
        self._clock = clock
        self.min_doctor_notes_length = min_doctor_notes_length

    # ------------------------------------------------------------------
    # Graph
    # ------------------------------------------------------------------

    @staticmethod
    def request_transition(current: AppointmentStatus, new: AppointmentStatus) -> bool:
        """Whether ``current -> new`` is an edge of the lifecycle graph."""
        return AppointmentStatus(new) in VALID_TRANSITIONS[AppointmentStatus(current)]

    @staticmethod
    def allowed_transitions(current: AppointmentStatus) -> List[AppointmentStatus]:
        return list(VALID_TRANSITIONS[AppointmentStatus(current)])

    @staticmethod
    def is_terminal(status: AppointmentStatus) -> bool:
        return AppointmentStatus(status) in TERMINAL_STATUSES

    def validate_transition(self, current: AppointmentStatus, new: AppointmentStatus) -> None:
        """
        Raises:
            InvalidStatusTransitionError: If transition is not allowed
        """
        if not self.request_transition(current, new):
            raise InvalidStatusTransitionError(
                AppointmentStatus(current).value,
                AppointmentStatus(new).value,
                allowed=[s.value for s in self.allowed_transitions(current)],
            )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def change_status(
        self,
        appointment: Appointment,
        new_status: AppointmentStatus,
        changed_by: Optional[str] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        """
        Generic status change with the data requirements of the target state.

        Args:
            appointment: Current appointment
            new_status: Target status
            changed_by: Acting user
            reason: Required when cancelling
            notes: Required when completing

        Returns:
            New Appointment with the status, stamps and one history entry applied

        Raises:
            InvalidStatusTransitionError, MissingCancellationReasonError,
            MissingCompletionNotesError
        """
        new_status = AppointmentStatus(new_status)
        self.validate_transition(appointment.status, new_status)

        now = self._clock()
        updates = {}

        if new_status == AppointmentStatus.CANCELLED:
            if _is_blank(reason):
                raise MissingCancellationReasonError()
            reason = reason.strip()
            updates.update(
                cancellation_reason=reason,
                cancelled_at=now,
                cancelled_by=changed_by,
            )
        elif new_status == AppointmentStatus.COMPLETED:
            if _is_blank(notes):
                raise MissingCompletionNotesError()
            notes = notes.strip()
            updates.update(
                completion_notes=notes,
                actual_end_time=now,
                completed_by=changed_by,
            )
        elif new_status == AppointmentStatus.IN_PROGRESS:
            updates.update(actual_start_time=now, started_by=changed_by)

        return self._apply(appointment, new_status, now, changed_by, reason or notes, updates)

    def confirm(self, appointment: Appointment, changed_by: Optional[str] = None) -> Appointment:
        return self.change_status(appointment, AppointmentStatus.CONFIRMED, changed_by)

    def start(self, appointment: Appointment, changed_by: Optional[str] = None) -> Appointment:
        """
        Mark the appointment in progress and record the actual start time.

        A scheduled appointment is confirmed first, so the history shows both
        steps and the status never leaves the lifecycle graph.

        Raises:
            InvalidStatusForStartError: status is not scheduled or confirmed
        """
        if appointment.status not in STARTABLE_STATUSES:
            raise InvalidStatusForStartError(appointment.status.value)

        if appointment.status == AppointmentStatus.SCHEDULED:
            appointment = self._apply(
                appointment, AppointmentStatus.CONFIRMED, self._clock(), changed_by,
                "Confirmed on start", {},
            )
        return self.change_status(appointment, AppointmentStatus.IN_PROGRESS, changed_by)

    def complete(self, appointment: Appointment, completion_notes: Optional[str],
                 changed_by: Optional[str] = None) -> Appointment:
        return self.change_status(
            appointment, AppointmentStatus.COMPLETED, changed_by, notes=completion_notes
        )

    def conclude(self, appointment: Appointment, doctor_notes: Optional[str],
                 changed_by: Optional[str] = None) -> Appointment:
        """Complete with doctor notes of at least ``min_doctor_notes_length`` characters."""
        if _is_blank(doctor_notes) or len(doctor_notes.strip()) < self.min_doctor_notes_length:
            raise MissingCompletionNotesError(min_length=self.min_doctor_notes_length)
        return self.complete(appointment, doctor_notes, changed_by)

    def cancel(self, appointment: Appointment, reason: Optional[str],
               changed_by: Optional[str] = None) -> Appointment:
        return self.change_status(appointment, AppointmentStatus.CANCELLED, changed_by, reason=reason)

    def mark_no_show(self, appointment: Appointment, changed_by: Optional[str] = None,
                     reason: Optional[str] = None) -> Appointment:
        return self.change_status(appointment, AppointmentStatus.NO_SHOW, changed_by, reason=reason)

    # ------------------------------------------------------------------
    # Reschedule
    # ------------------------------------------------------------------

    def reschedule(
        self,
        appointment: Appointment,
        new_date: date,
        new_time: Union[str, int],
        existing: Sequence[Appointment],
        changed_by: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Appointment:
        """
        Move a non-terminal appointment to a new date/time.

        The new slot is validated against working hours and conflicts (the
        appointment itself excluded) before anything changes. The status is
        kept; a RescheduleEntry is appended.

        Raises:
            InvalidStatusTransitionError: appointment is in a terminal state
            InvalidAppointmentDateError: new date is before today
            InvalidTimeIntervalError: new time is not a valid time of day
            HolidayOrNonWorkingDayError, OutsideWorkingHoursError,
            BreakOverlapError, TimeSlotBlockedError,
            DoctorConflictError, PatientConflictError
        """
        if self.is_terminal(appointment.status):
            raise InvalidStatusTransitionError(
                appointment.status.value, appointment.status.value, allowed=[]
            )
        if self.resolver is None:
            raise RuntimeError("Rescheduling requires a working hours resolver")

        validate_not_past_date(new_date, self._clock())
        try:
            new_minutes = coerce_minutes(new_time)
        except ValueError as e:
            raise InvalidTimeIntervalError(str(e), new_time=new_time) from e

        self.resolver.validate_slot(
            appointment.doctor_id,
            appointment.clinic_id,
            new_date,
            new_minutes,
            appointment.duration_minutes,
        )

        proposed = ProposedBooking(
            doctor_id=appointment.doctor_id,
            patient_id=appointment.patient_id,
            appointment_date=new_date,
            appointment_time=new_minutes,
            duration_minutes=appointment.duration_minutes,
        )
        ensure_no_conflicts(proposed, existing, exclude_appointment_id=appointment.id)

        now = self._clock()
        entry = RescheduleEntry(
            previous_date=appointment.appointment_date,
            previous_time=appointment.start_time,
            new_date=new_date,
            new_time=minutes_to_time(new_minutes),
            reason=reason or "Rescheduled",
            rescheduled_at=now,
            rescheduled_by=changed_by,
        )

        updated = appointment.model_copy(deep=True)
        updated.appointment_date = new_date
        updated.appointment_time = new_minutes
        updated.reschedule_history = [*appointment.reschedule_history, entry]

        logger.info(
            f"Appointment {appointment.id} rescheduled from {entry.previous_date} "
            f"{entry.previous_time} to {entry.new_date} {entry.new_time}"
        )
        return updated

    # ------------------------------------------------------------------

    def _apply(
        self,
        appointment: Appointment,
        new_status: AppointmentStatus,
        now: datetime,
        changed_by: Optional[str],
        reason: Optional[str],
        updates: dict,
    ) -> Appointment:
        entry = StatusHistoryEntry(
            status=new_status, changed_at=now, changed_by=changed_by, reason=reason
        )

        updated = appointment.model_copy(deep=True)
        for field, value in updates.items():
            setattr(updated, field, value)
        updated.status = new_status
        updated.status_history = [*appointment.status_history, entry]

        logger.info(
            f"Appointment {appointment.id} status changed: "
            f"{appointment.status.value} -> {new_status.value}"
        )
        return updated
