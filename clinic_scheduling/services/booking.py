"""
Booking Engine

Single entry point chaining the scheduling rules for a new booking:

    request -> horizon -> working hours -> conflicts -> session rules -> draft Appointment

The first violated rule raises its structured SchedulingError; working-hours
failures are always reported before conflicts. Nothing is persisted here.
"""

import logging
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional, Sequence, Union

from ..config import DEFAULT_SLOT_MINUTES
from ..exceptions import BatchBookingFailedError, SchedulingError, ServiceHasNoSessionsError
from ..lifecycle.constants import AppointmentStatus
from ..lifecycle.manager import StatusLifecycle
from ..models.scheduling import (
    Appointment,
    BlockedInterval,
    BookingRequest,
    DaySchedule,
    Service,
    SessionBookingItem,
    StatusHistoryEntry,
    utc_now,
)
from .availability import AvailabilityComputer
from .conflicts import ensure_no_conflicts, resolve_booking_duration
from .horizon import validate_booking_horizon
from .sessions import SessionBookingValidator, batch_failure
from .working_hours import WorkingHoursResolver, WorkingHoursSource

logger = logging.getLogger(__name__)


class BookingEngine:
    """
    Facade over the resolver, availability, conflict, session and lifecycle
    components, sharing one WorkingHoursSource.

    Usage:
        engine = BookingEngine(source)
        schedule = engine.compute_day("doc-1", "clinic-1", date(2025, 3, 3))
        draft = engine.propose_booking(request, service, existing)
    """

    def __init__(
        self,
        source: WorkingHoursSource,
        session_validator: Optional[SessionBookingValidator] = None,
        lifecycle: Optional[StatusLifecycle] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.resolver = WorkingHoursResolver(source)
        self.availability = AvailabilityComputer(self.resolver)
        self.sessions = session_validator or SessionBookingValidator()
        self.lifecycle = lifecycle or StatusLifecycle(self.resolver, clock=clock)
        self._clock = clock

    def compute_day(
        self,
        doctor_id: str,
        clinic_id: str,
        on_date: date,
        slot_duration: int = DEFAULT_SLOT_MINUTES,
        existing_bookings: Sequence[Appointment] = (),
        blocked_intervals: Optional[Iterable[BlockedInterval]] = None,
    ) -> DaySchedule:
        return self.availability.compute_day(
            doctor_id, clinic_id, on_date, slot_duration, existing_bookings, blocked_intervals
        )

    def propose_booking(
        self,
        request: BookingRequest,
        service: Service,
        existing: Sequence[Appointment],
    ) -> Appointment:
        """
        Validate a booking request and build the accepted draft.

        Args:
            request: Patient, doctor, clinic, service, optional session and slot
            service: The booked service (sessions and default duration)
            existing: Appointments that may conflict; the caller loads at least
                the doctor's and the patient's bookings for the date, plus the
                patient's bookings of this service for session rules

        Returns:
            Draft Appointment in ``scheduled`` with one history entry

        Raises:
            SchedulingError subclass for the first violated rule
        """
        duration = resolve_booking_duration(
            service, request.session_id, request.duration_minutes
        )

        try:
            validate_booking_horizon(
                request.appointment_date, request.appointment_time, self._clock()
            )
            self.resolver.validate_slot(
                request.doctor_id,
                request.clinic_id,
                request.appointment_date,
                request.appointment_time,
                duration,
            )
            ensure_no_conflicts(request.to_proposed(duration), existing)
            self.sessions.validate_booking(
                request.patient_id, service, request.session_id, existing
            )
        except SchedulingError as e:
            logger.warning(
                f"Booking rejected for patient {request.patient_id} with doctor "
                f"{request.doctor_id} on {request.appointment_date}: {e.kind.value}"
            )
            raise

        now = self._clock()
        appointment = Appointment(
            patient_id=request.patient_id,
            doctor_id=request.doctor_id,
            clinic_id=request.clinic_id,
            service_id=service.id,
            session_id=request.session_id,
            appointment_date=request.appointment_date,
            appointment_time=request.appointment_time,
            duration_minutes=duration,
            status=AppointmentStatus.SCHEDULED,
            status_history=[StatusHistoryEntry(
                status=AppointmentStatus.SCHEDULED,
                changed_at=now,
                changed_by=request.created_by,
                reason="Appointment created",
            )],
            notes=request.notes,
            created_by=request.created_by,
        )

        logger.info(
            f"Booking accepted: {appointment.id} for doctor {appointment.doctor_id} "
            f"on {appointment.appointment_date} {appointment.start_time}-{appointment.end_time}"
        )
        return appointment

    def propose_session_batch(
        self,
        patient_id: str,
        doctor_id: str,
        clinic_id: str,
        service: Service,
        bookings: Sequence[SessionBookingItem],
        existing: Sequence[Appointment],
        created_by: Optional[str] = None,
    ) -> List[Appointment]:
        """
        Book several sessions of one service at once, all or nothing.

        Each item runs through propose_booking against the existing
        appointments plus the drafts accepted earlier in the batch, so two
        items can neither overlap nor book the same session twice.

        Raises:
            ServiceHasNoSessionsError: service has no sessions
            BatchBookingFailedError: one or more items failed, with every failure listed
        """
        if not service.has_sessions:
            raise ServiceHasNoSessionsError(service.id)

        drafts: List[Appointment] = []
        failures = []
        for item in bookings:
            request = BookingRequest(
                patient_id=patient_id,
                doctor_id=doctor_id,
                clinic_id=clinic_id,
                service_id=service.id,
                session_id=item.session_id,
                appointment_date=item.appointment_date,
                appointment_time=item.appointment_time,
                created_by=created_by,
            )
            try:
                drafts.append(self.propose_booking(request, service, [*existing, *drafts]))
            except SchedulingError as e:
                failures.append(batch_failure(item, e))

        if failures:
            raise BatchBookingFailedError(len(bookings), failures)

        logger.info(f"Batch of {len(drafts)} sessions accepted for patient {patient_id}")
        return drafts

    def reschedule(
        self,
        appointment: Appointment,
        new_date: date,
        new_time: Union[str, int],
        existing: Sequence[Appointment],
        changed_by: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Appointment:
        return self.lifecycle.reschedule(
            appointment, new_date, new_time, existing, changed_by=changed_by, reason=reason
        )
