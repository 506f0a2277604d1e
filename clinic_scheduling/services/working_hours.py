"""
Working Hours Resolution

Computes the effective bookable window for a (doctor, clinic, date) triple by
intersecting the doctor's and the clinic's weekly schedules, after excluding
holidays, and validates proposed appointment times against it:
- Holiday calendar (clinic or organization scope)
- Doctor working hours (break inherited from the doctor only)
- Clinic working hours
- Ad hoc blocked intervals (leave, maintenance)

Data is read through an injected WorkingHoursSource, so the resolver performs
no I/O of its own.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..exceptions import (
    BreakOverlapError,
    HolidayOrNonWorkingDayError,
    OutsideWorkingHoursError,
    TimeSlotBlockedError,
)
from ..lifecycle.constants import AppointmentStatus
from ..models.scheduling import (
    ActorKind,
    Appointment,
    BlockedInterval,
    EffectiveHours,
    HierarchyViolation,
    HolidayEntry,
    HolidayScope,
    ScheduleChangeConflict,
    TimeInterval,
    WorkingHoursProfile,
)
from ..utils.time_utils import minutes_to_time
from .overlap import overlaps

logger = logging.getLogger(__name__)


class WorkingHoursSource(Protocol):
    """Read-only access to schedules, holidays and blocks, supplied by the caller."""

    def get_working_hours(self, owner_kind: ActorKind, owner_id: str) -> Optional[WorkingHoursProfile]:
        ...

    def get_organization_id(self, clinic_id: str) -> Optional[str]:
        ...

    def get_holidays(self, clinic_id: str, organization_id: Optional[str]) -> Iterable[HolidayEntry]:
        ...

    def get_blocked_intervals(self, doctor_id: str, on_date: date) -> Iterable[BlockedInterval]:
        ...


class InMemoryWorkingHoursSource:
    """
    WorkingHoursSource backed by plain Python collections.

    Used by tests and by callers that already loaded the relevant slice of data.
    """

    def __init__(
        self,
        profiles: Iterable[WorkingHoursProfile] = (),
        holidays: Iterable[HolidayEntry] = (),
        blocked_intervals: Iterable[BlockedInterval] = (),
        clinic_organizations: Optional[Dict[str, str]] = None,
    ):
        self._profiles: Dict[Tuple[ActorKind, str], WorkingHoursProfile] = {}
        for profile in profiles:
            self.add_profile(profile)
        self._holidays: List[HolidayEntry] = list(holidays)
        self._blocked: List[BlockedInterval] = list(blocked_intervals)
        self._clinic_organizations = dict(clinic_organizations or {})

    def add_profile(self, profile: WorkingHoursProfile) -> None:
        self._profiles[(profile.owner_kind, profile.owner_id)] = profile

    def add_holiday(self, holiday: HolidayEntry) -> None:
        self._holidays.append(holiday)

    def add_blocked_interval(self, block: BlockedInterval) -> None:
        self._blocked.append(block)

    def get_working_hours(self, owner_kind: ActorKind, owner_id: str) -> Optional[WorkingHoursProfile]:
        return self._profiles.get((owner_kind, owner_id))

    def get_organization_id(self, clinic_id: str) -> Optional[str]:
        return self._clinic_organizations.get(clinic_id)

    def get_holidays(self, clinic_id: str, organization_id: Optional[str]) -> List[HolidayEntry]:
        return [
            h for h in self._holidays
            if (h.scope == HolidayScope.CLINIC and h.owner_id == clinic_id)
            or (h.scope == HolidayScope.ORGANIZATION and organization_id is not None
                and h.owner_id == organization_id)
        ]

    def get_blocked_intervals(self, doctor_id: str, on_date: date) -> List[BlockedInterval]:
        return [
            b for b in self._blocked
            if b.doctor_id == doctor_id and b.start_date <= on_date <= b.end_date
        ]


class WorkingHoursResolver:
    """
    Resolves effective hours and validates slots against them.

    Usage:
        resolver = WorkingHoursResolver(source)
        hours = resolver.resolve("doc-1", "clinic-1", date(2025, 3, 3))
        resolver.validate_slot("doc-1", "clinic-1", date(2025, 3, 3), 600, 30)
    """

    def __init__(self, source: WorkingHoursSource):
        self.source = source

    def is_holiday(self, clinic_id: str, on_date: date) -> bool:
        """True when any clinic- or organization-scoped holiday covers the date."""
        organization_id = self.source.get_organization_id(clinic_id)
        for holiday in self.source.get_holidays(clinic_id, organization_id):
            if holiday.covers(on_date):
                logger.debug(f"Holiday {holiday.id} covers {on_date} for clinic {clinic_id}")
                return True
        return False

    def resolve(self, doctor_id: str, clinic_id: str, on_date: date) -> Optional[EffectiveHours]:
        """
        Compute the effective bookable window.

        Args:
            doctor_id: Doctor identifier
            clinic_id: Clinic identifier
            on_date: Calendar date

        Returns:
            EffectiveHours, or None for holidays, non-working days and empty
            intersections
        """
        if self.is_holiday(clinic_id, on_date):
            return None

        doctor_profile = self.source.get_working_hours(ActorKind.DOCTOR, doctor_id)
        doctor_day = doctor_profile.for_date(on_date) if doctor_profile else None
        if doctor_day is None or not doctor_day.is_bookable:
            logger.debug(f"Doctor {doctor_id} does not work on {on_date}")
            return None

        clinic_profile = self.source.get_working_hours(ActorKind.CLINIC, clinic_id)
        clinic_day = clinic_profile.for_date(on_date) if clinic_profile else None
        if clinic_day is None or not clinic_day.is_bookable:
            logger.debug(f"Clinic {clinic_id} is closed on {on_date}")
            return None

        opening = max(doctor_day.opening_time, clinic_day.opening_time)
        closing = min(doctor_day.closing_time, clinic_day.closing_time)
        if opening >= closing:
            logger.debug(
                f"No overlap between doctor {doctor_id} and clinic {clinic_id} hours on {on_date}"
            )
            return None

        # Clinic-level breaks are not intersected; the doctor's break applies
        return EffectiveHours(
            on_date=on_date,
            opening_time=opening,
            closing_time=closing,
            break_start=doctor_day.break_start,
            break_end=doctor_day.break_end,
        )

    def find_block(self, doctor_id: str, interval: TimeInterval,
                   blocked_intervals: Optional[Iterable[BlockedInterval]] = None) -> Optional[BlockedInterval]:
        """First blocked interval of the doctor intersecting ``interval``, if any."""
        if blocked_intervals is None:
            blocked_intervals = self.source.get_blocked_intervals(doctor_id, interval.on_date)
        for block in blocked_intervals:
            if block.doctor_id != doctor_id:
                continue
            blocked = block.interval_on(interval.on_date)
            if blocked is not None and overlaps(interval, blocked):
                return block
        return None

    def validate_slot(
        self,
        doctor_id: str,
        clinic_id: str,
        on_date: date,
        start_minutes: int,
        duration_minutes: int,
    ) -> EffectiveHours:
        """
        Check that an appointment fits the effective hours.

        Checks run in a fixed order and the first failure is raised:
        holiday/non-working day, outside hours, break, blocked time.

        Returns:
            The EffectiveHours the slot was validated against

        Raises:
            HolidayOrNonWorkingDayError, OutsideWorkingHoursError,
            BreakOverlapError, TimeSlotBlockedError
        """
        hours = self.resolve(doctor_id, clinic_id, on_date)
        if hours is None:
            raise HolidayOrNonWorkingDayError(
                on_date.isoformat(), holiday=self.is_holiday(clinic_id, on_date)
            )

        end_minutes = start_minutes + duration_minutes
        start_label = minutes_to_time(start_minutes)
        end_label = minutes_to_time(end_minutes)
        opening_label = minutes_to_time(hours.opening_time)
        closing_label = minutes_to_time(hours.closing_time)

        if (start_minutes < hours.opening_time
                or start_minutes >= hours.closing_time
                or end_minutes > hours.closing_time):
            raise OutsideWorkingHoursError(start_label, end_label, opening_label, closing_label)

        interval = TimeInterval(
            on_date=on_date, start_minutes=start_minutes, duration_minutes=duration_minutes
        )

        break_interval = hours.break_interval
        if break_interval is not None and overlaps(interval, break_interval):
            raise BreakOverlapError(
                start_label, end_label, break_interval.start_time, break_interval.end_time
            )

        block = self.find_block(doctor_id, interval)
        if block is not None:
            raise TimeSlotBlockedError(start_label, end_label, block_id=block.id, reason=block.reason)

        logger.debug(f"Working hours validation passed for doctor {doctor_id} on {on_date} {start_label}")
        return hours


def find_schedule_change_conflicts(
    doctor_id: str,
    new_profile: WorkingHoursProfile,
    appointments: Sequence[Appointment],
    from_date: date,
) -> List[ScheduleChangeConflict]:
    """
    Upcoming appointments that would no longer fit a proposed weekly schedule.

    Only ``scheduled`` and ``confirmed`` appointments of the doctor on or after
    ``from_date`` are considered. Reasons: NON_WORKING_DAY, BEFORE_OPENING,
    AFTER_CLOSING, DURING_BREAK.
    """
    pending = (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)
    conflicts: List[ScheduleChangeConflict] = []

    upcoming = sorted(
        (a for a in appointments
         if a.doctor_id == doctor_id and a.status in pending and a.appointment_date >= from_date),
        key=lambda a: (a.appointment_date, a.appointment_time),
    )

    for appointment in upcoming:
        day = new_profile.for_date(appointment.appointment_date)
        reason = None
        if day is None or not day.is_bookable:
            reason = "NON_WORKING_DAY"
        elif appointment.appointment_time < day.opening_time:
            reason = "BEFORE_OPENING"
        elif appointment.appointment_time + appointment.duration_minutes > day.closing_time:
            reason = "AFTER_CLOSING"
        elif day.break_start is not None and day.break_end is not None:
            break_interval = TimeInterval.between(
                appointment.appointment_date, day.break_start, day.break_end
            )
            if break_interval is not None and overlaps(appointment.interval, break_interval):
                reason = "DURING_BREAK"

        if reason:
            conflicts.append(ScheduleChangeConflict(
                appointment_id=appointment.id,
                appointment_date=appointment.appointment_date,
                appointment_time=appointment.start_time,
                reason=reason,
            ))

    if conflicts:
        logger.info(
            f"Schedule change for doctor {doctor_id} affects {len(conflicts)} appointment(s)"
        )
    return conflicts


def validate_doctor_within_clinic(
    doctor_profile: WorkingHoursProfile,
    clinic_profile: WorkingHoursProfile,
) -> List[HierarchyViolation]:
    """
    Check that every doctor working day lies inside the clinic's hours.

    Returns one violation per offending weekday; an empty list means the
    doctor's schedule is consistent with the clinic's.
    """
    violations: List[HierarchyViolation] = []

    for doctor_day in doctor_profile.days:
        if not doctor_day.is_bookable:
            continue

        clinic_day = clinic_profile.day(doctor_day.day_of_week)
        if clinic_day is None or not clinic_day.is_bookable:
            violations.append(HierarchyViolation(
                day_of_week=doctor_day.day_of_week, reason="CLINIC_CLOSED"
            ))
        elif doctor_day.opening_time < clinic_day.opening_time:
            violations.append(HierarchyViolation(
                day_of_week=doctor_day.day_of_week, reason="OPENS_BEFORE_CLINIC"
            ))
        elif doctor_day.closing_time > clinic_day.closing_time:
            violations.append(HierarchyViolation(
                day_of_week=doctor_day.day_of_week, reason="CLOSES_AFTER_CLINIC"
            ))

    return violations
