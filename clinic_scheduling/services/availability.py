"""
Availability Service

Enumerates fixed-size candidate slots for a doctor's day and marks each one
available or not, based on:
- Effective working hours (doctor ∩ clinic, holidays excluded)
- The doctor's break
- Ad hoc blocked intervals
- Existing active appointments
"""

import logging
from collections import Counter
from datetime import date
from typing import Dict, Iterable, Optional, Sequence

from ..config import DEFAULT_SLOT_MINUTES
from ..exceptions import InvalidTimeIntervalError
from ..lifecycle.constants import AppointmentStatus
from ..models.scheduling import (
    Appointment,
    BlockedInterval,
    DaySchedule,
    SlotUnavailableReason,
    TimeInterval,
    TimeSlot,
)
from .overlap import overlaps
from .working_hours import WorkingHoursResolver

logger = logging.getLogger(__name__)


class AvailabilityComputer:
    """
    Builds a DaySchedule for a doctor at a clinic.

    Trailing partial slots are dropped, never clipped: with 09:00-17:00 and
    45 minute slots the last slot is 15:45-16:30.
    """

    def __init__(self, resolver: WorkingHoursResolver):
        self.resolver = resolver

    def compute_day(
        self,
        doctor_id: str,
        clinic_id: str,
        on_date: date,
        slot_duration: int = DEFAULT_SLOT_MINUTES,
        existing_bookings: Sequence[Appointment] = (),
        blocked_intervals: Optional[Iterable[BlockedInterval]] = None,
    ) -> DaySchedule:
        """
        Compute slot availability for one day.

        Args:
            doctor_id: Doctor identifier
            clinic_id: Clinic identifier
            on_date: Calendar date
            slot_duration: Slot length in minutes
            existing_bookings: Appointments to check against; inactive ones
                and other doctors/dates are ignored
            blocked_intervals: Blocks to apply; fetched from the resolver's
                source when omitted

        Returns:
            DaySchedule (empty when there are no effective hours)
        """
        if slot_duration <= 0:
            raise InvalidTimeIntervalError(
                "Slot duration must be positive", slot_duration=slot_duration
            )

        hours = self.resolver.resolve(doctor_id, clinic_id, on_date)
        if hours is None:
            logger.debug(f"No effective hours for doctor {doctor_id} on {on_date}")
            return DaySchedule.empty(on_date, doctor_id, clinic_id)

        if blocked_intervals is None:
            blocked_intervals = self.resolver.source.get_blocked_intervals(doctor_id, on_date)
        blocks = [
            interval for interval in (
                b.interval_on(on_date) for b in blocked_intervals if b.doctor_id == doctor_id
            )
            if interval is not None
        ]

        bookings = [
            a for a in existing_bookings
            if a.doctor_id == doctor_id and a.appointment_date == on_date and a.is_active
        ]

        break_interval = hours.break_interval
        time_slots = []
        start = hours.opening_time

        while start + slot_duration <= hours.closing_time:
            slot = TimeInterval(on_date=on_date, start_minutes=start, duration_minutes=slot_duration)

            in_break = break_interval is not None and overlaps(slot, break_interval)
            is_blocked = any(overlaps(slot, block) for block in blocks)
            booking = next((a for a in bookings if overlaps(slot, a.interval)), None)

            reason = None
            if in_break:
                reason = SlotUnavailableReason.BREAK
            elif is_blocked:
                reason = SlotUnavailableReason.BLOCKED
            elif booking is not None:
                reason = SlotUnavailableReason.BOOKED

            time_slots.append(TimeSlot(
                time=slot.start_time,
                start_minutes=slot.start_minutes,
                end_minutes=slot.end_minutes,
                is_available=reason is None,
                reason=reason,
                existing_appointment_id=(
                    booking.id if reason == SlotUnavailableReason.BOOKED else None
                ),
            ))
            start += slot_duration

        total = len(time_slots)
        available = sum(1 for s in time_slots if s.is_available)

        logger.debug(
            f"Doctor {doctor_id} on {on_date}: {available}/{total} slots available"
        )

        return DaySchedule(
            on_date=on_date,
            doctor_id=doctor_id,
            clinic_id=clinic_id,
            working_hours=hours,
            time_slots=time_slots,
            total_slots=total,
            available_slots=available,
            booked_slots=total - available,
        )


def summarize_statuses(appointments: Iterable[Appointment]) -> Dict[str, int]:
    """
    Count appointments per status, every status present with a zero default.

    Used for calendar summaries.
    """
    counts = Counter(a.status for a in appointments)
    summary = {status.value: counts.get(status, 0) for status in AppointmentStatus}
    summary["total"] = sum(counts.values())
    return summary
