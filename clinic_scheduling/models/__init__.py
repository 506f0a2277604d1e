"""
Scheduling engine records.

Exports the pydantic models shared by every engine component.
"""

from .scheduling import (
    ActorKind,
    Appointment,
    BlockedInterval,
    BookingRequest,
    Conflict,
    ConflictKind,
    DaySchedule,
    EffectiveHours,
    HierarchyViolation,
    HolidayEntry,
    HolidayScope,
    ProposedBooking,
    RescheduleEntry,
    ScheduleChangeConflict,
    Service,
    Session,
    SessionBookingItem,
    SessionProgress,
    SessionProgressItem,
    SlotUnavailableReason,
    StatusHistoryEntry,
    TimeInterval,
    TimeSlot,
    Weekday,
    WorkingHoursDay,
    WorkingHoursProfile,
    utc_now,
)

__all__ = [
    "ActorKind",
    "Appointment",
    "BlockedInterval",
    "BookingRequest",
    "Conflict",
    "ConflictKind",
    "DaySchedule",
    "EffectiveHours",
    "HierarchyViolation",
    "HolidayEntry",
    "HolidayScope",
    "ProposedBooking",
    "RescheduleEntry",
    "ScheduleChangeConflict",
    "Service",
    "Session",
    "SessionBookingItem",
    "SessionProgress",
    "SessionProgressItem",
    "SlotUnavailableReason",
    "StatusHistoryEntry",
    "TimeInterval",
    "TimeSlot",
    "Weekday",
    "WorkingHoursDay",
    "WorkingHoursProfile",
    "utc_now",
]
