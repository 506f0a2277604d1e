"""
Pydantic models for the scheduling engine.

All times of day are stored as integer minutes since midnight. Validators accept
zero-padded ``HH:mm`` strings wherever a time is expected, so records read from
storage can be passed in unchanged.
"""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..config import DEFAULT_DURATION_MINUTES
from ..lifecycle.constants import INACTIVE_STATUSES, AppointmentStatus
from ..utils.time_utils import (
    MINUTES_PER_DAY,
    coerce_end_minutes,
    coerce_minutes,
    minutes_to_time,
    weekday_name,
)


class ActorKind(str, Enum):
    """Owner of a working hours profile."""
    DOCTOR = "doctor"
    CLINIC = "clinic"


class HolidayScope(str, Enum):
    CLINIC = "clinic"
    ORGANIZATION = "organization"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def of(cls, on_date: date) -> "Weekday":
        return cls(weekday_name(on_date))


class TimeInterval(BaseModel):
    """
    A same-day time range, half-open: [start, start + duration).

    Attributes:
        on_date: Calendar date of the interval
        start_minutes: Start, minutes since midnight
        duration_minutes: Strictly positive length; zero-length ranges are rejected
    """
    model_config = ConfigDict(frozen=True)

    on_date: date
    start_minutes: int = Field(ge=0, lt=MINUTES_PER_DAY)
    duration_minutes: int = Field(gt=0)

    @field_validator('start_minutes', mode='before')
    @classmethod
    def parse_start(cls, v):
        return coerce_minutes(v)

    @model_validator(mode='after')
    def validate_same_day(self) -> "TimeInterval":
        """Multi-day spans are not supported."""
        if self.start_minutes + self.duration_minutes > MINUTES_PER_DAY:
            raise ValueError("interval must end on the same day it starts")
        return self

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @property
    def start_time(self) -> str:
        return minutes_to_time(self.start_minutes)

    @property
    def end_time(self) -> str:
        return minutes_to_time(self.end_minutes)

    @classmethod
    def between(cls, on_date: date, start_minutes: int, end_minutes: int) -> Optional["TimeInterval"]:
        """Build from start/end minutes; None when the range is empty."""
        if end_minutes <= start_minutes:
            return None
        return cls(on_date=on_date, start_minutes=start_minutes,
                   duration_minutes=end_minutes - start_minutes)


class WorkingHoursDay(BaseModel):
    """One weekday entry of a working hours profile."""
    day_of_week: Weekday
    is_working_day: bool = True
    opening_time: Optional[int] = Field(default=None, ge=0, le=MINUTES_PER_DAY)
    closing_time: Optional[int] = Field(default=None, ge=0, le=MINUTES_PER_DAY)
    break_start: Optional[int] = Field(default=None, ge=0, le=MINUTES_PER_DAY)
    break_end: Optional[int] = Field(default=None, ge=0, le=MINUTES_PER_DAY)

    @field_validator('opening_time', 'break_start', mode='before')
    @classmethod
    def parse_start_times(cls, v):
        return coerce_minutes(v)

    @field_validator('closing_time', 'break_end', mode='before')
    @classmethod
    def parse_end_times(cls, v):
        return coerce_end_minutes(v)

    @property
    def is_bookable(self) -> bool:
        """Working day with both opening and closing times set."""
        return (
            self.is_working_day
            and self.opening_time is not None
            and self.closing_time is not None
        )


class WorkingHoursProfile(BaseModel):
    """Weekly schedule owned by a doctor or a clinic."""
    owner_kind: ActorKind
    owner_id: str = Field(..., min_length=1)
    days: List[WorkingHoursDay] = Field(default_factory=list)

    def day(self, weekday: Weekday) -> Optional[WorkingHoursDay]:
        for entry in self.days:
            if entry.day_of_week == weekday:
                return entry
        return None

    def for_date(self, on_date: date) -> Optional[WorkingHoursDay]:
        return self.day(Weekday.of(on_date))


class HolidayEntry(BaseModel):
    """A clinic or organization-wide closure; voids every day in the range."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    scope: HolidayScope
    owner_id: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    name: Optional[str] = None

    @model_validator(mode='after')
    def validate_range(self) -> "HolidayEntry":
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self

    def covers(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date


class BlockedInterval(BaseModel):
    """Ad hoc unavailability of a doctor (leave, maintenance), repeated daily over a date range."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    doctor_id: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    start_time: int = Field(ge=0, lt=MINUTES_PER_DAY)
    end_time: int = Field(gt=0, le=MINUTES_PER_DAY)
    reason: Optional[str] = None

    @field_validator('start_time', mode='before')
    @classmethod
    def parse_start_time(cls, v):
        return coerce_minutes(v)

    @field_validator('end_time', mode='before')
    @classmethod
    def parse_end_time(cls, v):
        return coerce_end_minutes(v)

    @model_validator(mode='after')
    def validate_ranges(self) -> "BlockedInterval":
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    def interval_on(self, on_date: date) -> Optional[TimeInterval]:
        """The blocked time range on a given day, or None outside the date range."""
        if not self.start_date <= on_date <= self.end_date:
            return None
        return TimeInterval.between(on_date, self.start_time, self.end_time)


class Session(BaseModel):
    """
    One ordered step of a multi-session service.

    ``order`` and ``duration_minutes`` are unconstrained here;
    SessionBookingValidator reports violations as InvalidSessionStructure.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    order: int
    name: Optional[str] = None
    duration_minutes: Optional[int] = None


class Service(BaseModel):
    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    duration_minutes: int = Field(default=DEFAULT_DURATION_MINUTES, gt=0)
    sessions: List[Session] = Field(default_factory=list)

    @property
    def has_sessions(self) -> bool:
        return bool(self.sessions)

    def find_session(self, session_id: str) -> Optional[Session]:
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None


class StatusHistoryEntry(BaseModel):
    """Append-only record of one status change."""
    model_config = ConfigDict(frozen=True)

    status: AppointmentStatus
    changed_at: datetime
    changed_by: Optional[str] = None
    reason: Optional[str] = None


class RescheduleEntry(BaseModel):
    """Append-only record of one date/time change."""
    model_config = ConfigDict(frozen=True)

    previous_date: date
    previous_time: str
    new_date: date
    new_time: str
    reason: str = "Rescheduled"
    rescheduled_at: datetime
    rescheduled_by: Optional[str] = None


class Appointment(BaseModel):
    """
    A booked appointment.

    Attributes:
        appointment_date: Calendar date
        appointment_time: Start, minutes since midnight (accepts HH:mm)
        status_history: Every status change, oldest first; never rewritten
        reschedule_history: Every date/time change, oldest first; never rewritten
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    patient_id: str = Field(..., min_length=1)
    doctor_id: str = Field(..., min_length=1)
    clinic_id: str = Field(..., min_length=1)
    service_id: str = Field(..., min_length=1)
    session_id: Optional[str] = None
    appointment_date: date
    appointment_time: int = Field(ge=0, lt=MINUTES_PER_DAY)
    duration_minutes: int = Field(gt=0)
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)
    reschedule_history: List[RescheduleEntry] = Field(default_factory=list)
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    completion_notes: Optional[str] = None
    actual_start_time: Optional[datetime] = None
    started_by: Optional[str] = None
    actual_end_time: Optional[datetime] = None
    completed_by: Optional[str] = None
    created_by: Optional[str] = None

    @field_validator('appointment_time', mode='before')
    @classmethod
    def parse_time(cls, v):
        return coerce_minutes(v)

    @model_validator(mode='after')
    def validate_same_day(self) -> "Appointment":
        if self.appointment_time + self.duration_minutes > MINUTES_PER_DAY:
            raise ValueError("appointment must end on the same day it starts")
        return self

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(
            on_date=self.appointment_date,
            start_minutes=self.appointment_time,
            duration_minutes=self.duration_minutes,
        )

    @property
    def start_time(self) -> str:
        return minutes_to_time(self.appointment_time)

    @property
    def end_time(self) -> str:
        return minutes_to_time(self.appointment_time + self.duration_minutes)

    @property
    def is_active(self) -> bool:
        """Still occupies its time slot (not cancelled, not a no-show)."""
        return self.status not in INACTIVE_STATUSES


class ProposedBooking(BaseModel):
    """The time-relevant part of a booking, as seen by the conflict detector."""
    doctor_id: str
    patient_id: str
    appointment_date: date
    appointment_time: int = Field(ge=0, lt=MINUTES_PER_DAY)
    duration_minutes: int = Field(gt=0)

    @field_validator('appointment_time', mode='before')
    @classmethod
    def parse_time(cls, v):
        return coerce_minutes(v)

    @model_validator(mode='after')
    def validate_same_day(self) -> "ProposedBooking":
        if self.appointment_time + self.duration_minutes > MINUTES_PER_DAY:
            raise ValueError("booking must end on the same day it starts")
        return self

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(
            on_date=self.appointment_date,
            start_minutes=self.appointment_time,
            duration_minutes=self.duration_minutes,
        )


class BookingRequest(BaseModel):
    """
    Caller input for a new booking.

    ``duration_minutes`` is only honoured for services without sessions; for
    session bookings the duration always comes from the session (or the
    service default).
    """
    patient_id: str = Field(..., min_length=1)
    doctor_id: str = Field(..., min_length=1)
    clinic_id: str = Field(..., min_length=1)
    service_id: str = Field(..., min_length=1)
    session_id: Optional[str] = None
    appointment_date: date
    appointment_time: int = Field(ge=0, lt=MINUTES_PER_DAY)
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    notes: Optional[str] = None
    created_by: Optional[str] = None

    @field_validator('appointment_time', mode='before')
    @classmethod
    def parse_time(cls, v):
        return coerce_minutes(v)

    def to_proposed(self, duration_minutes: int) -> ProposedBooking:
        return ProposedBooking(
            doctor_id=self.doctor_id,
            patient_id=self.patient_id,
            appointment_date=self.appointment_date,
            appointment_time=self.appointment_time,
            duration_minutes=duration_minutes,
        )


class EffectiveHours(BaseModel):
    """Bookable window for a (doctor, clinic, date) after intersection."""
    on_date: date
    opening_time: int
    closing_time: int
    break_start: Optional[int] = None
    break_end: Optional[int] = None

    @property
    def break_interval(self) -> Optional[TimeInterval]:
        if self.break_start is None or self.break_end is None:
            return None
        return TimeInterval.between(self.on_date, self.break_start, self.break_end)

    def as_working_hours(self) -> Dict[str, object]:
        """Display form: start/end plus the list of breaks."""
        breaks = []
        if self.break_interval is not None:
            breaks.append({
                "start": minutes_to_time(self.break_start),
                "end": minutes_to_time(self.break_end),
            })
        return {
            "start": minutes_to_time(self.opening_time),
            "end": minutes_to_time(self.closing_time),
            "breaks": breaks,
        }


class SlotUnavailableReason(str, Enum):
    """Reported in priority order: break > blocked > booked."""
    BREAK = "break_time"
    BLOCKED = "time_blocked"
    BOOKED = "already_booked"


class TimeSlot(BaseModel):
    time: str
    start_minutes: int
    end_minutes: int
    is_available: bool
    reason: Optional[SlotUnavailableReason] = None
    existing_appointment_id: Optional[str] = None


class DaySchedule(BaseModel):
    on_date: date
    doctor_id: str
    clinic_id: str
    working_hours: Optional[EffectiveHours] = None
    time_slots: List[TimeSlot] = Field(default_factory=list)
    total_slots: int = 0
    available_slots: int = 0
    booked_slots: int = 0

    @classmethod
    def empty(cls, on_date: date, doctor_id: str, clinic_id: str) -> "DaySchedule":
        return cls(on_date=on_date, doctor_id=doctor_id, clinic_id=clinic_id)


class ConflictKind(str, Enum):
    DOCTOR_BUSY = "doctor_busy"
    PATIENT_BUSY = "patient_busy"


class Conflict(BaseModel):
    kind: ConflictKind
    conflicting_appointment_id: str
    message: str
    appointment_date: date
    start_time: str
    end_time: str


class SessionBookingItem(BaseModel):
    """One entry of a batch session booking."""
    session_id: str = Field(..., min_length=1)
    appointment_date: date
    appointment_time: int = Field(ge=0, lt=MINUTES_PER_DAY)

    @field_validator('appointment_time', mode='before')
    @classmethod
    def parse_time(cls, v):
        return coerce_minutes(v)


class SessionProgressItem(BaseModel):
    session_id: str
    session_name: Optional[str] = None
    session_order: int
    appointment_id: Optional[str] = None
    status: str = "not_booked"
    appointment_date: Optional[date] = None
    appointment_time: Optional[str] = None
    is_completed: bool = False


class SessionProgress(BaseModel):
    patient_id: str
    service_id: str
    service_name: Optional[str] = None
    total_sessions: int
    completed_sessions: int
    completion_percentage: int
    sessions: List[SessionProgressItem] = Field(default_factory=list)


class ScheduleChangeConflict(BaseModel):
    """An upcoming appointment that would fall outside a proposed weekly schedule."""
    appointment_id: str
    appointment_date: date
    appointment_time: str
    reason: str


class HierarchyViolation(BaseModel):
    """A doctor working day that does not fit inside the clinic's hours."""
    day_of_week: Weekday
    reason: str


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
