"""
Booking horizon: how far back and forward an appointment may be placed.

A new booking must start no earlier than now and no later than one year
from now. A reschedule only has to land on today or a later date.
"""

from datetime import date, datetime, time, timedelta

from ..exceptions import InvalidAppointmentDateError


def one_year_after(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        # Feb 29 -> Feb 28
        return moment.replace(year=moment.year + 1, day=moment.day - 1)


def appointment_start(on_date: date, start_minutes: int, now: datetime) -> datetime:
    """Start of the appointment in the timezone of ``now``."""
    hours, minutes = divmod(start_minutes, 60)
    return datetime.combine(on_date, time(0, 0), tzinfo=now.tzinfo) + timedelta(
        hours=hours, minutes=minutes
    )


def validate_booking_horizon(on_date: date, start_minutes: int, now: datetime) -> None:
    """
    Raises:
        InvalidAppointmentDateError: start is in the past or more than a year ahead
    """
    start = appointment_start(on_date, start_minutes, now)
    if start < now:
        raise InvalidAppointmentDateError(
            InvalidAppointmentDateError.PAST_DATE, on_date.isoformat(), now.isoformat()
        )
    if start > one_year_after(now):
        raise InvalidAppointmentDateError(
            InvalidAppointmentDateError.TOO_FAR_IN_ADVANCE, on_date.isoformat(), now.isoformat()
        )


def validate_not_past_date(on_date: date, now: datetime) -> None:
    """Date-level check used when rescheduling; any time today is accepted."""
    if on_date < now.date():
        raise InvalidAppointmentDateError(
            InvalidAppointmentDateError.PAST_DATE,
            on_date.isoformat(),
            now.isoformat(),
            message="Cannot reschedule to a past date",
        )
