"""
Tests for daily slot availability
"""

import pytest

from clinic_scheduling.exceptions import InvalidTimeIntervalError
from clinic_scheduling.lifecycle.constants import AppointmentStatus
from clinic_scheduling.models import BlockedInterval, SlotUnavailableReason, TimeInterval
from clinic_scheduling.services.availability import summarize_statuses
from clinic_scheduling.services.overlap import overlaps

from .fixtures import (
    MONDAY,
    SATURDAY,
    TEST_CLINIC_ID,
    TEST_DOCTOR_ID,
    TEST_OTHER_DOCTOR_ID,
    create_appointment,
)


def slot_at(schedule, time):
    return next(s for s in schedule.time_slots if s.time == time)


class TestComputeDay:
    """Test slot enumeration and marking"""

    def test_full_day_scenario(self, availability):
        """09:00-17:00, break 12-13, one booking 10:00-10:30, 30 minute slots"""
        booking = create_appointment(id='appt-1', appointment_time='10:00')

        schedule = availability.compute_day(
            TEST_DOCTOR_ID, TEST_CLINIC_ID, MONDAY, 30, existing_bookings=[booking]
        )

        assert schedule.total_slots == 16
        assert schedule.available_slots == 13
        assert schedule.booked_slots == 3

        booked = slot_at(schedule, '10:00')
        assert booked.is_available is False
        assert booked.reason == SlotUnavailableReason.BOOKED
        assert booked.existing_appointment_id == 'appt-1'

        for time in ('12:00', '12:30'):
            assert slot_at(schedule, time).reason == SlotUnavailableReason.BREAK

        assert slot_at(schedule, '10:30').is_available is True
        assert schedule.time_slots[0].time == '09:00'
        assert schedule.time_slots[-1].time == '16:30'

    def test_working_hours_in_schedule(self, availability):
        schedule = availability.compute_day(TEST_DOCTOR_ID, TEST_CLINIC_ID, MONDAY)

        assert schedule.working_hours.as_working_hours()['breaks'] == [{'start': '12:00', 'end': '13:00'}]

    def test_trailing_partial_slot_dropped(self, availability):
        """With 45 minute slots the last slot is 15:45-16:30"""
        schedule = availability.compute_day(TEST_DOCTOR_ID, TEST_CLINIC_ID, MONDAY, 45)

        last = schedule.time_slots[-1]
        assert last.time == '15:45'
        assert last.end_minutes == 990
        assert schedule.total_slots == 10

    def test_non_working_day_is_empty(self, availability):
        schedule = availability.compute_day(TEST_DOCTOR_ID, TEST_CLINIC_ID, SATURDAY)

        assert schedule.time_slots == []
        assert schedule.total_slots == 0
        assert schedule.working_hours is None

    def test_invalid_slot_duration(self, availability):
        with pytest.raises(InvalidTimeIntervalError):
            availability.compute_day(TEST_DOCTOR_ID, TEST_CLINIC_ID, MONDAY, 0)

    def test_partial_overlap_marks_booked(self, availability):
        """A 10:15-10:45 booking occupies both the 10:00 and 10:30 slots"""
        booking = create_appointment(id='appt-2', appointment_time='10:15')

        schedule = availability.compute_day(
            TEST_DOCTOR_ID, TEST_CLINIC_ID, MONDAY, 30, existing_bookings=[booking]
        )

        assert slot_at(schedule, '10:00').existing_appointment_id == 'appt-2'
        assert slot_at(schedule, '10:30').existing_appointment_id == 'appt-2'
        assert slot_at(schedule, '11:00').is_available is True

    def test_inactive_and_foreign_bookings_ignored(self, availability):
        """Cancelled, no-show and other doctors' bookings leave slots free"""
        bookings = [
            create_appointment(appointment_time='09:00', status=AppointmentStatus.CANCELLED),
            create_appointment(appointment_time='09:30', status=AppointmentStatus.NO_SHOW),
            create_appointment(appointment_time='10:00', doctor_id=TEST_OTHER_DOCTOR_ID),
        ]

        schedule = availability.compute_day(
            TEST_DOCTOR_ID, TEST_CLINIC_ID, MONDAY, 30, existing_bookings=bookings
        )

        assert schedule.available_slots == 14

    def test_blocked_intervals(self, availability):
        """Blocked time is reported as time_blocked"""
        block = BlockedInterval(
            doctor_id=TEST_DOCTOR_ID, start_date=MONDAY, end_date=MONDAY,
            start_time='15:00', end_time='16:00',
        )

        schedule = availability.compute_day(
            TEST_DOCTOR_ID, TEST_CLINIC_ID, MONDAY, 30, blocked_intervals=[block]
        )

        assert slot_at(schedule, '15:00').reason == SlotUnavailableReason.BLOCKED
        assert slot_at(schedule, '15:30').reason == SlotUnavailableReason.BLOCKED
        assert slot_at(schedule, '16:00').is_available is True

    def test_reason_priority(self, availability):
        """Break beats blocked, blocked beats booked"""
        block = BlockedInterval(
            doctor_id=TEST_DOCTOR_ID, start_date=MONDAY, end_date=MONDAY,
            start_time='11:30', end_time='13:00',
        )
        booking = create_appointment(id='appt-3', appointment_time='11:30', duration_minutes=60)

        schedule = availability.compute_day(
            TEST_DOCTOR_ID, TEST_CLINIC_ID, MONDAY, 30,
            existing_bookings=[booking], blocked_intervals=[block],
        )

        assert slot_at(schedule, '11:30').reason == SlotUnavailableReason.BLOCKED
        assert slot_at(schedule, '12:00').reason == SlotUnavailableReason.BREAK

    def test_appointment_id_only_on_booked_slots(self, availability):
        """Break and blocked slots carry no appointment id even under a booking"""
        block = BlockedInterval(
            doctor_id=TEST_DOCTOR_ID, start_date=MONDAY, end_date=MONDAY,
            start_time='11:00', end_time='11:30',
        )
        booking = create_appointment(id='appt-4', appointment_time='10:30', duration_minutes=120)

        schedule = availability.compute_day(
            TEST_DOCTOR_ID, TEST_CLINIC_ID, MONDAY, 30,
            existing_bookings=[booking], blocked_intervals=[block],
        )

        assert slot_at(schedule, '10:30').existing_appointment_id == 'appt-4'
        assert slot_at(schedule, '11:00').reason == SlotUnavailableReason.BLOCKED
        assert slot_at(schedule, '11:00').existing_appointment_id is None
        assert slot_at(schedule, '12:00').reason == SlotUnavailableReason.BREAK
        assert slot_at(schedule, '12:00').existing_appointment_id is None
        assert slot_at(schedule, '11:30').existing_appointment_id == 'appt-4'

    def test_booked_slot_never_available(self, availability):
        """No slot overlapping an active booking is reported available"""
        bookings = [
            create_appointment(appointment_time='09:10', duration_minutes=25),
            create_appointment(appointment_time='14:50', duration_minutes=70),
        ]

        schedule = availability.compute_day(
            TEST_DOCTOR_ID, TEST_CLINIC_ID, MONDAY, 15, existing_bookings=bookings
        )

        for slot in schedule.time_slots:
            slot_interval = TimeInterval.between(MONDAY, slot.start_minutes, slot.end_minutes)
            if any(overlaps(slot_interval, b.interval) for b in bookings):
                assert slot.is_available is False


class TestSummarizeStatuses:
    """Test calendar status counts"""

    def test_counts_every_status(self):
        appointments = [
            create_appointment(status=AppointmentStatus.SCHEDULED),
            create_appointment(status=AppointmentStatus.SCHEDULED),
            create_appointment(status=AppointmentStatus.CANCELLED),
            create_appointment(status=AppointmentStatus.COMPLETED),
        ]

        summary = summarize_statuses(appointments)

        assert summary['scheduled'] == 2
        assert summary['cancelled'] == 1
        assert summary['completed'] == 1
        assert summary['no_show'] == 0
        assert summary['total'] == 4

    def test_empty(self):
        summary = summarize_statuses([])
        assert summary['total'] == 0
        assert set(summary) == {s.value for s in AppointmentStatus} | {'total'}
