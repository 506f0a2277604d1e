"""
Test fixtures for the scheduling engine
"""

import uuid
from datetime import date, datetime, timezone

from clinic_scheduling.lifecycle.constants import AppointmentStatus
from clinic_scheduling.models import (
    ActorKind,
    Appointment,
    Service,
    Session,
    Weekday,
    WorkingHoursDay,
    WorkingHoursProfile,
)

# Sample test data
TEST_DOCTOR_ID = 'doctor-001'
TEST_OTHER_DOCTOR_ID = 'doctor-002'
TEST_CLINIC_ID = 'clinic-001'
TEST_ORGANIZATION_ID = 'org-001'
TEST_PATIENT_ID = 'patient-001'
TEST_OTHER_PATIENT_ID = 'patient-002'
TEST_SERVICE_ID = 'service-001'

MONDAY = date(2025, 3, 3)
TUESDAY = date(2025, 3, 4)
SATURDAY = date(2025, 3, 8)
SUNDAY = date(2025, 3, 9)

FIXED_NOW = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)

WEEKDAYS = [Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY]

__all__ = [
    'TEST_DOCTOR_ID', 'TEST_OTHER_DOCTOR_ID', 'TEST_CLINIC_ID', 'TEST_ORGANIZATION_ID',
    'TEST_PATIENT_ID', 'TEST_OTHER_PATIENT_ID', 'TEST_SERVICE_ID',
    'MONDAY', 'TUESDAY', 'SATURDAY', 'SUNDAY', 'FIXED_NOW',
    'create_doctor_profile', 'create_clinic_profile', 'create_appointment',
    'create_service', 'create_session_service', 'fixed_clock',
]


def fixed_clock():
    return FIXED_NOW


# Fixture functions
def create_doctor_profile(**kwargs):
    """Doctor working Mon-Fri 09:00-17:00 with a 12:00-13:00 break"""
    days = kwargs.get('days')
    if days is None:
        days = [
            WorkingHoursDay(
                day_of_week=day,
                opening_time=kwargs.get('opening_time', '09:00'),
                closing_time=kwargs.get('closing_time', '17:00'),
                break_start=kwargs.get('break_start', '12:00'),
                break_end=kwargs.get('break_end', '13:00'),
            )
            for day in WEEKDAYS
        ]
        days.append(WorkingHoursDay(day_of_week=Weekday.SATURDAY, is_working_day=False))
    return WorkingHoursProfile(
        owner_kind=ActorKind.DOCTOR,
        owner_id=kwargs.get('doctor_id', TEST_DOCTOR_ID),
        days=days,
    )


def create_clinic_profile(**kwargs):
    """Clinic open Mon-Sat 08:00-18:00, closed Sunday"""
    days = kwargs.get('days')
    if days is None:
        days = [
            WorkingHoursDay(
                day_of_week=day,
                opening_time=kwargs.get('opening_time', '08:00'),
                closing_time=kwargs.get('closing_time', '18:00'),
            )
            for day in WEEKDAYS + [Weekday.SATURDAY]
        ]
        days.append(WorkingHoursDay(day_of_week=Weekday.SUNDAY, is_working_day=False))
    return WorkingHoursProfile(
        owner_kind=ActorKind.CLINIC,
        owner_id=kwargs.get('clinic_id', TEST_CLINIC_ID),
        days=days,
    )


def create_appointment(**kwargs):
    """Create a test appointment (Monday 10:00, 30 minutes, scheduled)"""
    return Appointment(
        id=kwargs.get('id', str(uuid.uuid4())),
        patient_id=kwargs.get('patient_id', TEST_PATIENT_ID),
        doctor_id=kwargs.get('doctor_id', TEST_DOCTOR_ID),
        clinic_id=kwargs.get('clinic_id', TEST_CLINIC_ID),
        service_id=kwargs.get('service_id', TEST_SERVICE_ID),
        session_id=kwargs.get('session_id'),
        appointment_date=kwargs.get('appointment_date', MONDAY),
        appointment_time=kwargs.get('appointment_time', '10:00'),
        duration_minutes=kwargs.get('duration_minutes', 30),
        status=kwargs.get('status', AppointmentStatus.SCHEDULED),
    )


def create_service(**kwargs):
    """Create a single-visit service"""
    return Service(
        id=kwargs.get('id', TEST_SERVICE_ID),
        name=kwargs.get('name', 'Cleaning'),
        duration_minutes=kwargs.get('duration_minutes', 30),
        sessions=kwargs.get('sessions', []),
    )


def create_session_service(**kwargs):
    """Create a three-session treatment plan (60, 45 and default-duration sessions)"""
    sessions = kwargs.get('sessions', [
        Session(id='session-1', order=1, name='Consultation', duration_minutes=60),
        Session(id='session-2', order=2, name='Treatment', duration_minutes=45),
        Session(id='session-3', order=3, name='Follow-up'),
    ])
    return create_service(
        id=kwargs.get('id', 'service-plan'),
        name=kwargs.get('name', 'Root canal plan'),
        duration_minutes=kwargs.get('duration_minutes', 30),
        sessions=sessions,
    )
