"""
Pytest configuration for scheduling engine tests
"""

import pytest

from clinic_scheduling.lifecycle.manager import StatusLifecycle
from clinic_scheduling.services.availability import AvailabilityComputer
from clinic_scheduling.services.booking import BookingEngine
from clinic_scheduling.services.sessions import SessionBookingValidator
from clinic_scheduling.services.working_hours import (
    InMemoryWorkingHoursSource,
    WorkingHoursResolver,
)

from .fixtures import (
    TEST_CLINIC_ID,
    TEST_ORGANIZATION_ID,
    create_clinic_profile,
    create_doctor_profile,
    fixed_clock,
)


@pytest.fixture
def source():
    """Doctor Mon-Fri 09:00-17:00 (break 12-13) at a clinic open Mon-Sat 08:00-18:00"""
    return InMemoryWorkingHoursSource(
        profiles=[create_doctor_profile(), create_clinic_profile()],
        clinic_organizations={TEST_CLINIC_ID: TEST_ORGANIZATION_ID},
    )


@pytest.fixture
def resolver(source):
    return WorkingHoursResolver(source)


@pytest.fixture
def availability(resolver):
    return AvailabilityComputer(resolver)


@pytest.fixture
def session_validator():
    return SessionBookingValidator()


@pytest.fixture
def lifecycle(resolver):
    return StatusLifecycle(resolver, clock=fixed_clock)


@pytest.fixture
def engine(source):
    return BookingEngine(source, clock=fixed_clock)
