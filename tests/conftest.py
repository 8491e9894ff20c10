"""Shared fixtures: a Wednesday clinic day open 09:00-17:00 UTC."""
from datetime import date, datetime, time, timezone
import pytest
from frontdesk_scheduler.models import (
    Appointment,
    OperatingHoursTemplate,
    OperatingWindow,
    Provider,
    TimeInterval,
)

DAY = date(2025, 9, 17)  # a Wednesday


@pytest.fixture
def day():
    return DAY


@pytest.fixture
def at():
    """at(10, 30) -> aware UTC datetime on the test day."""
    def _at(hour, minute=0, on=DAY):
        return datetime.combine(on, time(hour, minute), tzinfo=timezone.utc)
    return _at


@pytest.fixture
def make_appt(at):
    def _make(appt_id, provider_id, start, end, room_id=None, status="planned"):
        return Appointment(
            id=appt_id,
            patient_id=f"patient-{appt_id}",
            provider_id=provider_id,
            room_id=room_id,
            interval=TimeInterval(start=at(*start), end=at(*end)),
            status=status,
        )
    return _make


@pytest.fixture
def template():
    window = OperatingWindow(opens_at=time(9), closes_at=time(17))
    return OperatingHoursTemplate(timezone="UTC", weekly={weekday: [window] for weekday in range(5)})


@pytest.fixture
def providers():
    return [
        Provider(id="p1", display_name="Dr. Amal Haddad", specialty="Orthodontics"),
        Provider(id="p2", display_name="Dr. Omar Saleh"),
    ]
