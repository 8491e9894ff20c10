import pytest
from frontdesk_scheduler.availability import generate_slots
from frontdesk_scheduler.errors import NotFoundError
from frontdesk_scheduler.models import Provider
from frontdesk_scheduler.resolver import find_nearest_available


def test_any_provider_takes_first_free_provider_at_earliest_slot(day, template, at, make_appt, providers):
    appts = [make_appt("a1", "p1", (9, 0), (10, 0))]
    result = find_nearest_available(generate_slots(day, 30, template), None, providers, appts)
    assert result.slot.start == at(9, 0)
    assert result.provider_id == "p2"


def test_provider_order_is_preserved(day, template, at, providers):
    result = find_nearest_available(generate_slots(day, 30, template), None, providers, [])
    assert result.provider_id == "p1"
    reversed_result = find_nearest_available(generate_slots(day, 30, template), None, providers[::-1], [])
    assert reversed_result.provider_id == "p2"


def test_pinned_provider_waits_for_own_free_slot(day, template, at, make_appt, providers):
    appts = [make_appt("a1", "p1", (9, 0), (10, 0))]
    result = find_nearest_available(generate_slots(day, 30, template), "p1", providers, appts)
    assert result.slot.start == at(10, 0)
    assert result.provider_id == "p1"


def test_pinned_provider_not_in_list_still_resolved(day, template, at):
    result = find_nearest_available(generate_slots(day, 30, template), "locum", [], [])
    assert result.slot.start == at(9, 0)
    assert result.provider_id == "locum"


def test_only_provider_fully_booked_raises(day, template, make_appt):
    only = [Provider(id="p1", display_name="Dr. Amal Haddad")]
    appts = [make_appt("a1", "p1", (9, 0), (17, 0))]
    slots = generate_slots(day, 30, template)
    with pytest.raises(NotFoundError):
        find_nearest_available(slots, None, only, appts)
    with pytest.raises(NotFoundError):
        find_nearest_available(slots, "p1", only, appts)


def test_no_slots_raises(providers):
    with pytest.raises(NotFoundError):
        find_nearest_available([], None, providers, [])


def test_no_providers_in_any_mode_raises(day, template):
    with pytest.raises(NotFoundError):
        find_nearest_available(generate_slots(day, 30, template), None, [], [])
