"""Provider and room conflict checks against an appointment snapshot."""
from __future__ import annotations
from typing import Iterable, Sequence
from .intervals import overlaps
from .models import Appointment, Provider, Slot, SlotAvailability, TimeInterval


def find_conflicts(
    interval: TimeInterval,
    appointments: Iterable[Appointment],
    provider_id: str | None = None,
    room_id: str | None = None,
) -> list[Appointment]:
    """Appointments overlapping ``interval`` for the given provider and/or room."""
    return [
        appt for appt in appointments
        if (provider_id is None or appt.provider_id == provider_id)
        and (room_id is None or appt.room_id == room_id)
        and overlaps(appt.interval, interval)
    ]


def is_provider_free(slot: Slot, provider_id: str | None, appointments: Iterable[Appointment]) -> bool:
    """No pinned provider means nothing to check."""
    if provider_id is None:
        return True
    return not any(
        appt.provider_id == provider_id and overlaps(appt.interval, slot.interval)
        for appt in appointments
    )


def is_room_free(slot: Slot, room_id: str | None, appointments: Iterable[Appointment]) -> bool:
    if room_id is None:
        return True
    return not any(
        appt.room_id == room_id and overlaps(appt.interval, slot.interval)
        for appt in appointments
    )


def is_fully_booked(slot: Slot, providers: Sequence[Provider], appointments: Sequence[Appointment]) -> bool:
    """True when every provider is busy during the slot; an empty set is never fully booked."""
    if not providers:
        return False
    return all(not is_provider_free(slot, p.id, appointments) for p in providers)


def annotate_slots(
    slots: Iterable[Slot],
    appointments: Sequence[Appointment],
    providers: Sequence[Provider],
    provider_id: str | None = None,
    room_id: str | None = None,
    enforce_room: bool = False,
) -> list[SlotAvailability]:
    """Mark each slot free or taken for display."""
    annotated = []
    for slot in slots:
        provider_free = is_provider_free(slot, provider_id, appointments)
        room_free = is_room_free(slot, room_id, appointments)
        fully_booked = is_fully_booked(slot, providers, appointments)
        available = provider_free if provider_id is not None else not fully_booked
        if enforce_room:
            available = available and room_free
        annotated.append(SlotAvailability(
            slot=slot,
            provider_free=provider_free,
            room_free=room_free,
            fully_booked=fully_booked,
            available=available,
        ))
    return annotated
