"""Calendar-view helpers: query windows, filters, agenda grouping and counts."""
from __future__ import annotations
from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Literal
from .availability import resolve_timezone
from .models import Appointment, AppointmentStatus

View = Literal["day", "week", "month", "agenda"]


def view_window(view: View, current: date) -> tuple[date, date]:
    """Half-open ``[start, end)`` day range the calendar must fetch for ``view``."""
    if view == "day":
        return current, current + timedelta(days=1)
    if view == "month":
        first = current.replace(day=1)
        next_month = (first + timedelta(days=32)).replace(day=1)
        return first, next_month
    # week and agenda: Sunday through Saturday
    start = current - timedelta(days=(current.weekday() + 1) % 7)
    return start, start + timedelta(days=7)


def filter_appointments(
    appointments: Iterable[Appointment],
    provider_id: str | None = None,
    room_id: str | None = None,
    status: AppointmentStatus | None = None,
) -> list[Appointment]:
    return [
        appt for appt in appointments
        if (provider_id is None or appt.provider_id == provider_id)
        and (room_id is None or appt.room_id == room_id)
        and (status is None or appt.status == status)
    ]


def summarize(appointments: Iterable[Appointment]) -> dict[str, int]:
    """Total plus one count per status (zeros included)."""
    appointments = list(appointments)
    counts = Counter(appt.status for appt in appointments)
    summary = {"total": len(appointments)}
    for status in AppointmentStatus:
        summary[status.value] = counts.get(status, 0)
    return summary


def group_by_hour(appointments: Iterable[Appointment], tz_name: str) -> list[tuple[str, list[Appointment]]]:
    """Agenda buckets keyed ``HH:00`` in clinic time, each sorted by start."""
    tz = resolve_timezone(tz_name)
    groups: dict[str, list[Appointment]] = {}
    for appt in appointments:
        hour = appt.interval.start.astimezone(tz).strftime("%H:00")
        groups.setdefault(hour, []).append(appt)
    return [
        (hour, sorted(groups[hour], key=lambda a: a.interval.start))
        for hour in sorted(groups)
    ]


def can_check_in(appointment: Appointment, today: date, tz_name: str) -> bool:
    """Only planned appointments starting today can be checked in."""
    tz = resolve_timezone(tz_name)
    return (
        appointment.status == AppointmentStatus.planned
        and appointment.interval.start.astimezone(tz).date() == today
    )
