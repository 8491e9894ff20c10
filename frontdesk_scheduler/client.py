"""Async data-access client for the clinic's Supabase (PostgREST) store.
Authenticates with the service key, sent both as ``apikey`` and as a bearer token.
"""
from __future__ import annotations
import logging
from datetime import date, datetime, timedelta
from typing import Iterable
import httpx
from . import config
from .availability import default_template
from .errors import ConflictError
from .intervals import normalize, overlaps
from .models import (
    Appointment,
    AppointmentStatus,
    Draft,
    OperatingHoursTemplate,
    OperatingWindow,
    Provider,
    Room,
    ScheduleException,
    TimeInterval,
)

logger = logging.getLogger(__name__)

_BASE_URL = f"{config.SUPABASE_URL}/rest/v1"
_SERVICE_KEY = config.SUPABASE_SERVICE_KEY

_APPOINTMENT_FIELDS = "id,patient_id,provider_id,room_id,starts_at,ends_at,status,providers(id)"


def _headers(**extra: str) -> dict[str, str]:
    headers = {
        "apikey": _SERVICE_KEY,
        "Authorization": f"Bearer {_SERVICE_KEY}",
        "Accept": "application/json",
    }
    headers.update(extra)
    return headers


def _to_appointment(row: dict) -> Appointment | None:
    """Map a store row; a missing or non-positive end becomes the default duration.

    Rows without ``starts_at`` or with a status outside the front-desk flow are skipped.
    """
    if not row.get("starts_at"):
        logger.warning("Skipping appointment %s without starts_at", row.get("id"))
        return None

    try:
        status = AppointmentStatus(row.get("status") or AppointmentStatus.planned)
    except ValueError:
        logger.warning("Skipping appointment %s with unknown status %r", row.get("id"), row.get("status"))
        return None

    start = datetime.fromisoformat(row["starts_at"])
    end = datetime.fromisoformat(row["ends_at"]) if row.get("ends_at") else start
    provider_id = row.get("provider_id") or (row.get("providers") or {}).get("id")

    return Appointment(
        id=str(row["id"]),
        patient_id=str(row.get("patient_id", "")),
        provider_id=provider_id,
        room_id=row.get("room_id"),
        interval=normalize(start, end, min_duration_minutes=config.min_duration_minutes()),
        status=status,
    )


async def fetch_appointments(
    range_start: datetime,
    range_end: datetime,
    provider_id: str | None = None,
    room_id: str | None = None,
    statuses: Iterable[AppointmentStatus] | None = None,
) -> list[Appointment]:
    """Return appointments overlapping ``[range_start, range_end)``, ordered by start.

    Overlap is decided after normalization, so a row stored with ``ends_at <= starts_at``
    shortly before the range still counts once it is given its default length.
    """
    # rows starting within one default length of the range may reach into it once normalized
    lookback = range_start - timedelta(minutes=config.min_duration_minutes())
    params: list[tuple[str, str]] = [
        ("select", _APPOINTMENT_FIELDS),
        ("starts_at", f"lt.{range_end.isoformat()}"),
        ("or", f"(ends_at.gt.{range_start.isoformat()},ends_at.is.null,starts_at.gt.{lookback.isoformat()})"),
        ("order", "starts_at.asc"),
    ]
    if provider_id:
        params.append(("provider_id", f"eq.{provider_id}"))
    if room_id:
        params.append(("room_id", f"eq.{room_id}"))
    if statuses is not None:
        params.append(("status", f"in.({','.join(AppointmentStatus(s).value for s in statuses)})"))

    async with httpx.AsyncClient(http2=True, timeout=15) as client:
        resp = await client.get(f"{_BASE_URL}/appointments", headers=_headers(), params=params)
        resp.raise_for_status()
        rows = resp.json()

    window = TimeInterval(start=range_start, end=range_end)
    appointments = [
        appt for appt in map(_to_appointment, rows)
        if appt is not None and overlaps(appt.interval, window)
    ]
    logger.debug("Fetched %d appointments for %s..%s", len(appointments), range_start, range_end)
    return appointments


async def fetch_providers() -> list[Provider]:
    """Active providers in display order; this order drives first-fit resolution."""
    params = {"select": "id,display_name,specialty", "order": "display_name.asc"}
    async with httpx.AsyncClient(http2=True, timeout=15) as client:
        resp = await client.get(f"{_BASE_URL}/providers", headers=_headers(), params=params)
        resp.raise_for_status()
        rows = resp.json()

    return [
        Provider(id=str(row["id"]), display_name=row.get("display_name") or "", specialty=row.get("specialty"))
        for row in rows
    ]


async def fetch_rooms() -> list[Room]:
    params = {"select": "id,name", "order": "name.asc"}
    async with httpx.AsyncClient(http2=True, timeout=15) as client:
        resp = await client.get(f"{_BASE_URL}/rooms", headers=_headers(), params=params)
        resp.raise_for_status()
        rows = resp.json()

    return [Room(id=str(row["id"]), name=row.get("name") or "") for row in rows]


async def fetch_operating_hours_template(day: date) -> OperatingHoursTemplate:
    """Weekly hours (weekday 0 = Monday) plus the exceptions dated ``day``.

    Falls back to the configured default hours when the store has none.
    """
    async with httpx.AsyncClient(http2=True, timeout=15) as client:
        hours_resp = await client.get(
            f"{_BASE_URL}/operating_hours",
            headers=_headers(),
            params={"select": "weekday,opens_at,closes_at,room_id"},
        )
        hours_resp.raise_for_status()
        exc_resp = await client.get(
            f"{_BASE_URL}/schedule_exceptions",
            headers=_headers(),
            params={"select": "date,kind,start_time,end_time,room_id", "date": f"eq.{day.isoformat()}"},
        )
        exc_resp.raise_for_status()

    exceptions = [
        ScheduleException(
            day=row["date"],
            kind=row["kind"],
            start_time=row.get("start_time"),
            end_time=row.get("end_time"),
            room_id=row.get("room_id"),
        )
        for row in exc_resp.json()
    ]

    hour_rows = hours_resp.json()
    if not hour_rows:
        return default_template().model_copy(update={"exceptions": exceptions})

    weekly: dict[int, list[OperatingWindow]] = {}
    room_hours: dict[str, dict[int, list[OperatingWindow]]] = {}
    for row in hour_rows:
        window = OperatingWindow(opens_at=row["opens_at"], closes_at=row["closes_at"])
        target = room_hours.setdefault(str(row["room_id"]), {}) if row.get("room_id") else weekly
        target.setdefault(int(row["weekday"]), []).append(window)

    return OperatingHoursTemplate(
        timezone=config.CLINIC_TIMEZONE,
        weekly=weekly,
        room_hours=room_hours,
        exceptions=exceptions,
    )


async def create_appointment(draft: Draft) -> Appointment:
    """Persist a draft as a planned appointment.

    The store's exclusion constraint answers 409 when another booking won the race.
    """
    body = {**draft.to_payload(), "status": AppointmentStatus.planned.value}
    headers = _headers(**{"Content-Type": "application/json", "Prefer": "return=representation"})
    async with httpx.AsyncClient(http2=True, timeout=15) as client:
        resp = await client.post(f"{_BASE_URL}/appointments", headers=headers, json=body)
        if resp.status_code == 409:
            raise ConflictError("Selected provider is not available at this time")
        resp.raise_for_status()
        rows = resp.json()

    appointment = _to_appointment(rows[0])
    logger.info("Created appointment %s for patient %s", appointment.id, appointment.patient_id)
    return appointment


async def update_appointment_status(appt_id: str, status: AppointmentStatus) -> Appointment | None:
    """Move an appointment through the front-desk flow (arrived, in chair, ...). None if unknown."""
    headers = _headers(**{"Content-Type": "application/json", "Prefer": "return=representation"})
    params = {"id": f"eq.{appt_id}", "select": _APPOINTMENT_FIELDS}
    async with httpx.AsyncClient(http2=True, timeout=15) as client:
        resp = await client.patch(
            f"{_BASE_URL}/appointments",
            headers=headers,
            params=params,
            json={"status": AppointmentStatus(status).value},
        )
        resp.raise_for_status()
        rows = resp.json()

    if not rows:
        return None
    logger.info("Appointment %s is now %s", appt_id, AppointmentStatus(status).value)
    return _to_appointment(rows[0])
