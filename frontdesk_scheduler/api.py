from datetime import date, datetime, time, timedelta
from typing import Literal, Optional
from fastapi import FastAPI, HTTPException, Depends, Query, Body
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, Field
from . import config
from .availability import generate_slots, resolve_timezone
from .client import (
    create_appointment,
    fetch_appointments,
    fetch_operating_hours_template,
    fetch_providers,
    fetch_rooms,
    update_appointment_status,
)
from .conflicts import annotate_slots, is_room_free
from .drafts import build_draft, parse_day
from .errors import ConflictError, SchedulingError, ValidationError
from .models import ACTIVE_STATUSES, Appointment, AppointmentStatus, Provider, Room
from .resolver import find_nearest_available
from .views import can_check_in, filter_appointments, group_by_hour, summarize, view_window


class SlotOut(BaseModel):
    start: str  # ISO-8601 dateTime
    end: str
    provider_free: bool
    room_free: bool
    fully_booked: bool
    available: bool


class NearestOut(BaseModel):
    start: str
    end: str
    provider_id: str | None = None


class AppointmentRequest(BaseModel):
    patient_id: Optional[str] = None
    day: Optional[str] = Field(None, alias="date")  # YYYY-MM-DD
    time: Optional[str] = None  # HH:MM
    provider_id: Optional[str] = None
    room_id: Optional[str] = None
    duration_minutes: int = config.DEFAULT_DURATION_MINUTES

    model_config = {
        "populate_by_name": True
    }


class StatusUpdate(BaseModel):
    status: AppointmentStatus


API_KEY = config.FRONTDESK_API_KEY
# HTTPBearer scheme so Swagger-UI can attach the Authorization header globally
auth_scheme = HTTPBearer(auto_error=False)

config.setup_logging()
app = FastAPI(title="Front Desk Scheduling Service")


def verify_api_key(credentials: HTTPAuthorizationCredentials = Depends(auth_scheme)):
    """Validate Bearer token provided via Authorization header"""
    if credentials is None or credentials.scheme.lower() != "bearer" or credentials.credentials != API_KEY:
        raise HTTPException(status_code=401, detail="Invalid API key")


def _http_error(exc: SchedulingError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=exc.message)
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=409, detail={"message": exc.message, "conflicting_ids": exc.conflicting_ids})
    # NotFoundError
    return HTTPException(status_code=404, detail=exc.message)


def _parse_day_or_422(value: str) -> date:
    try:
        return parse_day(value)
    except ValidationError as exc:
        raise _http_error(exc)


def _day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    tz = resolve_timezone(tz_name)
    start = tz.localize(datetime.combine(day, time.min))
    return start, tz.localize(datetime.combine(day + timedelta(days=1), time.min))


# Reference data ------------------------------------------------------------

@app.get("/providers", dependencies=[Depends(verify_api_key)], response_model=list[Provider])
async def list_providers():
    return await fetch_providers()


@app.get("/rooms", dependencies=[Depends(verify_api_key)], response_model=list[Room])
async def list_rooms():
    return await fetch_rooms()


# Availability ----------------------------------------------------------------

@app.get("/availability", dependencies=[Depends(verify_api_key)], response_model=list[SlotOut])
async def list_availability(
    day: str = Query(..., alias="date", description="YYYY-MM-DD"),
    provider_id: Optional[str] = Query(None, description="Leave empty for any provider"),
    room_id: Optional[str] = Query(None),
    granularity: int = Query(config.SLOT_GRANULARITY_MINUTES, description="Slot length in minutes"),
):
    """Every slot of the day, annotated with provider and room availability."""
    target = _parse_day_or_422(day)
    template = await fetch_operating_hours_template(target)
    start, end = _day_bounds(target, template.timezone)
    providers = await fetch_providers()
    appointments = await fetch_appointments(start, end, statuses=ACTIVE_STATUSES)

    try:
        slots = generate_slots(target, granularity, template, room_id)
    except ValidationError as exc:
        raise _http_error(exc)

    annotated = annotate_slots(
        slots, appointments, providers,
        provider_id=provider_id, room_id=room_id,
        enforce_room=config.ENFORCE_ROOM_CONFLICTS,
    )
    return [
        SlotOut(
            start=item.slot.start.isoformat(),
            end=item.slot.end.isoformat(),
            provider_free=item.provider_free,
            room_free=item.room_free,
            fully_booked=item.fully_booked,
            available=item.available,
        )
        for item in annotated
    ]


@app.get("/availability/nearest", dependencies=[Depends(verify_api_key)], response_model=NearestOut)
async def nearest_availability(
    day: str = Query(..., alias="date", description="YYYY-MM-DD"),
    provider_id: Optional[str] = Query(None),
    room_id: Optional[str] = Query(None),
    granularity: int = Query(config.SLOT_GRANULARITY_MINUTES, description="Slot length in minutes"),
):
    """Earliest free slot of the day, binding the first free provider when none is given.

    With room conflicts enforced, slots where the requested room is taken are skipped.
    """
    target = _parse_day_or_422(day)
    template = await fetch_operating_hours_template(target)
    start, end = _day_bounds(target, template.timezone)
    providers = await fetch_providers()
    appointments = await fetch_appointments(start, end, statuses=ACTIVE_STATUSES)

    try:
        slots = generate_slots(target, granularity, template, room_id)
        if config.ENFORCE_ROOM_CONFLICTS and room_id:
            slots = [slot for slot in slots if is_room_free(slot, room_id, appointments)]
        nearest = find_nearest_available(slots, provider_id, providers, appointments)
    except SchedulingError as exc:
        raise _http_error(exc)
    return NearestOut(start=nearest.slot.start.isoformat(), end=nearest.slot.end.isoformat(), provider_id=nearest.provider_id)


# Booking -------------------------------------------------------------------------

@app.post("/appointments", dependencies=[Depends(verify_api_key)], response_model=Appointment, status_code=201)
async def book_appointment(req: AppointmentRequest = Body(...)):
    """Validate, re-check against a fresh snapshot, then create the appointment."""
    try:
        draft = build_draft(req.patient_id, req.day, req.time, req.provider_id, req.room_id, req.duration_minutes)
        # availability may have changed since the slot was shown
        snapshot = await fetch_appointments(draft.interval.start, draft.interval.end, statuses=ACTIVE_STATUSES)
        draft = build_draft(
            req.patient_id, req.day, req.time, req.provider_id, req.room_id, req.duration_minutes,
            appointments=snapshot,
            enforce_room=config.ENFORCE_ROOM_CONFLICTS,
        )
        return await create_appointment(draft)
    except SchedulingError as exc:
        raise _http_error(exc)


@app.patch("/appointments/{appt_id}", dependencies=[Depends(verify_api_key)], response_model=Appointment)
async def change_status(appt_id: str, req: StatusUpdate):
    """Check-in, seat, complete or cancel an appointment."""
    appt = await update_appointment_status(appt_id, req.status)
    if not appt:
        raise HTTPException(status_code=404, detail="No appointment found")
    return appt


# Calendar views ------------------------------------------------------------------

@app.get("/calendar", dependencies=[Depends(verify_api_key)])
async def calendar(
    view: Literal["day", "week", "month", "agenda"] = Query("week"),
    day: str = Query(..., alias="date", description="YYYY-MM-DD"),
    provider_id: Optional[str] = Query(None),
    room_id: Optional[str] = Query(None),
    status: Optional[AppointmentStatus] = Query(None),
):
    """Appointments for the view window with summary counts; agenda view adds hour groups."""
    current = _parse_day_or_422(day)
    first, last = view_window(view, current)
    tz_name = config.CLINIC_TIMEZONE
    start, _ = _day_bounds(first, tz_name)
    end, _ = _day_bounds(last, tz_name)

    appointments = filter_appointments(
        await fetch_appointments(start, end),
        provider_id=provider_id, room_id=room_id, status=status,
    )
    today = datetime.now(resolve_timezone(tz_name)).date()

    def _row(appt: Appointment) -> dict:
        return {**appt.model_dump(mode="json"), "can_check_in": can_check_in(appt, today, tz_name)}

    body = {
        "start": first.isoformat(),
        "end": last.isoformat(),
        "appointments": [_row(a) for a in appointments],
        "summary": summarize(appointments),
    }
    if view == "agenda":
        body["agenda"] = [
            {"hour": hour, "items": [_row(a) for a in items]}
            for hour, items in group_by_hour(appointments, tz_name)
        ]
    return body
