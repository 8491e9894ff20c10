"""Turn a front-desk selection into a normalized, re-validated Draft."""
from __future__ import annotations
import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Iterable
from . import config
from .availability import resolve_timezone
from .conflicts import find_conflicts
from .errors import ConflictError, ValidationError
from .intervals import normalize
from .models import Appointment, Draft

logger = logging.getLogger(__name__)

_TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_day(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD") from None


def parse_time_of_day(value: str) -> time:
    match = _TIME_OF_DAY.match(str(value).strip())
    if not match:
        raise ValidationError("Invalid time format. Use HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValidationError("Invalid time format. Use HH:MM")
    return time(hours, minutes)


def build_draft(
    patient_id: str | None,
    day: date | str | None,
    time_of_day: str | None,
    provider_id: str | None = None,
    room_id: str | None = None,
    duration_minutes: int = config.DEFAULT_DURATION_MINUTES,
    *,
    appointments: Iterable[Appointment] = (),
    tz_name: str | None = None,
    enforce_room: bool = False,
) -> Draft:
    """
    Combine date and ``HH:MM`` into a Draft, checking the provider is still free.

    ``appointments`` should be the freshest snapshot available; the selection may have
    gone stale since the slot was displayed.
    """
    missing = [
        name for name, value in (("patient", patient_id), ("date", day), ("time", time_of_day))
        if not value
    ]
    if missing:
        raise ValidationError(f"Missing information: {', '.join(missing)}")

    tz = resolve_timezone(tz_name or config.CLINIC_TIMEZONE)
    start = tz.localize(datetime.combine(parse_day(day), parse_time_of_day(time_of_day)))
    interval = normalize(
        start,
        tz.normalize(start + timedelta(minutes=duration_minutes)),
        min_duration_minutes=config.min_duration_minutes(),
    )

    snapshot = list(appointments)
    if provider_id:
        taken = find_conflicts(interval, snapshot, provider_id=provider_id)
        if taken:
            raise ConflictError(
                "Selected provider is not available at this time",
                [appt.id for appt in taken],
            )
    if enforce_room and room_id:
        taken = find_conflicts(interval, snapshot, room_id=room_id)
        if taken:
            raise ConflictError(
                "Selected room is not available at this time",
                [appt.id for appt in taken],
            )

    logger.debug("Draft for patient %s at %s", patient_id, interval.start.isoformat())
    return Draft(
        patient_id=str(patient_id),
        provider_id=provider_id or None,
        room_id=room_id or None,
        interval=interval,
    )
