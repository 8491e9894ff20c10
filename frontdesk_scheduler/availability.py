"""
Slot generation for a single clinic day.

Operating windows come from the weekly template (or a room's own hours when it has
them), adjusted by dated exceptions:
- closed: removes the whole day, or only its time range when one is given
- blocked: removes a time range
- extra: adds a window
Each window is then cut into consecutive slots of ``granularity_minutes``.
"""
from __future__ import annotations
import logging
from datetime import date, datetime, time, timedelta
import pytz
from . import config
from .errors import ValidationError
from .intervals import merge_intervals, subtract_interval
from .models import (
    AvailabilityQuery,
    OperatingHoursTemplate,
    OperatingWindow,
    Slot,
    TimeInterval,
)

logger = logging.getLogger(__name__)


def resolve_timezone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown clinic timezone %r, using UTC", name)
        return pytz.UTC


def _localize(tz, day: date, t: time) -> datetime:
    return tz.localize(datetime.combine(day, t))


def default_template() -> OperatingHoursTemplate:
    """Fallback hours from settings, open every weekday."""
    window = OperatingWindow(
        opens_at=time.fromisoformat(config.CLINIC_OPENS_AT),
        closes_at=time.fromisoformat(config.CLINIC_CLOSES_AT),
    )
    return OperatingHoursTemplate(
        timezone=config.CLINIC_TIMEZONE,
        weekly={weekday: [window] for weekday in range(7)},
    )


def operating_windows(day: date, template: OperatingHoursTemplate, room_id: str | None = None) -> list[TimeInterval]:
    """Return the merged, ordered open windows for ``day``."""
    tz = resolve_timezone(template.timezone)

    intervals = []
    for window in template.windows_for(day.weekday(), room_id):
        if window.closes_at <= window.opens_at:
            logger.debug("Skipping empty window %s-%s", window.opens_at, window.closes_at)
            continue
        intervals.append(TimeInterval(
            start=_localize(tz, day, window.opens_at),
            end=_localize(tz, day, window.closes_at),
        ))

    for exc in template.exceptions_for(day, room_id):
        if exc.kind == "extra":
            if exc.has_range and exc.end_time > exc.start_time:
                intervals.append(TimeInterval(
                    start=_localize(tz, day, exc.start_time),
                    end=_localize(tz, day, exc.end_time),
                ))
        elif exc.has_range:
            block = TimeInterval(
                start=_localize(tz, day, exc.start_time),
                end=_localize(tz, day, exc.end_time),
            )
            intervals = [piece for iv in intervals for piece in subtract_interval(iv, block)]
        elif exc.kind == "closed":
            intervals = []

    return merge_intervals(intervals)


def generate_slots(
    day: date,
    granularity_minutes: int,
    template: OperatingHoursTemplate,
    room_id: str | None = None,
) -> list[Slot]:
    """
    Cut the day's operating windows into ordered slots.

    A slot is emitted only when it fits entirely inside its window, so 09:00-17:00 at
    30 minutes yields 16 slots. Same inputs always produce the same list.
    """
    if granularity_minutes <= 0:
        raise ValidationError("Slot granularity must be a positive number of minutes")

    tz = resolve_timezone(template.timezone)
    step = timedelta(minutes=granularity_minutes)
    slots: list[Slot] = []
    for window in operating_windows(day, template, room_id):
        cursor = window.start
        while cursor + step <= window.end:
            end = tz.normalize(cursor + step)
            slots.append(Slot(interval=TimeInterval(start=cursor, end=end)))
            cursor = end

    logger.debug("Generated %d slots for %s (room=%s)", len(slots), day, room_id)
    return slots


def slots_for_query(query: AvailabilityQuery, template: OperatingHoursTemplate) -> list[Slot]:
    return generate_slots(query.day, query.granularity_minutes, template, query.room_id)
