"""Front-desk appointment availability and conflict-resolution engine."""
from .errors import ConflictError, NotFoundError, SchedulingError, ValidationError
from .models import (
    Appointment,
    AppointmentStatus,
    AvailabilityQuery,
    Draft,
    NearestSlot,
    OperatingHoursTemplate,
    Provider,
    Room,
    Slot,
    SlotAvailability,
    TimeInterval,
)
from .intervals import overlaps, normalize
from .availability import generate_slots, slots_for_query, default_template
from .conflicts import is_provider_free, is_room_free, is_fully_booked, annotate_slots
from .resolver import find_nearest_available
from .drafts import build_draft

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "AvailabilityQuery",
    "ConflictError",
    "Draft",
    "NearestSlot",
    "NotFoundError",
    "OperatingHoursTemplate",
    "Provider",
    "Room",
    "SchedulingError",
    "Slot",
    "SlotAvailability",
    "TimeInterval",
    "ValidationError",
    "annotate_slots",
    "build_draft",
    "default_template",
    "find_nearest_available",
    "generate_slots",
    "is_fully_booked",
    "is_provider_free",
    "is_room_free",
    "normalize",
    "overlaps",
    "slots_for_query",
]
