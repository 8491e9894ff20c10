from __future__ import annotations
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

MIN_DURATION_MINUTES = 30


class TimeInterval(BaseModel):
    """Half-open ``[start, end)``; ``end`` is always after ``start``."""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        # naive timestamps from the store are UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("end")
    @classmethod
    def _end_after_start(cls, v: datetime, info: ValidationInfo) -> datetime:
        start = info.data.get("start")
        if start is not None and v <= start:
            return start + timedelta(minutes=MIN_DURATION_MINUTES)
        return v

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class AppointmentStatus(str, Enum):
    planned = "planned"
    arrived = "arrived"
    in_chair = "in_chair"
    completed = "completed"
    cancelled = "cancelled"


# statuses that still hold a provider's time
ACTIVE_STATUSES = tuple(s for s in AppointmentStatus if s is not AppointmentStatus.cancelled)


class Appointment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    patient_id: str
    provider_id: str | None = None
    room_id: str | None = None
    interval: TimeInterval
    status: AppointmentStatus = AppointmentStatus.planned


class Provider(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    specialty: str | None = None


class Room(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class Slot(BaseModel):
    """A generated candidate booking window; never persisted."""
    model_config = ConfigDict(frozen=True)

    interval: TimeInterval

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end


class AvailabilityQuery(BaseModel):
    day: date = Field(alias="date")
    granularity_minutes: int = 30
    room_id: str | None = None

    model_config = {
        "populate_by_name": True
    }


class Draft(BaseModel):
    """Normalized appointment payload handed to the persistence layer."""
    model_config = ConfigDict(frozen=True)

    patient_id: str
    provider_id: str | None = None
    room_id: str | None = None
    interval: TimeInterval

    def to_payload(self) -> dict[str, str]:
        payload = {
            "patient_id": self.patient_id,
            "starts_at": self.interval.start.isoformat(),
            "ends_at": self.interval.end.isoformat(),
        }
        if self.provider_id:
            payload["provider_id"] = self.provider_id
        if self.room_id:
            payload["room_id"] = self.room_id
        return payload


class NearestSlot(BaseModel):
    slot: Slot
    provider_id: str | None = None


class SlotAvailability(BaseModel):
    slot: Slot
    provider_free: bool
    room_free: bool
    fully_booked: bool
    available: bool


# Operating-hours template -------------------------------------------------

class OperatingWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    opens_at: time
    closes_at: time


class ScheduleException(BaseModel):
    """Dated override: ``closed`` (whole day when no times), ``blocked`` or ``extra``."""
    day: date
    kind: Literal["closed", "blocked", "extra"]
    start_time: time | None = None
    end_time: time | None = None
    room_id: str | None = None

    @property
    def has_range(self) -> bool:
        return self.start_time is not None and self.end_time is not None


class OperatingHoursTemplate(BaseModel):
    """Weekly clinic hours keyed by weekday (0 = Monday) plus dated exceptions."""
    timezone: str = "UTC"
    weekly: dict[int, list[OperatingWindow]] = Field(default_factory=dict)
    room_hours: dict[str, dict[int, list[OperatingWindow]]] = Field(default_factory=dict)
    exceptions: list[ScheduleException] = Field(default_factory=list)

    def windows_for(self, weekday: int, room_id: str | None = None) -> list[OperatingWindow]:
        if room_id and room_id in self.room_hours:
            return list(self.room_hours[room_id].get(weekday, []))
        return list(self.weekly.get(weekday, []))

    def exceptions_for(self, day: date, room_id: str | None = None) -> list[ScheduleException]:
        return [
            exc for exc in self.exceptions
            if exc.day == day and (exc.room_id is None or exc.room_id == room_id)
        ]
