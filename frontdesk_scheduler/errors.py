"""Recoverable scheduling outcomes surfaced to the front-desk user."""
from __future__ import annotations


class SchedulingError(Exception):
    """Base class; every subclass maps to a user-facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """A mandatory field (patient, date, time) is missing or malformed."""


class ConflictError(SchedulingError):
    """The chosen provider (or room) is already booked for the interval."""

    def __init__(self, message: str, conflicting_ids: list[str] | None = None):
        super().__init__(message)
        self.conflicting_ids = conflicting_ids or []


class NotFoundError(SchedulingError):
    """No free slot/provider pairing exists for the requested day."""
