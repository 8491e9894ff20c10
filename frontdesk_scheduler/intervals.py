"""Half-open interval arithmetic used by slot generation and conflict checks."""
from __future__ import annotations
from datetime import datetime, timedelta
from typing import Iterable
from .models import MIN_DURATION_MINUTES, TimeInterval


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """True when the intervals share time; touching endpoints do not count."""
    return a.start < b.end and a.end > b.start


def normalize(start: datetime, end: datetime, min_duration_minutes: int = MIN_DURATION_MINUTES) -> TimeInterval:
    """Build an interval, substituting ``start + min_duration_minutes`` when ``end <= start``."""
    if end <= start:
        end = start + timedelta(minutes=min_duration_minutes)
    return TimeInterval(start=start, end=end)


def merge_intervals(intervals: Iterable[TimeInterval]) -> list[TimeInterval]:
    """Union overlapping or adjacent intervals into a sorted list."""
    ordered = sorted(intervals, key=lambda iv: iv.start)
    if not ordered:
        return []

    merged = [ordered[0]]
    for current in ordered[1:]:
        last = merged[-1]
        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = TimeInterval(start=last.start, end=current.end)
        else:
            merged.append(current)
    return merged


def subtract_interval(interval: TimeInterval, block: TimeInterval) -> list[TimeInterval]:
    """Remove ``block`` from ``interval``; yields zero, one or two pieces."""
    if not overlaps(interval, block):
        return [interval]

    pieces = []
    if block.start > interval.start:
        pieces.append(TimeInterval(start=interval.start, end=block.start))
    if block.end < interval.end:
        pieces.append(TimeInterval(start=block.end, end=interval.end))
    return pieces
