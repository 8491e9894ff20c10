from datetime import timedelta
import pytest
from frontdesk_scheduler.intervals import merge_intervals, normalize, overlaps, subtract_interval
from frontdesk_scheduler.models import TimeInterval


def iv(at, start, end):
    return TimeInterval(start=at(*start), end=at(*end))


def test_overlap_is_symmetric(at):
    cases = [
        ((9, 0), (10, 0), (9, 30), (10, 30)),
        ((9, 0), (10, 0), (10, 0), (11, 0)),
        ((9, 0), (12, 0), (10, 0), (11, 0)),
        ((9, 0), (9, 30), (13, 0), (14, 0)),
    ]
    for a_start, a_end, b_start, b_end in cases:
        a, b = iv(at, a_start, a_end), iv(at, b_start, b_end)
        assert overlaps(a, b) == overlaps(b, a)


def test_touching_intervals_do_not_overlap(at):
    a = iv(at, (9, 0), (9, 30))
    b = iv(at, (9, 30), (10, 0))
    assert not overlaps(a, b)
    assert not overlaps(b, a)


def test_containment_overlaps(at):
    assert overlaps(iv(at, (9, 0), (12, 0)), iv(at, (10, 0), (10, 15)))


@pytest.mark.parametrize("end_offset,minutes", [(0, 30), (-15, 30), (45, 30), (0, 0), (-5, -10)])
def test_normalize_always_ends_after_start(at, end_offset, minutes):
    start = at(14, 0)
    result = normalize(start, start + timedelta(minutes=end_offset), minutes)
    assert result.end > result.start


def test_normalize_substitutes_min_duration(at):
    result = normalize(at(14, 0), at(14, 0))
    assert result.end - result.start == timedelta(minutes=30)


def test_normalize_keeps_valid_interval(at):
    result = normalize(at(14, 0), at(15, 15), 30)
    assert result.end == at(15, 15)


def test_interval_model_repairs_inverted_bounds(at):
    interval = TimeInterval(start=at(11, 0), end=at(10, 0))
    assert interval.end == at(11, 30)


def test_naive_datetimes_are_utc(at):
    interval = TimeInterval(start=at(9, 0).replace(tzinfo=None), end=at(10, 0).replace(tzinfo=None))
    assert interval.start == at(9, 0)


def test_merge_overlapping_and_adjacent(at):
    merged = merge_intervals([
        iv(at, (13, 0), (14, 0)),
        iv(at, (9, 0), (10, 30)),
        iv(at, (10, 0), (11, 0)),
        iv(at, (11, 0), (12, 0)),
    ])
    assert merged == [iv(at, (9, 0), (12, 0)), iv(at, (13, 0), (14, 0))]


def test_merge_empty():
    assert merge_intervals([]) == []


def test_subtract_no_overlap(at):
    interval = iv(at, (9, 0), (12, 0))
    assert subtract_interval(interval, iv(at, (14, 0), (15, 0))) == [interval]


def test_subtract_covers_all(at):
    assert subtract_interval(iv(at, (10, 0), (11, 0)), iv(at, (9, 0), (12, 0))) == []


def test_subtract_splits_in_middle(at):
    pieces = subtract_interval(iv(at, (9, 0), (17, 0)), iv(at, (12, 0), (13, 0)))
    assert pieces == [iv(at, (9, 0), (12, 0)), iv(at, (13, 0), (17, 0))]


def test_subtract_start_and_end(at):
    assert subtract_interval(iv(at, (9, 0), (12, 0)), iv(at, (8, 0), (10, 0))) == [iv(at, (10, 0), (12, 0))]
    assert subtract_interval(iv(at, (9, 0), (12, 0)), iv(at, (11, 0), (13, 0))) == [iv(at, (9, 0), (11, 0))]
