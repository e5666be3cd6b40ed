"""
Tests for timeline validation and clock helpers
"""

from datetime import datetime, timedelta, timezone

import pytest

from fieldjobs.core import FixedClock, InvalidTimeline, JobRecord, as_utc, check_timeline, elapsed_minutes
from tests.conftest import T0


def record(**kwargs):
    kwargs.setdefault("logged", T0)
    kwargs.setdefault("target_completion_minutes", 60)
    return JobRecord(**kwargs)


def test_well_formed_record_passes():
    job = record(accepted=T0, on_site=T0 + timedelta(minutes=1), completed=T0 + timedelta(minutes=2))
    assert check_timeline(job) is job

@pytest.mark.parametrize("kwargs,message", [
    ({"accepted": T0 - timedelta(minutes=1)}, "before logged"),
    ({"accepted": T0 + timedelta(minutes=10), "on_site": T0 + timedelta(minutes=5)}, "before accepted"),
    ({"on_site": T0 + timedelta(minutes=5)}, "accepted is not"),
    ({"accepted": T0, "completed": T0 + timedelta(minutes=5)}, "on_site is not"),
    ({"target_completion_minutes": 0}, "must be positive"),
    ({"target_completion_minutes": -5}, "must be positive"),
    ({"status": "purple"}, "unknown status"),
])
def test_malformed_records_fail_fast(kwargs, message):
    with pytest.raises(InvalidTimeline, match=message):
        check_timeline(record(**kwargs))

def test_equal_timestamps_are_allowed():
    assert check_timeline(record(accepted=T0, on_site=T0, completed=T0))


class TestElapsedMinutes:

    def test_floors_partial_minutes(self):
        assert elapsed_minutes(T0, T0 + timedelta(minutes=59, seconds=59)) == 59

    def test_negative_span_floors_down(self):
        assert elapsed_minutes(T0, T0 - timedelta(seconds=30)) == -1

    def test_naive_values_are_treated_as_utc(self):
        naive = datetime(2026, 3, 2, 9, 0)
        assert elapsed_minutes(naive, T0 + timedelta(minutes=7)) == 7


def test_as_utc_converts_offsets():
    plus_two = datetime(2026, 3, 2, 11, 0, tzinfo=timezone(timedelta(hours=2)))
    assert as_utc(plus_two) == T0
    assert as_utc(plus_two).tzinfo == timezone.utc
    assert as_utc(None) is None

def test_fixed_clock_advances():
    clock = FixedClock(T0)
    assert clock.now() == T0
    clock.advance(minutes=61)
    assert clock.now() == T0 + timedelta(minutes=61)
