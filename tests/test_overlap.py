"""
Tests for the interval overlap primitive
"""

import itertools

from clinic_scheduling.models import TimeInterval
from clinic_scheduling.services.overlap import overlaps

from .fixtures import MONDAY, TUESDAY


def interval(start, duration, on_date=MONDAY):
    return TimeInterval(on_date=on_date, start_minutes=start, duration_minutes=duration)


class TestOverlaps:
    """Test half-open overlap semantics"""

    def test_adjacent_intervals_do_not_overlap(self):
        """10:00-10:30 and 10:30-11:00 share only a boundary"""
        a = interval('10:00', 30)
        b = interval('10:30', 30)

        assert overlaps(a, b) is False
        assert overlaps(b, a) is False

    def test_partial_overlap(self):
        """Test one interval starting inside another"""
        assert overlaps(interval('10:00', 60), interval('10:30', 60)) is True

    def test_containment(self):
        """Test an interval fully inside another"""
        assert overlaps(interval('09:00', 480), interval('12:00', 15)) is True
        assert overlaps(interval('12:00', 15), interval('09:00', 480)) is True

    def test_identical_intervals(self):
        """Test identical intervals overlap"""
        assert overlaps(interval('10:00', 30), interval('10:00', 30)) is True

    def test_one_minute_overlap(self):
        """Test the smallest possible overlap"""
        assert overlaps(interval('10:00', 31), interval('10:30', 30)) is True

    def test_different_dates_never_overlap(self):
        """Test same times on different days"""
        assert overlaps(interval('10:00', 60), interval('10:00', 60, TUESDAY)) is False

    def test_symmetry(self):
        """overlaps(a, b) == overlaps(b, a) for a grid of intervals"""
        starts = [540, 570, 600, 630, 660]
        durations = [15, 30, 60, 90]
        intervals = [interval(s, d) for s, d in itertools.product(starts, durations)]

        for a, b in itertools.product(intervals, repeat=2):
            assert overlaps(a, b) == overlaps(b, a)
