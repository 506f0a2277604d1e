"""Interval overlap primitive shared by every engine component."""

from ..models.scheduling import TimeInterval


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """
    Decide whether two same-day intervals intersect.

    Half-open semantics: an appointment ending exactly when another begins does
    not conflict. Intervals on different dates never overlap.
    """
    if a.on_date != b.on_date:
        return False
    return a.start_minutes < b.end_minutes and a.end_minutes > b.start_minutes
