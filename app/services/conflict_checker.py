"""
Conflict Checker - showing schedule overlap detection
Pure functions; intervals are half-open [start, end)
"""
from typing import Iterable, Optional, Tuple
from datetime import datetime, timezone


Interval = Tuple[datetime, datetime]


def as_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime (naive values are taken as UTC)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def intervals_overlap(first: Interval, second: Interval) -> bool:
    """[s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1"""
    start, end = as_utc(first[0]), as_utc(first[1])
    other_start, other_end = as_utc(second[0]), as_utc(second[1])
    return start < other_end and other_start < end


def find_conflict(
    candidate: Interval,
    existing: Iterable[Tuple[str, datetime, datetime]],
    exclude_id: Optional[str] = None,
) -> Optional[str]:
    """
    Return the id of the first existing showing overlapping the candidate interval.
    existing yields (showing_id, start, end) for one listing;
    exclude_id skips the showing being updated.
    """
    for showing_id, start, end in existing:
        if exclude_id is not None and showing_id == exclude_id:
            continue
        if intervals_overlap(candidate, (start, end)):
            return showing_id
    return None


def has_scheduling_conflict(
    candidate: Interval,
    existing: Iterable[Tuple[str, datetime, datetime]],
    exclude_id: Optional[str] = None,
) -> bool:
    return find_conflict(candidate, existing, exclude_id) is not None
