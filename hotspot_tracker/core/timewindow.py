"""TemporalWindow — turns sensor acquisition date/time pairs into instants.

FIRMS reports each detection as a calendar date (``2026-01-30``) and a
time-of-day token without separator (``945`` = 09:45 UTC).  A detection
whose pair cannot be read simply does not contribute to its cluster's
seen-window; it never fails the cluster.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Iterable

from hotspot_tracker.domain.detection import DetectionPoint

_TIME_TOKEN = re.compile(r"^\d{1,4}$")


def parse_acquisition(acq_date: str | None, acq_time: str | int | None) -> datetime | None:
    """Combine a date string and an HHMM token into a UTC datetime.

    Returns None when the date is missing or malformed, when the time
    token is not 1–4 digits, or when hour/minute are out of range.
    A missing time token means UTC midnight.
    """
    if not acq_date or not acq_date.strip():
        return None
    try:
        day = date.fromisoformat(acq_date.strip())
    except ValueError:
        return None

    if acq_time is None:
        return datetime.combine(day, time(0, 0), tzinfo=timezone.utc)

    token = str(acq_time).strip()
    if not token:
        return datetime.combine(day, time(0, 0), tzinfo=timezone.utc)
    if not _TIME_TOKEN.match(token):
        return None

    padded = token.zfill(4)
    hour, minute = int(padded[:2]), int(padded[2:])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


def seen_window(points: Iterable[DetectionPoint]) -> tuple[datetime | None, datetime | None]:
    """Return (first, last) acquisition instants across *points*.

    Both are None if no point has a parseable acquisition time.
    """
    instants = [
        ts
        for ts in (parse_acquisition(p.acq_date, p.acq_time) for p in points)
        if ts is not None
    ]
    if not instants:
        return None, None
    return min(instants), max(instants)
