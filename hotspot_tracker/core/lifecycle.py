"""LifecycleStateMachine — operational status from age and severity.

Status is NOT transitioned incrementally.  It is a pure function of
(severity, hours since last observation) recomputed on every merge, so a
long-quiet event that re-activates moves "backwards" to escalating/active.

    age > 48h            → resolved
    age > 18h            → contained
    age > 6h             → stabilizing
    critical or high     → escalating
    otherwise            → active

Unknown last observation → escalating if critical, else active.
"""

from __future__ import annotations

import math
from datetime import datetime

from hotspot_tracker.domain.enums import EventStatus, Severity

RESOLVED_AFTER_HOURS = 48.0
CONTAINED_AFTER_HOURS = 18.0
STABILIZING_AFTER_HOURS = 6.0

_ESCALATING_SEVERITIES = frozenset({Severity.CRITICAL, Severity.HIGH})


def status_for_age(age_hours: float | None, severity: Severity) -> EventStatus:
    """Status for a known (or unknown) age in hours."""
    if age_hours is None:
        return EventStatus.ESCALATING if severity == Severity.CRITICAL else EventStatus.ACTIVE

    if age_hours > RESOLVED_AFTER_HOURS:
        return EventStatus.RESOLVED
    if age_hours > CONTAINED_AFTER_HOURS:
        return EventStatus.CONTAINED
    if age_hours > STABILIZING_AFTER_HOURS:
        return EventStatus.STABILIZING
    if severity in _ESCALATING_SEVERITIES:
        return EventStatus.ESCALATING
    return EventStatus.ACTIVE


def status_from_last_seen(
    last_seen: datetime | None,
    severity: Severity,
    now: datetime,
) -> EventStatus:
    if last_seen is None:
        return status_for_age(None, severity)
    age_hours = (now - last_seen).total_seconds() / 3600.0
    return status_for_age(age_hours, severity)


def age_label(last_seen: datetime | None, now: datetime) -> str | None:
    """Short human label for the time since the last detection."""
    if last_seen is None:
        return None
    age_hours = (now - last_seen).total_seconds() / 3600.0
    if not math.isfinite(age_hours) or age_hours < 0:
        return None

    if age_hours < 1:
        return "Last detection: < 1h"
    if age_hours < 24:
        return f"Last detection: {round(age_hours)}h ago"

    days = age_hours / 24
    if days < 7:
        return f"Last detection: {days:.1f}d ago"
    return f"Last detection: {round(days)}d ago"
