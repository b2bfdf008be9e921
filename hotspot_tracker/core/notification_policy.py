"""NotificationPolicy — decides whether a change is worth telling someone.

Fires only on change, never on creation.  Reasons are checked in order
and the first one wins, so an event produces at most one notification
per scan:

    1. severity rank increased            → SEVERITY
    2. status changed to escalating       → STATUS
    3. trend changed to rising            → TREND
"""

from __future__ import annotations

from typing import Optional

from hotspot_tracker.domain.enums import EventStatus, NotificationReason, Trend
from hotspot_tracker.domain.event import TrackedEvent
from hotspot_tracker.domain.notification import Notification

DEFAULT_TITLE = "Hotspot Alert"


def notification_reason(
    prev: Optional[TrackedEvent],
    next_: TrackedEvent,
) -> NotificationReason | None:
    if prev is None:
        return None

    if next_.severity.rank > prev.severity.rank:
        return NotificationReason.SEVERITY
    if prev.status != next_.status and next_.status == EventStatus.ESCALATING:
        return NotificationReason.STATUS
    if prev.trend != next_.trend and next_.trend == Trend.RISING:
        return NotificationReason.TREND
    return None


def build_notification(
    reason: NotificationReason,
    event: TrackedEvent,
    title: str = DEFAULT_TITLE,
    url: str = "/",
) -> Notification:
    location = event.location or event.id
    if reason == NotificationReason.SEVERITY:
        body = f"{location}: severity increased to {event.severity.value.upper()}"
    elif reason == NotificationReason.STATUS:
        body = f"{location}: event is now ESCALATING"
    else:
        body = f"{location}: {event.category.value} activity is rising"

    return Notification(title=title, body=body, event_id=event.id, url=url, reason=reason)


def evaluate(
    prev: Optional[TrackedEvent],
    next_: TrackedEvent,
    title: str = DEFAULT_TITLE,
    url: str = "/",
) -> Notification | None:
    """Notification for the transition prev → next, or None."""
    reason = notification_reason(prev, next_)
    if reason is None:
        return None
    return build_notification(reason, next_, title=title, url=url)
