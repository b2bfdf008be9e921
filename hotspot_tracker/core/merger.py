"""ScanMerger — reconciles one scan's clusters with the tracked events.

Design principles:
    1. Pure function of (previous store, drafts, now): no I/O, no clock
       reads, no mutation of the previous store.
    2. Total over validated input: it never raises for well-typed drafts.
    3. Every event is claimed at most once per scan, so ``scan_count``
       advances by at most one and at most one notification fires.

Per draft (in scan order):
    - resolve identity against eligible, not-yet-claimed events
    - matched   → append a history snapshot (unless the last one is within
                  the duplicate window), bump last_seen/scan_count,
                  recompute trend and status, evaluate a notification
                  against the event as it was before this scan
    - unmatched → create a new event with a single-point history

Per previously tracked event not claimed this scan:
    - older than keep_stale_hours → dropped
    - otherwise kept, flagged stale, status recomputed from last_seen

Status always follows last_seen, never the sensor acquisition time, so an
event created or matched this scan is live (age 0) and stays matchable
however old its detections are.

Output order: live before stale, then descending severity, then id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Sequence

from hotspot_tracker.core.describe import STALE_INDICATOR, EventDraft
from hotspot_tracker.core.identity import DEFAULT_MAX_MATCH_KM, find_match
from hotspot_tracker.core.lifecycle import status_from_last_seen
from hotspot_tracker.core.notification_policy import DEFAULT_TITLE, evaluate
from hotspot_tracker.core.trend import compute_trend
from hotspot_tracker.domain.enums import Trend
from hotspot_tracker.domain.event import HistoryPoint, TrackedEvent
from hotspot_tracker.domain.notification import Notification
from hotspot_tracker.foundation.identifiers import new_event_id
from hotspot_tracker.store.event_store import EventStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeConfig:
    """Tunable knobs of the reconciliation."""

    max_match_km: float = DEFAULT_MAX_MATCH_KM
    keep_stale_hours: float = 72.0
    history_cap: int = 40
    duplicate_window: timedelta = timedelta(seconds=30)
    notification_title: str = DEFAULT_TITLE
    notification_url: str = "/"


@dataclass(frozen=True)
class MergeStats:
    """Counters describing what one merge did."""

    created: int = 0
    updated: int = 0
    duplicates: int = 0
    stale: int = 0
    dropped: int = 0

    def to_dict(self) -> dict:
        return {
            "created": self.created,
            "updated": self.updated,
            "duplicates": self.duplicates,
            "stale": self.stale,
            "dropped": self.dropped,
        }


@dataclass(frozen=True)
class ScanResult:
    """Everything a scan produced: the new store, its ordering, alerts."""

    store: EventStore
    events: list[TrackedEvent]
    notifications: list[Notification] = field(default_factory=list)
    stats: MergeStats = field(default_factory=MergeStats)


def _severity_sort_key(event: TrackedEvent) -> tuple[int, int, str]:
    return (1 if event.stale else 0, -event.severity.rank, event.id)


class ScanMerger:
    """Stateless reconciler of clusters into tracked events.

    Args:
        config: Matching, retention and history settings.
        id_factory: Mints ids for new events from the category value.
    """

    def __init__(
        self,
        config: MergeConfig | None = None,
        id_factory: Callable[[str], str] = new_event_id,
    ) -> None:
        self._config = config or MergeConfig()
        self._id_factory = id_factory

    @property
    def config(self) -> MergeConfig:
        return self._config

    # ── Public API ───────────────────────────────────────────────────────

    def merge(
        self,
        previous: EventStore,
        drafts: Sequence[EventDraft],
        now: datetime,
    ) -> ScanResult:
        working: dict[str, TrackedEvent] = {e.id: e for e in previous}
        claimed: dict[str, TrackedEvent] = {}
        notifications: list[Notification] = []
        created = updated = duplicates = 0

        for draft in drafts:
            match_id = find_match(
                working.values(),
                draft.category,
                draft.latitude,
                draft.longitude,
                max_match_km=self._config.max_match_km,
                exclude=claimed,
            )

            if match_id is None:
                event = self._create(draft, now)
                created += 1
                logger.info(
                    "New %s event %s at (%.4f, %.4f) severity=%s",
                    event.category.value,
                    event.id,
                    event.latitude,
                    event.longitude,
                    event.severity.value,
                )
            else:
                prev = working[match_id]
                event, appended = self._update(prev, draft, now)
                if appended:
                    updated += 1
                else:
                    duplicates += 1
                note = evaluate(
                    prev,
                    event,
                    title=self._config.notification_title,
                    url=self._config.notification_url,
                )
                if note is not None:
                    notifications.append(note)
                    logger.info("Notification for %s: %s", event.id, note.reason.value)

            claimed[event.id] = event
            working[event.id] = event

        merged = list(claimed.values())
        stale = dropped = 0
        for event in previous:
            if event.id in claimed:
                continue
            kept = self._retain(event, now)
            if kept is None:
                dropped += 1
                logger.info("Dropped event %s (not seen within retention window)", event.id)
                continue
            stale += 1
            merged.append(kept)

        merged.sort(key=_severity_sort_key)
        stats = MergeStats(
            created=created,
            updated=updated,
            duplicates=duplicates,
            stale=stale,
            dropped=dropped,
        )
        logger.debug("Merge finished: %s", stats.to_dict())
        return ScanResult(
            store=EventStore.from_events(merged),
            events=merged,
            notifications=notifications,
            stats=stats,
        )

    # ── Internals ────────────────────────────────────────────────────────

    @staticmethod
    def _snapshot(draft: EventDraft, now: datetime) -> HistoryPoint:
        return HistoryPoint(
            t=now,
            focus_count=draft.focus_count,
            frp_sum=draft.frp_sum,
            frp_max=draft.frp_max,
            severity=draft.severity,
        )

    def _create(self, draft: EventDraft, now: datetime) -> TrackedEvent:
        return TrackedEvent(
            id=self._id_factory(draft.category.value),
            category=draft.category,
            latitude=draft.latitude,
            longitude=draft.longitude,
            severity=draft.severity,
            location=draft.location,
            title=draft.title,
            description=draft.description,
            status=status_from_last_seen(now, draft.severity, now),
            risk_indicators=list(draft.risk_indicators),
            focus_count=draft.focus_count,
            frp_sum=draft.frp_sum,
            frp_max=draft.frp_max,
            first_seen=now,
            last_seen=now,
            first_detection=draft.first_detection,
            last_detection=draft.last_detection,
            scan_count=1,
            trend=Trend.STABLE,
            stale=False,
            history=[self._snapshot(draft, now)],
        )

    def _update(
        self,
        prev: TrackedEvent,
        draft: EventDraft,
        now: datetime,
    ) -> tuple[TrackedEvent, bool]:
        """Return (updated event, whether a new snapshot was appended)."""
        history = list(prev.history)
        appended = not history or (now - history[-1].t) > self._config.duplicate_window

        if appended:
            history.append(self._snapshot(draft, now))
            history = history[-self._config.history_cap:]
            last_seen = now
            scan_count = prev.scan_count + 1
        else:
            logger.debug("Rescan of %s within duplicate window, history unchanged", prev.id)
            last_seen = prev.last_seen or now
            scan_count = prev.scan_count

        first_seen = prev.first_seen or (history[0].t if history else now)

        event = prev.model_copy(
            update={
                "latitude": draft.latitude,
                "longitude": draft.longitude,
                "severity": draft.severity,
                "location": draft.location,
                "title": draft.title,
                "description": draft.description,
                "risk_indicators": list(draft.risk_indicators),
                "focus_count": draft.focus_count,
                "frp_sum": draft.frp_sum,
                "frp_max": draft.frp_max,
                "first_seen": min(first_seen, last_seen),
                "last_seen": last_seen,
                "first_detection": draft.first_detection,
                "last_detection": draft.last_detection,
                "scan_count": scan_count,
                "history": history,
                "trend": compute_trend(history),
                "status": status_from_last_seen(last_seen, draft.severity, now),
                "stale": False,
            }
        )
        return event, appended

    def _retain(self, event: TrackedEvent, now: datetime) -> TrackedEvent | None:
        """Stale copy of an unmatched event, or None once past retention."""
        if event.last_seen is None:
            return None
        if now - event.last_seen > timedelta(hours=self._config.keep_stale_hours):
            return None

        indicators = list(event.risk_indicators)
        if STALE_INDICATOR not in indicators:
            indicators.append(STALE_INDICATOR)

        return event.model_copy(
            update={
                "stale": True,
                "status": status_from_last_seen(event.last_seen, event.severity, now),
                "risk_indicators": indicators,
            }
        )
