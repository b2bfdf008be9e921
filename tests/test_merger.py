"""Tests for ScanMerger: identity, history, staleness, ordering, alerts."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from hotspot_tracker.core.describe import STALE_INDICATOR
from hotspot_tracker.core.merger import MergeConfig, ScanMerger
from hotspot_tracker.domain.enums import (
    EventCategory,
    EventStatus,
    NotificationReason,
    Severity,
    Trend,
)
from hotspot_tracker.domain.event import HistoryPoint
from hotspot_tracker.store.event_store import EventStore

from tests.test_describe import _draft
from tests.test_event_model import _event

_NOW = datetime(2026, 1, 30, 12, 0, 0, tzinfo=timezone.utc)


def _merger(**config) -> ScanMerger:
    counter = itertools.count(1)
    return ScanMerger(
        config=MergeConfig(**config),
        id_factory=lambda prefix: f"{prefix}_{next(counter)}",
    )


def _tracked(**overrides):
    """A previously stored event last seen one hour before _NOW."""
    seen = _NOW - timedelta(hours=1)
    base = {
        "first_seen": seen,
        "last_seen": seen,
        "history": [HistoryPoint(t=seen, focus_count=4, frp_sum=20.0, frp_max=6.0, severity=Severity.MODERATE)],
    }
    base.update(overrides)
    return _event(**base)


class TestNewEvents:
    def test_unmatched_cluster_creates_event(self) -> None:
        result = _merger().merge(EventStore.empty(), [_draft()], _NOW)

        (event,) = result.events
        assert event.id == "fire_1"
        assert event.first_seen == _NOW
        assert event.last_seen == _NOW
        assert event.scan_count == 1
        assert event.trend == Trend.STABLE
        assert not event.stale
        assert len(event.history) == 1
        assert event.history[0].t == _NOW
        assert result.stats.created == 1
        assert result.notifications == []

    def test_new_event_status_without_detection_window(self) -> None:
        result = _merger().merge(EventStore.empty(), [_draft(severity=Severity.CRITICAL)], _NOW)
        assert result.events[0].status == EventStatus.ESCALATING

    def test_new_event_status_ignores_detection_age(self) -> None:
        draft = _draft(severity=Severity.CRITICAL, last_detection=_NOW - timedelta(hours=50))
        result = _merger().merge(EventStore.empty(), [draft], _NOW)
        assert result.events[0].status == EventStatus.ESCALATING

    def test_two_nearby_new_clusters_stay_separate(self) -> None:
        drafts = [_draft(latitude=10.0), _draft(latitude=10.05)]
        result = _merger().merge(EventStore.empty(), drafts, _NOW)
        assert len(result.events) == 2
        assert result.stats.created == 2

    def test_previous_store_is_not_mutated(self) -> None:
        previous = EventStore.from_events([_tracked()])
        snapshot = previous.events()
        _merger().merge(previous, [_draft(severity=Severity.CRITICAL)], _NOW)
        assert previous.events() == snapshot


class TestMatching:
    def test_scenario_severity_escalation_keeps_identity(self) -> None:
        previous = EventStore.from_events([_tracked(id="evt", severity=Severity.MODERATE)])
        draft = _draft(latitude=10.05, longitude=20.03, severity=Severity.CRITICAL, frp_max=60.0, frp_sum=98.0)

        result = _merger().merge(previous, [draft], _NOW)

        (event,) = result.events
        assert event.id == "evt"
        assert event.severity == Severity.CRITICAL
        assert event.latitude == 10.05
        assert event.scan_count == 2
        assert event.last_seen == _NOW
        assert event.first_seen == _NOW - timedelta(hours=1)
        assert len(event.history) == 2
        (note,) = result.notifications
        assert note.reason == NotificationReason.SEVERITY
        assert note.event_id == "evt"
        assert "CRITICAL" in note.body

    def test_trend_recomputed_from_history(self) -> None:
        previous = EventStore.from_events([_tracked(id="evt")])
        draft = _draft(frp_sum=60.0, frp_max=6.0, focus_count=4)
        result = _merger().merge(previous, [draft], _NOW)
        event = result.events[0]
        assert event.trend == Trend.RISING
        assert result.notifications[0].reason == NotificationReason.TREND

    def test_first_processed_cluster_claims_the_event(self) -> None:
        previous = EventStore.from_events([_tracked(id="evt")])
        first = _draft(latitude=10.05, longitude=20.0)
        second = _draft(latitude=10.0, longitude=20.05)

        result = _merger().merge(previous, [first, second], _NOW)

        by_id = {e.id: e for e in result.events}
        assert set(by_id) == {"evt", "fire_1"}
        assert by_id["evt"].latitude == 10.05
        assert by_id["evt"].scan_count == 2
        assert by_id["fire_1"].latitude == 10.0
        assert by_id["fire_1"].scan_count == 1

    def test_resolved_event_is_not_reused(self) -> None:
        previous = EventStore.from_events([_tracked(id="old", status=EventStatus.RESOLVED)])
        result = _merger().merge(previous, [_draft()], _NOW)
        ids = {e.id for e in result.events}
        assert ids == {"old", "fire_1"}

    def test_stale_event_is_revived(self) -> None:
        previous = EventStore.from_events([_tracked(id="evt", stale=True, status=EventStatus.CONTAINED)])
        result = _merger().merge(previous, [_draft()], _NOW)
        (event,) = result.events
        assert event.id == "evt"
        assert not event.stale

    def test_history_is_capped(self) -> None:
        history = [
            HistoryPoint(t=_NOW - timedelta(hours=10) + timedelta(minutes=i), frp_sum=1.0)
            for i in range(5)
        ]
        previous = EventStore.from_events([_tracked(id="evt", history=history, first_seen=history[0].t)])
        result = _merger(history_cap=5).merge(previous, [_draft()], _NOW)
        event = result.events[0]
        assert len(event.history) == 5
        assert event.history[-1].t == _NOW
        assert event.history[0].t == history[1].t

    def test_history_stays_within_seen_window(self) -> None:
        previous = EventStore.from_events([_tracked(id="evt")])
        event = _merger().merge(previous, [_draft()], _NOW).events[0]
        times = [h.t for h in event.history]
        assert times == sorted(times)
        assert event.first_seen <= times[0]
        assert times[-1] <= event.last_seen

    def test_evacuation_level_preserved(self) -> None:
        previous = EventStore.from_events([_tracked(id="evt", evacuation_level="mandatory")])
        event = _merger().merge(previous, [_draft()], _NOW).events[0]
        assert event.evacuation_level.value == "mandatory"


class TestDuplicateRescans:
    def test_same_batch_twice_is_idempotent(self) -> None:
        merger = _merger()
        drafts = [_draft(latitude=10.0), _draft(latitude=12.0, severity=Severity.HIGH)]

        once = merger.merge(EventStore.empty(), drafts, _NOW)
        twice = merger.merge(once.store, drafts, _NOW + timedelta(seconds=10))

        assert twice.events == once.events
        assert twice.notifications == []
        assert twice.stats.duplicates == 2
        assert twice.stats.created == 0

    def test_rescan_after_window_advances(self) -> None:
        merger = _merger()
        once = merger.merge(EventStore.empty(), [_draft()], _NOW)
        later = _NOW + timedelta(seconds=31)
        again = merger.merge(once.store, [_draft()], later)

        (event,) = again.events
        assert event.scan_count == 2
        assert event.last_seen == later
        assert len(event.history) == 2

    def test_old_detections_rescanned_within_window_keep_one_event(self) -> None:
        merger = _merger()
        drafts = [_draft(last_detection=_NOW - timedelta(hours=50))]

        once = merger.merge(EventStore.empty(), drafts, _NOW)
        twice = merger.merge(once.store, drafts, _NOW + timedelta(seconds=5))

        (event,) = twice.events
        assert event.id == "fire_1"
        assert event.status != EventStatus.RESOLVED
        assert not event.stale
        assert event.scan_count == 1
        assert len(event.history) == 1
        assert twice.events == once.events
        assert twice.stats.created == 0
        assert twice.stats.duplicates == 1

    def test_old_detections_rescanned_after_window_keep_one_event(self) -> None:
        merger = _merger()
        drafts = [_draft(last_detection=_NOW - timedelta(hours=50))]
        later = _NOW + timedelta(seconds=31)

        once = merger.merge(EventStore.empty(), drafts, _NOW)
        again = merger.merge(once.store, drafts, later)

        (event,) = again.events
        assert event.id == "fire_1"
        assert event.scan_count == 2
        assert len(event.history) == 2
        assert event.last_seen == later
        assert again.stats.created == 0
        assert again.stats.updated == 1

    def test_duplicate_still_refreshes_cluster_fields(self) -> None:
        merger = _merger()
        once = merger.merge(EventStore.empty(), [_draft(severity=Severity.MODERATE)], _NOW)
        again = merger.merge(
            once.store,
            [_draft(severity=Severity.CRITICAL)],
            _NOW + timedelta(seconds=5),
        )
        (event,) = again.events
        assert event.severity == Severity.CRITICAL
        assert event.scan_count == 1
        assert again.notifications[0].reason == NotificationReason.SEVERITY


class TestStaleEvents:
    def test_unmatched_event_kept_as_stale(self) -> None:
        previous = EventStore.from_events([_tracked(id="evt", latitude=40.0)])
        result = _merger().merge(previous, [_draft()], _NOW)
        stale = result.store.get("evt")
        assert stale is not None
        assert stale.stale
        assert STALE_INDICATOR in stale.risk_indicators
        assert result.stats.stale == 1

    def test_stale_indicator_not_duplicated(self) -> None:
        previous = EventStore.from_events([_tracked(id="evt", risk_indicators=[STALE_INDICATOR])])
        result = _merger().merge(previous, [], _NOW)
        assert result.events[0].risk_indicators == [STALE_INDICATOR]

    @pytest.mark.parametrize(
        "age, kept",
        [
            (timedelta(hours=72, seconds=1), False),
            (timedelta(hours=71, minutes=59), True),
            (timedelta(hours=72), True),
        ],
    )
    def test_retention_boundary(self, age, kept) -> None:
        seen = _NOW - age
        event = _tracked(
            id="evt",
            first_seen=seen,
            last_seen=seen,
            history=[HistoryPoint(t=seen)],
        )
        result = _merger().merge(EventStore.from_events([event]), [], _NOW)
        assert ("evt" in result.store) is kept
        if kept:
            assert result.store.get("evt").stale
        else:
            assert result.stats.dropped == 1

    def test_custom_retention(self) -> None:
        previous = EventStore.from_events([_tracked(id="evt")])  # seen 1h ago
        result = _merger(keep_stale_hours=0.5).merge(previous, [], _NOW)
        assert len(result.store) == 0

    def test_stale_status_recomputed_from_age(self) -> None:
        seen = _NOW - timedelta(hours=20)
        event = _tracked(
            id="evt",
            severity=Severity.CRITICAL,
            status=EventStatus.ESCALATING,
            first_seen=seen,
            last_seen=seen,
            history=[HistoryPoint(t=seen)],
        )
        result = _merger().merge(EventStore.from_events([event]), [], _NOW)
        assert result.events[0].status == EventStatus.CONTAINED

    def test_stale_status_follows_last_seen_not_detection(self) -> None:
        event = _tracked(id="evt", severity=Severity.HIGH, last_detection=_NOW - timedelta(hours=50))
        result = _merger().merge(EventStore.from_events([event]), [], _NOW)
        assert result.events[0].status == EventStatus.ESCALATING

    def test_event_without_last_seen_dropped(self) -> None:
        previous = EventStore.from_events([_tracked(id="evt", last_seen=None)])
        result = _merger().merge(previous, [], _NOW)
        assert len(result.store) == 0

    def test_empty_batch_on_empty_store(self) -> None:
        result = _merger().merge(EventStore.empty(), [], _NOW)
        assert result.events == []
        assert len(result.store) == 0


class TestOrdering:
    def test_live_before_stale_then_severity_then_id(self) -> None:
        previous = EventStore.from_events(
            [
                _tracked(id="stale-critical", latitude=-40.0, severity=Severity.CRITICAL),
                _tracked(id="stale-low", latitude=-50.0, severity=Severity.LOW),
            ]
        )
        drafts = [
            _draft(latitude=10.0, severity=Severity.LOW),
            _draft(latitude=20.0, severity=Severity.HIGH),
            _draft(latitude=30.0, severity=Severity.HIGH),
        ]
        result = _merger().merge(previous, drafts, _NOW)

        assert [e.id for e in result.events] == [
            "fire_2",
            "fire_3",
            "fire_1",
            "stale-critical",
            "stale-low",
        ]
        assert result.store.ids() == [e.id for e in result.events]

    def test_other_category_events_never_matched(self) -> None:
        previous = EventStore.from_events([_tracked(id="flood", category=EventCategory.FLOOD)])
        result = _merger().merge(previous, [_draft()], _NOW)
        assert {e.id for e in result.events} == {"flood", "fire_1"}
