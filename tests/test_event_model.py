"""Tests for TrackedEvent / HistoryPoint wire format and validation."""

from datetime import datetime, timedelta, timezone

import pytest

from hotspot_tracker.domain.enums import EventCategory, EventStatus, Severity, Trend
from hotspot_tracker.domain.event import HistoryPoint, TrackedEvent

_BASE = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _event(**overrides) -> TrackedEvent:
    """Build a valid TrackedEvent, with optional overrides (snake_case)."""
    base = {
        "id": "fire_evt_1",
        "category": EventCategory.FIRE,
        "latitude": 10.0,
        "longitude": 20.0,
        "severity": Severity.MODERATE,
        "location": "Córdoba, Argentina",
        "status": EventStatus.ACTIVE,
        "first_seen": _BASE,
        "last_seen": _BASE,
        "scan_count": 1,
        "trend": Trend.STABLE,
        "history": [HistoryPoint(t=_BASE, focus_count=3, frp_sum=12.0, frp_max=6.0, severity=Severity.MODERATE)],
    }
    base.update(overrides)
    return TrackedEvent(**base)


class TestTrackedEventWire:
    def test_wire_uses_camel_case_and_iso_instants(self) -> None:
        wire = _event().to_wire()
        assert wire["firstSeen"] == "2026-01-01T12:00:00Z"
        assert wire["lastSeen"] == "2026-01-01T12:00:00Z"
        assert wire["scanCount"] == 1
        assert wire["history"][0]["t"] == "2026-01-01T12:00:00Z"
        assert wire["history"][0]["focusCount"] == 3
        assert wire["severity"] == "moderate"
        assert "first_seen" not in wire

    def test_wire_document_revives_to_equal_event(self) -> None:
        event = _event(evacuation_level="recommended", risk_indicators=["Moderate intensity"])
        assert TrackedEvent.model_validate(event.to_wire()) == event

    def test_offset_timestamps_normalised_to_utc(self) -> None:
        event = TrackedEvent.model_validate(
            {**_event().to_wire(), "lastSeen": "2026-01-01T09:00:00-03:00"}
        )
        assert event.last_seen == _BASE
        assert event.last_seen.utcoffset() == timedelta(0)

    def test_naive_timestamps_get_utc(self) -> None:
        event = TrackedEvent.model_validate({**_event().to_wire(), "firstSeen": "2026-01-01T12:00:00"})
        assert event.first_seen == _BASE

    def test_history_sorted_chronologically(self) -> None:
        late = HistoryPoint(t=_BASE + timedelta(hours=1))
        early = HistoryPoint(t=_BASE)
        assert _event(history=[late, early]).history == [early, late]


class TestTrackedEventValidation:
    @pytest.mark.parametrize("field", ["id", "category", "latitude", "longitude", "severity"])
    def test_required_fields(self, field) -> None:
        wire = _event().to_wire()
        del wire[field]
        with pytest.raises(Exception):
            TrackedEvent.model_validate(wire)

    def test_non_finite_coordinates_rejected(self) -> None:
        with pytest.raises(Exception):
            _event(latitude=float("nan"))

    def test_unknown_severity_rejected(self) -> None:
        with pytest.raises(Exception):
            _event(severity="apocalyptic")

    def test_event_is_immutable(self) -> None:
        with pytest.raises(Exception):
            _event().severity = Severity.HIGH

    def test_age_hours(self) -> None:
        event = _event()
        assert event.age_hours(_BASE + timedelta(hours=3)) == pytest.approx(3.0)
        assert _event(last_seen=None).age_hours(_BASE) is None
