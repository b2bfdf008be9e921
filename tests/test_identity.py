"""Tests for nearest-neighbour identity resolution."""

from hotspot_tracker.core.identity import find_match, is_eligible
from hotspot_tracker.domain.enums import EventCategory, EventStatus

from tests.test_event_model import _event


class TestFindMatch:
    def test_no_candidates_is_not_an_error(self) -> None:
        assert find_match([], EventCategory.FIRE, 10.0, 20.0) is None

    def test_match_within_range(self) -> None:
        events = [_event(id="a", latitude=10.0, longitude=20.0)]
        # ~6.5 km away
        assert find_match(events, EventCategory.FIRE, 10.05, 20.03) == "a"

    def test_nearest_wins(self) -> None:
        events = [
            _event(id="far", latitude=10.15, longitude=20.0),
            _event(id="near", latitude=10.02, longitude=20.0),
        ]
        assert find_match(events, EventCategory.FIRE, 10.0, 20.0) == "near"

    def test_out_of_range(self) -> None:
        events = [_event(id="a", latitude=10.3, longitude=20.0)]  # ~33 km
        assert find_match(events, EventCategory.FIRE, 10.0, 20.0) is None

    def test_custom_range(self) -> None:
        events = [_event(id="a", latitude=10.3, longitude=20.0)]
        assert find_match(events, EventCategory.FIRE, 10.0, 20.0, max_match_km=40) == "a"

    def test_nearest_out_of_range_means_no_match(self) -> None:
        # Only the minimum-distance candidate is considered
        events = [_event(id="a", latitude=10.5, longitude=20.0)]
        assert find_match(events, EventCategory.FIRE, 10.0, 20.0) is None

    def test_resolved_events_not_eligible(self) -> None:
        events = [_event(id="a", status=EventStatus.RESOLVED)]
        assert find_match(events, EventCategory.FIRE, 10.0, 20.0) is None

    def test_other_category_not_eligible(self) -> None:
        events = [_event(id="a", category=EventCategory.FLOOD)]
        assert find_match(events, EventCategory.FIRE, 10.0, 20.0) is None

    def test_excluded_events_skipped(self) -> None:
        events = [
            _event(id="claimed", latitude=10.0, longitude=20.0),
            _event(id="other", latitude=10.1, longitude=20.0),
        ]
        assert find_match(events, EventCategory.FIRE, 10.0, 20.0, exclude={"claimed"}) == "other"


class TestEligibility:
    def test_stale_events_remain_eligible(self) -> None:
        assert is_eligible(_event(stale=True, status=EventStatus.CONTAINED), EventCategory.FIRE)
