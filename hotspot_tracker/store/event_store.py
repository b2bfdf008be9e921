"""EventStore — the tracked events of one (category, region) partition.

An EventStore is a value: every scan receives one and returns a new one.
It is never shared between partitions and never mutated in place, so a
scan that fails part-way leaves the caller's store untouched.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from hotspot_tracker.domain.event import TrackedEvent


class EventStore:
    """Immutable mapping of event id → TrackedEvent, in merge order."""

    __slots__ = ("_events",)

    def __init__(self, events: dict[str, TrackedEvent] | None = None) -> None:
        self._events: dict[str, TrackedEvent] = dict(events or {})

    # ── Construction ─────────────────────────────────────────────────────

    @classmethod
    def empty(cls) -> EventStore:
        return cls()

    @classmethod
    def from_events(cls, events: Iterable[TrackedEvent]) -> EventStore:
        """Build a store from a sequence; a later duplicate id replaces an earlier one."""
        return cls({e.id: e for e in events})

    def with_event(self, event: TrackedEvent) -> EventStore:
        """Return a copy with *event* inserted or replaced."""
        events = dict(self._events)
        events[event.id] = event
        return EventStore(events)

    # ── Queries ──────────────────────────────────────────────────────────

    def get(self, event_id: str) -> TrackedEvent | None:
        return self._events.get(event_id)

    def events(self) -> list[TrackedEvent]:
        """Events in stored (merge) order."""
        return list(self._events.values())

    def ids(self) -> list[str]:
        return list(self._events)

    def to_wire(self) -> list[dict]:
        return [e.to_wire() for e in self._events.values()]

    # ── Dunder ───────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    def __iter__(self) -> Iterator[TrackedEvent]:
        return iter(list(self._events.values()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EventStore):
            return NotImplemented
        return self._events == other._events

    def __repr__(self) -> str:
        return f"EventStore(events={len(self._events)})"
