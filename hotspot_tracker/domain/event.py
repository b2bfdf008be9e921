"""TrackedEvent — a durable identity that outlives individual scans.

A TrackedEvent is created the first time a cluster cannot be matched to
anything already tracked, and is replaced (never mutated in place) every
time a later scan matches it again.  Its ``history`` is a bounded,
chronological series of intensity snapshots used for trend detection.

Wire format:
    Field names are camelCase on the wire (``firstSeen``, ``frpSum``...)
    and every instant is an ISO-8601 UTC string.  ``to_wire()`` and
    ``model_validate()`` are the only serialize/parse pair used by the
    HTTP layer and the JSON repository.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from hotspot_tracker.domain.enums import (
    EvacuationLevel,
    EventCategory,
    EventStatus,
    Severity,
    Trend,
)
from hotspot_tracker.foundation.clock import Instant

_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
)


class HistoryPoint(BaseModel):
    """One historical intensity snapshot of an event."""

    t: Instant = Field(..., description="When the snapshot was taken")
    focus_count: Optional[int] = Field(default=None, description="Detections in the cluster")
    frp_sum: Optional[float] = None
    frp_max: Optional[float] = None
    severity: Optional[Severity] = None

    model_config = _WIRE_CONFIG


class TrackedEvent(BaseModel):
    """Persistent, identity-stable view of one environmental event."""

    id: str = Field(..., min_length=1, description="Stable identifier, assigned once")
    category: EventCategory
    latitude: float
    longitude: float
    severity: Severity
    location: str = Field(default="", description="Display label (place name or region)")
    title: str = ""
    description: str = ""
    status: EventStatus = EventStatus.ACTIVE
    evacuation_level: Optional[EvacuationLevel] = None
    risk_indicators: list[str] = Field(default_factory=list)

    focus_count: int = 0
    frp_sum: float = 0.0
    frp_max: float = 0.0

    first_seen: Optional[Instant] = Field(default=None, description="First scan that saw it")
    last_seen: Optional[Instant] = Field(default=None, description="Most recent scan that matched it")
    first_detection: Optional[Instant] = Field(
        default=None, description="Earliest sensor acquisition instant of the latest cluster"
    )
    last_detection: Optional[Instant] = Field(
        default=None, description="Latest sensor acquisition instant of the latest cluster"
    )
    scan_count: int = Field(default=1, ge=0)
    trend: Trend = Trend.STABLE
    stale: bool = False
    history: list[HistoryPoint] = Field(default_factory=list)

    model_config = _WIRE_CONFIG

    # ── Validators ───────────────────────────────────────────────────────

    @field_validator("latitude", "longitude")
    @classmethod
    def coordinates_must_be_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("coordinates must be finite")
        return v

    @field_validator("history")
    @classmethod
    def history_is_chronological(cls, v: list[HistoryPoint]) -> list[HistoryPoint]:
        # Stable sort: equal timestamps keep their recorded order
        return sorted(v, key=lambda h: h.t)

    # ── Queries ──────────────────────────────────────────────────────────

    def age_hours(self, now: datetime) -> float | None:
        """Hours elapsed since ``last_seen``, or None if never seen."""
        if self.last_seen is None:
            return None
        return (now - self.last_seen).total_seconds() / 3600.0

    def to_wire(self) -> dict[str, Any]:
        """JSON-safe dict with camelCase keys and ISO-8601 instants."""
        return self.model_dump(mode="json", by_alias=True)

    def __repr__(self) -> str:
        return (
            f"TrackedEvent(id={self.id}, "
            f"severity={self.severity.value}, "
            f"status={self.status.value}, "
            f"scans={self.scan_count}, "
            f"stale={self.stale})"
        )
