"""Turns a raw cluster into a display-ready event draft.

The draft is what the merger reconciles against the stored events: it
carries the cluster's metrics plus the human-facing text (title,
description, risk indicators, location label).  Location comes from an
optional reverse-geocoded place name and falls back to the region label
supplied by the caller.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from hotspot_tracker.core.lifecycle import age_label
from hotspot_tracker.domain.cluster import Cluster
from hotspot_tracker.domain.enums import EventCategory, Severity
from hotspot_tracker.foundation.clock import Instant

STALE_INDICATOR = "No recent detections (possible containment)"
SENSOR_INDICATOR = "Satellite detection (VIIRS)"

_SEVERITY_INDICATOR = {
    Severity.CRITICAL: "Rapid spread potential",
    Severity.HIGH: "High intensity signal",
    Severity.MODERATE: "Moderate intensity",
    Severity.LOW: "Low intensity / monitoring",
}


class EventDraft(BaseModel):
    """A classified, time-windowed cluster ready to be merged."""

    category: EventCategory
    latitude: float
    longitude: float
    severity: Severity
    location: str
    title: str
    description: str
    risk_indicators: list[str] = Field(default_factory=list)
    focus_count: int
    frp_sum: float
    frp_max: float
    first_detection: Optional[Instant] = None
    last_detection: Optional[Instant] = None

    model_config = {"frozen": True}


def describe_cluster(
    cluster: Cluster,
    category: EventCategory,
    region_label: str,
    now: datetime,
    place_name: Optional[str] = None,
) -> EventDraft:
    location = place_name or region_label
    count = cluster.focus_count
    severe = cluster.severity in (Severity.CRITICAL, Severity.HIGH)

    narrative = (
        f"Satellite sensors detected {count} {category.value} "
        f"{'signals' if count > 1 else 'signal'} near {location}. "
        f"Radiative power suggests {'high' if severe else 'moderate'} intensity."
    )
    description = (
        f"{narrative} FRP max {cluster.frp_max:.2f} • FRP sum {cluster.frp_sum:.2f}."
    )

    if count > 1:
        title = f"Active {category.value.capitalize()} Cluster ({count} detections)"
    else:
        title = f"Active {category.value.capitalize()}"

    indicators = [
        _SEVERITY_INDICATOR[cluster.severity],
        SENSOR_INDICATOR,
        f"FRP max {cluster.frp_max:.1f}",
    ]
    label = age_label(cluster.last_seen, now)
    if label:
        indicators.append(label)

    return EventDraft(
        category=category,
        latitude=cluster.latitude,
        longitude=cluster.longitude,
        severity=cluster.severity,
        location=location,
        title=title,
        description=description,
        risk_indicators=indicators,
        focus_count=count,
        frp_sum=cluster.frp_sum,
        frp_max=cluster.frp_max,
        first_detection=cluster.first_seen,
        last_detection=cluster.last_seen,
    )
