"""Pydantic models for the scan HTTP endpoints."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hotspot_tracker.core.merger import MergeStats

_API_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScanRequest(BaseModel):
    """One scan's worth of already-fetched detection records."""

    detections: list[Any] = Field(
        default_factory=list,
        description="Raw records (flat FIRMS rows or GeoJSON Point features)",
    )
    region_label: str = Field(..., min_length=1, description="Display fallback for locations")
    eps_km: Optional[float] = Field(default=None, gt=0.0, description="DBSCAN radius override")
    min_pts: Optional[int] = Field(default=None, ge=1, description="DBSCAN density override")

    model_config = _API_CONFIG


class ScanStats(BaseModel):
    """Counters reported back after a scan."""

    created: int = 0
    updated: int = 0
    duplicates: int = 0
    stale: int = 0
    dropped: int = 0
    clusters: int = 0
    accepted_detections: int = 0
    rejected_detections: int = 0

    model_config = _API_CONFIG

    @classmethod
    def from_merge(cls, stats: MergeStats, clusters: int, accepted: int, rejected: int) -> ScanStats:
        return cls(
            **stats.to_dict(),
            clusters=clusters,
            accepted_detections=accepted,
            rejected_detections=rejected,
        )


class ScanResponse(BaseModel):
    """Events in merge order plus the notifications the scan raised."""

    category: str
    region_key: str
    events: list[dict[str, Any]]
    notifications: list[dict[str, Any]] = Field(default_factory=list)
    stats: ScanStats

    model_config = _API_CONFIG
