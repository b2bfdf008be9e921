"""Cluster — one spatial group of detections produced by a single scan.

Clusters are ephemeral: the merger consumes them and only the resulting
TrackedEvents are persisted.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from hotspot_tracker.domain.detection import DetectionPoint
from hotspot_tracker.domain.enums import Severity
from hotspot_tracker.foundation.clock import Instant


class Cluster(BaseModel):
    """Aggregate view of the detections grouped together by DBSCAN."""

    id: str = Field(..., description="Synthetic per-scan id, e.g. 'cluster-0' or 'single-3'")
    latitude: float = Field(..., description="Mean latitude of the members")
    longitude: float = Field(..., description="Mean longitude of the members")
    focus_count: int = Field(..., ge=1, description="Number of member detections")
    frp_sum: float
    frp_max: float
    severity: Severity
    first_seen: Optional[Instant] = Field(
        default=None, description="Earliest parseable member acquisition instant"
    )
    last_seen: Optional[Instant] = Field(
        default=None, description="Latest parseable member acquisition instant"
    )
    members: list[DetectionPoint] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def is_singleton(self) -> bool:
        return self.focus_count == 1
