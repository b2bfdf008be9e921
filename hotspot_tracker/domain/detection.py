"""DetectionPoint — one raw thermal-anomaly reading from a satellite sensor.

Detections are ephemeral: they are consumed entirely within one scan.
Coordinates are allowed to be non-finite here so the clusterer can drop
them silently; everything else is normalised at the boundary so
downstream code never has to re-check field types.
"""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DetectionPoint(BaseModel):
    """A single geolocated hotspot as reported by the upstream feed."""

    id: str = Field(..., min_length=1, max_length=256, description="Detection identifier")
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")
    frp: float = Field(default=0.0, description="Fire radiative power (MW); absent counts as 0")
    confidence: Optional[str] = Field(
        default=None,
        max_length=32,
        description="Sensor confidence tag, e.g. 'h'/'n'/'l' or 'high'/'nominal'/'low'",
    )
    acq_date: Optional[str] = Field(default=None, description="Acquisition date (UTC), YYYY-MM-DD")
    acq_time: Optional[str] = Field(default=None, description="Acquisition time-of-day token (UTC), HHMM")

    model_config = {"frozen": True}

    # ── Validators ───────────────────────────────────────────────────────

    @field_validator("frp", mode="before")
    @classmethod
    def frp_defaults_to_zero(cls, v: object) -> object:
        if v is None or v == "":
            return 0.0
        return v

    @field_validator("frp")
    @classmethod
    def frp_must_be_finite(cls, v: float) -> float:
        return v if math.isfinite(v) else 0.0

    @field_validator("confidence", "acq_date", "acq_time", mode="before")
    @classmethod
    def coerce_to_text(cls, v: object) -> object:
        # FIRMS CSV/JSON exports sometimes carry acq_time as an integer
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v))
        return v

    @property
    def has_finite_position(self) -> bool:
        return math.isfinite(self.latitude) and math.isfinite(self.longitude)
