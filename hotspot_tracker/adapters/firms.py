"""FirmsRecordAdapter — flat FIRMS hotspot records.

Expected raw format (VIIRS/MODIS area API, JSON or CSV row as dict):
{
    "id": "viirs-0001",            # optional
    "latitude": -31.4201,
    "longitude": -64.1888,
    "frp": 12.7,
    "confidence": "n",
    "acq_date": "2026-01-30",
    "acq_time": "0415",
    "satellite": "N"
}
"""

from __future__ import annotations

from typing import Any

from hotspot_tracker.adapters.base import DetectionAdapter
from hotspot_tracker.domain.detection import DetectionPoint

_FIELDS = ("frp", "confidence", "acq_date", "acq_time")


class FirmsRecordAdapter(DetectionAdapter):
    """Maps flat FIRMS records to DetectionPoints."""

    @property
    def source_name(self) -> str:
        return "firms_record"

    def can_handle(self, raw: dict[str, Any]) -> bool:
        return "latitude" in raw and "longitude" in raw

    def adapt(self, raw: dict[str, Any], fallback_id: str) -> DetectionPoint:
        if raw.get("latitude") is None or raw.get("longitude") is None:
            raise ValueError("firms record has empty 'latitude'/'longitude'")

        payload = {
            "id": str(raw.get("id") or fallback_id),
            "latitude": raw["latitude"],
            "longitude": raw["longitude"],
        }
        payload.update({k: raw[k] for k in _FIELDS if k in raw})
        return DetectionPoint.model_validate(payload)
