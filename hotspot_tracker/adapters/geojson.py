"""GeoJsonFeatureAdapter — FIRMS hotspots delivered as GeoJSON Points.

Expected raw format:
{
    "type": "Feature",
    "id": "viirs-0001",                          # optional
    "geometry": {"type": "Point", "coordinates": [-64.1888, -31.4201]},
    "properties": {"frp": 12.7, "confidence": "h", "acq_date": "2026-01-30", "acq_time": 415}
}

GeoJSON orders coordinates as [longitude, latitude].
"""

from __future__ import annotations

from typing import Any

from hotspot_tracker.adapters.base import DetectionAdapter
from hotspot_tracker.domain.detection import DetectionPoint

_PROPERTIES = ("frp", "confidence", "acq_date", "acq_time")


class GeoJsonFeatureAdapter(DetectionAdapter):
    """Maps GeoJSON Point features to DetectionPoints."""

    @property
    def source_name(self) -> str:
        return "geojson_feature"

    def can_handle(self, raw: dict[str, Any]) -> bool:
        return raw.get("type") == "Feature" and isinstance(raw.get("geometry"), dict)

    def adapt(self, raw: dict[str, Any], fallback_id: str) -> DetectionPoint:
        geometry = raw["geometry"]
        if geometry.get("type") != "Point":
            raise ValueError(f"unsupported geometry type {geometry.get('type')!r}")

        coords = geometry.get("coordinates")
        if not isinstance(coords, (list, tuple)) or len(coords) < 2:
            raise ValueError("Point geometry needs [longitude, latitude]")

        props = raw.get("properties") or {}
        ident = raw.get("id") or props.get("id") or fallback_id

        payload = {
            "id": str(ident),
            "latitude": coords[1],
            "longitude": coords[0],
        }
        payload.update({k: props[k] for k in _PROPERTIES if k in props})
        return DetectionPoint.model_validate(payload)
