"""REST endpoints for running scans and reading tracked events.

Paths:
    POST /api/scans/{category}/{region_key}   run one scan cycle
    GET  /api/events/{category}/{region_key}  persisted events, merge order

The caller fetches detections upstream and posts them here; a failed
fetch should be answered by posting a cached/fallback batch (or an empty
one), never by retrying inside the scan.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from hotspot_tracker.domain.enums import EventCategory
from hotspot_tracker.models.scan import ScanRequest, ScanResponse, ScanStats
from hotspot_tracker.services.scanner import ScanService
from hotspot_tracker.store.repository import StoreWriteError

logger = logging.getLogger(__name__)


def create_scan_router(service: ScanService) -> APIRouter:
    """Factory that wires the scan endpoints to a concrete ScanService."""

    router = APIRouter(prefix="/api", tags=["scans"])

    @router.post("/scans/{category}/{region_key}")
    async def run_scan(
        category: EventCategory,
        region_key: str,
        request: ScanRequest,
    ) -> dict[str, Any]:
        try:
            outcome = await service.run_scan(
                category,
                region_key,
                request.detections,
                request.region_label,
                eps_km=request.eps_km,
                min_pts=request.min_pts,
            )
        except StoreWriteError as exc:
            logger.error("Scan %s/%s not persisted: %s", category.value, region_key, exc)
            raise HTTPException(status_code=503, detail="Event store unavailable") from exc

        response = ScanResponse(
            category=category.value,
            region_key=region_key,
            events=[e.to_wire() for e in outcome.events],
            notifications=[n.to_wire() for n in outcome.notifications],
            stats=ScanStats.from_merge(
                outcome.stats,
                clusters=outcome.clusters,
                accepted=outcome.accepted,
                rejected=outcome.rejected,
            ),
        )
        return response.model_dump(mode="json", by_alias=True)

    @router.get("/events/{category}/{region_key}")
    async def list_events(category: EventCategory, region_key: str) -> dict[str, Any]:
        events = await service.stored_events(category, region_key)
        return {
            "category": category.value,
            "regionKey": region_key,
            "events": [e.to_wire() for e in events],
            "count": len(events),
        }

    return router
