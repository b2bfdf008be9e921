"""hotspot-tracker — clustering, identity resolution and lifecycle of hotspot events.

This is the application entry point.  It wires the repository, merger,
adapter registry, scan service and HTTP/WebSocket endpoints together.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import FastAPI

from hotspot_tracker.adapters.registry import default_registry
from hotspot_tracker.api.scans import create_scan_router
from hotspot_tracker.api.ws_notifications import create_notification_router
from hotspot_tracker.config import Settings, settings
from hotspot_tracker.core.merger import MergeConfig, ScanMerger
from hotspot_tracker.domain.notification import Notification
from hotspot_tracker.services.connection_manager import ConnectionManager
from hotspot_tracker.services.scanner import ScanService
from hotspot_tracker.store.repository import (
    EventRepository,
    InMemoryEventRepository,
    JsonFileEventRepository,
)

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)


def build_repository(cfg: Settings) -> EventRepository:
    if cfg.store_dir:
        return JsonFileEventRepository(cfg.store_dir)
    return InMemoryEventRepository()


def create_app(
    cfg: Settings = settings,
    repository: EventRepository | None = None,
) -> FastAPI:
    """Build the FastAPI application from settings."""

    # ── Merger ───────────────────────────────────────────────────────────
    merger = ScanMerger(
        config=MergeConfig(
            max_match_km=cfg.max_match_km,
            keep_stale_hours=cfg.keep_stale_hours,
            history_cap=cfg.history_cap,
            duplicate_window=timedelta(seconds=cfg.duplicate_window_seconds),
            notification_title=cfg.notification_title,
            notification_url=cfg.notification_url,
        ),
    )

    # ── State ────────────────────────────────────────────────────────────
    repository = repository or build_repository(cfg)
    manager = ConnectionManager()

    async def broadcast(note: Notification) -> None:
        await manager.broadcast_json(note.to_wire())

    service = ScanService(
        repository,
        merger=merger,
        registry=default_registry(),
        notification_sink=broadcast,
        eps_km=cfg.eps_km,
        min_pts=cfg.min_pts,
        include_noise_as_single_events=cfg.include_noise_as_single_events,
        max_place_lookups=cfg.max_place_lookups,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app = FastAPI(
        title=cfg.app_name,
        description="Hotspot clustering, event identity and lifecycle tracking",
        version="0.1.0",
    )
    app.state.scan_service = service
    app.state.connection_manager = manager

    # ── Routes ───────────────────────────────────────────────────────────
    app.include_router(create_scan_router(service))
    app.include_router(create_notification_router(manager))

    # ── Health ───────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "app": cfg.app_name,
            "repository": getattr(repository, "kind", type(repository).__name__),
            "notification_clients": manager.active_count,
            "ingestion": service.registry.ingestion_report(),
        }

    return app


app = create_app()
