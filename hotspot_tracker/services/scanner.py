"""ScanService — one complete scan cycle for a (category, region) key.

    raw records ──adapt──▶ detections ──cluster──▶ clusters ──describe──▶ drafts
                                                                            │
         notifications ◀──deliver── merged store ◀──merge── stored events ◀┘

Only the load → merge → save section runs under the key's lock, so it is
atomic with respect to other scans of the same key.  Repository I/O runs
in a worker thread so file-backed stores never block the event loop.
Place-name lookups happen before the lock and notification delivery
after it.  If merge or save raises, the persisted store is
left exactly as it was.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence

from hotspot_tracker.adapters.registry import AdapterRegistry, default_registry
from hotspot_tracker.core.clustering import (
    DEFAULT_EPS_KM,
    DEFAULT_MIN_PTS,
    cluster_detections,
)
from hotspot_tracker.core.describe import EventDraft, describe_cluster
from hotspot_tracker.core.merger import MergeStats, ScanMerger
from hotspot_tracker.domain.cluster import Cluster
from hotspot_tracker.domain.detection import DetectionPoint
from hotspot_tracker.domain.enums import EventCategory
from hotspot_tracker.domain.event import TrackedEvent
from hotspot_tracker.domain.notification import Notification
from hotspot_tracker.foundation.clock import utc_now
from hotspot_tracker.store.repository import EventRepository

logger = logging.getLogger(__name__)

# (latitude, longitude) → place name, e.g. a reverse-geocoding client
PlaceNameResolver = Callable[[float, float], Awaitable[Optional[str]]]
NotificationSink = Callable[[Notification], Awaitable[None]]


@dataclass(frozen=True)
class ScanOutcome:
    """What a scan returns to its caller."""

    category: EventCategory
    region_key: str
    events: list[TrackedEvent]
    notifications: list[Notification] = field(default_factory=list)
    stats: MergeStats = field(default_factory=MergeStats)
    clusters: int = 0
    accepted: int = 0
    rejected: int = 0

    def stats_dict(self) -> dict[str, Any]:
        return {
            **self.stats.to_dict(),
            "clusters": self.clusters,
            "accepted_detections": self.accepted,
            "rejected_detections": self.rejected,
        }


class ScanService:
    """Wires adapters, clustering, merging, persistence and delivery.

    Args:
        repository: Where per-key stores are loaded from and saved to.
        merger: Reconciler holding the matching/retention configuration.
        registry: Raw record adapters; defaults to every built-in format.
        place_resolver: Optional async reverse-geocoder for display labels.
        notification_sink: Optional async callable receiving each notification.
        eps_km / min_pts / include_noise_as_single_events: DBSCAN defaults.
        max_place_lookups: Upper bound on resolver calls per scan.
    """

    def __init__(
        self,
        repository: EventRepository,
        merger: ScanMerger | None = None,
        registry: AdapterRegistry | None = None,
        place_resolver: PlaceNameResolver | None = None,
        notification_sink: NotificationSink | None = None,
        eps_km: float = DEFAULT_EPS_KM,
        min_pts: int = DEFAULT_MIN_PTS,
        include_noise_as_single_events: bool = True,
        max_place_lookups: int = 35,
    ) -> None:
        self._repository = repository
        self._merger = merger or ScanMerger()
        self._registry = registry or default_registry()
        self._place_resolver = place_resolver
        self._notification_sink = notification_sink
        self._eps_km = eps_km
        self._min_pts = min_pts
        self._include_noise = include_noise_as_single_events
        self._max_place_lookups = max_place_lookups

    @property
    def repository(self) -> EventRepository:
        return self._repository

    @property
    def registry(self) -> AdapterRegistry:
        return self._registry

    # ── Public API ───────────────────────────────────────────────────────

    async def run_scan(
        self,
        category: EventCategory,
        region_key: str,
        raw_detections: Iterable[Any],
        region_label: str,
        eps_km: float | None = None,
        min_pts: int | None = None,
        now: datetime | None = None,
    ) -> ScanOutcome:
        """Adapt raw feed records, then run a scan over the valid ones."""
        batch = self._registry.adapt_batch(raw_detections, id_prefix=category.value)
        return await self.run_points(
            category,
            region_key,
            batch.points,
            region_label,
            eps_km=eps_km,
            min_pts=min_pts,
            now=now,
            rejected=batch.rejected,
        )

    async def run_points(
        self,
        category: EventCategory,
        region_key: str,
        points: Sequence[DetectionPoint],
        region_label: str,
        eps_km: float | None = None,
        min_pts: int | None = None,
        now: datetime | None = None,
        rejected: int = 0,
    ) -> ScanOutcome:
        """Cluster already-validated detections and merge them into the store."""
        now = now or utc_now()
        clusters = cluster_detections(
            points,
            eps_km=self._eps_km if eps_km is None else eps_km,
            min_pts=self._min_pts if min_pts is None else min_pts,
            include_noise_as_single_events=self._include_noise,
        )
        drafts = await self._describe(clusters, category, region_label, now)

        key = (category, region_key)
        async with self._repository.lock(key):
            previous = await asyncio.to_thread(self._repository.load, key)
            result = self._merger.merge(previous, drafts, now)
            await asyncio.to_thread(self._repository.save, key, result.store)

        logger.info(
            "Scan %s/%s: %d detection(s) → %d cluster(s) → %d event(s) %s",
            category.value,
            region_key,
            len(points),
            len(clusters),
            len(result.events),
            result.stats.to_dict(),
        )

        await self._deliver(result.notifications)

        return ScanOutcome(
            category=category,
            region_key=region_key,
            events=result.events,
            notifications=result.notifications,
            stats=result.stats,
            clusters=len(clusters),
            accepted=len(points),
            rejected=rejected,
        )

    async def stored_events(self, category: EventCategory, region_key: str) -> list[TrackedEvent]:
        """Persisted events for a key, in merge order."""
        store = await asyncio.to_thread(self._repository.load, (category, region_key))
        return store.events()

    # ── Internals ────────────────────────────────────────────────────────

    async def _describe(
        self,
        clusters: Sequence[Cluster],
        category: EventCategory,
        region_label: str,
        now: datetime,
    ) -> list[EventDraft]:
        drafts: list[EventDraft] = []
        for i, cluster in enumerate(clusters):
            place = None
            if i < self._max_place_lookups:
                place = await self._resolve_place(cluster)
            drafts.append(
                describe_cluster(cluster, category, region_label, now, place_name=place)
            )
        return drafts

    async def _resolve_place(self, cluster: Cluster) -> str | None:
        if self._place_resolver is None:
            return None
        try:
            return await self._place_resolver(cluster.latitude, cluster.longitude)
        except Exception as exc:
            logger.warning(
                "Place lookup failed for (%.4f, %.4f), using region label: %s",
                cluster.latitude,
                cluster.longitude,
                exc,
            )
            return None

    async def _deliver(self, notifications: Sequence[Notification]) -> None:
        if self._notification_sink is None:
            return
        for note in notifications:
            try:
                await self._notification_sink(note)
            except Exception as exc:
                logger.error("Notification delivery failed for %s: %s", note.event_id, exc)
