"""Adapter Registry — routes raw hotspot records to the right feed adapter.

Adapters are tried in registration order and the first one whose
can_handle() returns True translates the record.  The registry keeps a
running tally of detections per feed format, plus the records no
adapter recognised, which /health reports.

adapt_batch() is the boundary callers use before a scan: it never raises
for bad records, it reports them as rejected.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable

from pydantic import ValidationError

from hotspot_tracker.adapters.base import DetectionAdapter
from hotspot_tracker.adapters.firms import FirmsRecordAdapter
from hotspot_tracker.adapters.geojson import GeoJsonFeatureAdapter
from hotspot_tracker.domain.detection import DetectionPoint

logger = logging.getLogger(__name__)


@dataclass
class FeedTally:
    """Detections read and records refused for one feed format."""

    accepted: int = 0
    rejected: int = 0


class NoAdapterFoundError(Exception):
    """Raised when no registered adapter recognises a record."""


class AdaptationError(Exception):
    """Raised when the adapter that claimed a record cannot translate it."""

    def __init__(self, adapter_name: str, reason: str) -> None:
        self.adapter_name = adapter_name
        self.reason = reason
        super().__init__(f"Adapter '{adapter_name}' failed: {reason}")


@dataclass(frozen=True)
class AdaptedBatch:
    """Result of normalising a whole feed response."""

    points: list[DetectionPoint] = field(default_factory=list)
    rejected: int = 0

    @property
    def accepted(self) -> int:
        return len(self.points)


class AdapterRegistry:
    """Ordered set of detection adapters.

    Usage:
        registry = AdapterRegistry()
        registry.register(GeoJsonFeatureAdapter())
        registry.register(FirmsRecordAdapter())

        batch = registry.adapt_batch(feed["features"])
    """

    def __init__(self) -> None:
        self._adapters: list[DetectionAdapter] = []
        self._tallies: dict[str, FeedTally] = {}
        self._unrouted = 0

    def register(self, adapter: DetectionAdapter) -> None:
        self._adapters.append(adapter)
        self._tallies[adapter.source_name] = FeedTally()
        logger.info("Registered adapter: %s", adapter.source_name)

    @property
    def adapter_names(self) -> list[str]:
        return [a.source_name for a in self._adapters]

    def adapt(self, raw: dict[str, Any], fallback_id: str) -> DetectionPoint:
        """Route a raw record through the first matching adapter.

        Raises:
            NoAdapterFoundError: If the record is not an object or no
                adapter recognises it.
            AdaptationError: If the matched adapter fails to translate.
        """
        adapter = self._route(raw)
        tally = self._tallies[adapter.source_name]
        try:
            point = adapter.adapt(raw, fallback_id)
        except (ValueError, ValidationError, KeyError, TypeError) as exc:
            tally.rejected += 1
            logger.warning("Adapter '%s' rejected record: %s", adapter.source_name, exc)
            raise AdaptationError(adapter.source_name, str(exc)) from exc
        tally.accepted += 1
        return point

    def adapt_batch(self, raws: Iterable[Any], id_prefix: str = "fire") -> AdaptedBatch:
        """Normalise every record, counting the ones that can't be read."""
        points: list[DetectionPoint] = []
        rejected = 0
        for i, raw in enumerate(raws):
            try:
                points.append(self.adapt(raw, fallback_id=f"{id_prefix}-{i}"))
            except (NoAdapterFoundError, AdaptationError) as exc:
                rejected += 1
                logger.debug("Record %d rejected: %s", i, exc)
        if rejected:
            logger.warning("Rejected %d of %d detection record(s)", rejected, rejected + len(points))
        return AdaptedBatch(points=points, rejected=rejected)

    def ingestion_report(self) -> dict[str, Any]:
        """Per-feed tallies and unrecognised records, as reported by /health."""
        return {
            "feeds": {name: asdict(tally) for name, tally in self._tallies.items()},
            "unrouted": self._unrouted,
        }

    def _route(self, raw: Any) -> DetectionAdapter:
        if isinstance(raw, dict):
            for adapter in self._adapters:
                if adapter.can_handle(raw):
                    return adapter
            reason = f"no adapter for record with keys {sorted(raw)}"
        else:
            reason = f"expected a JSON object, got {type(raw).__name__}"
        self._unrouted += 1
        raise NoAdapterFoundError(reason)


def default_registry() -> AdapterRegistry:
    """Registry with every built-in feed format, GeoJSON first."""
    registry = AdapterRegistry()
    registry.register(GeoJsonFeatureAdapter())
    registry.register(FirmsRecordAdapter())
    return registry
