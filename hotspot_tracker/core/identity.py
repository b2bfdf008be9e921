"""IdentityResolver — nearest-neighbour matching of clusters to events.

A single nearest-neighbour heuristic, not an assignment optimisation:
every eligible event is compared by haversine distance to the new
centroid and the closest one wins if it lies within ``max_match_km``.
Clusters are resolved in scan order; events already claimed earlier in
the same scan are passed in ``exclude`` and are no longer eligible.

Finding nothing is the normal path for a first sighting, not an error.
"""

from __future__ import annotations

import logging
from typing import Collection, Iterable

from hotspot_tracker.domain.enums import EventCategory, EventStatus
from hotspot_tracker.domain.event import TrackedEvent
from hotspot_tracker.foundation.geo import haversine_km

logger = logging.getLogger(__name__)

DEFAULT_MAX_MATCH_KM = 25.0


def is_eligible(event: TrackedEvent, category: EventCategory) -> bool:
    """Only live events of the same category can absorb a new cluster."""
    return event.category == category and event.status != EventStatus.RESOLVED


def find_match(
    events: Iterable[TrackedEvent],
    category: EventCategory,
    latitude: float,
    longitude: float,
    max_match_km: float = DEFAULT_MAX_MATCH_KM,
    exclude: Collection[str] = (),
) -> str | None:
    """Return the id of the nearest eligible event within range, or None."""
    best_id: str | None = None
    best_km = float("inf")

    for event in events:
        if event.id in exclude or not is_eligible(event, category):
            continue
        d = haversine_km(latitude, longitude, event.latitude, event.longitude)
        if d < best_km:
            best_id, best_km = event.id, d

    if best_id is not None and best_km <= max_match_km:
        logger.debug("Matched (%.4f, %.4f) to %s at %.2f km", latitude, longitude, best_id, best_km)
        return best_id
    return None
