"""SpatialClusterer — DBSCAN over haversine distance.

Design notes:
    - Neighbourhoods are inclusive of the point itself and use great-circle
      distance, so ``eps_km`` means the same thing at every latitude.
    - Neighbourhood queries are a linear scan (O(n²) per scan).  That is
      fine for the hundreds of points a regional VIIRS pass produces.
    - Every point is assigned to at most one cluster.  A point that was
      provisionally marked noise and later reached by an expansion belongs
      to that cluster and is not emitted again as a singleton.
    - Output is deterministic for a fixed input order and parameters.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Sequence

from hotspot_tracker.core.severity import classify_severity
from hotspot_tracker.core.timewindow import seen_window
from hotspot_tracker.domain.cluster import Cluster
from hotspot_tracker.domain.detection import DetectionPoint
from hotspot_tracker.foundation.geo import haversine_km

logger = logging.getLogger(__name__)

DEFAULT_EPS_KM = 10.0
DEFAULT_MIN_PTS = 4


def cluster_detections(
    points: Sequence[DetectionPoint],
    eps_km: float = DEFAULT_EPS_KM,
    min_pts: int = DEFAULT_MIN_PTS,
    include_noise_as_single_events: bool = True,
) -> list[Cluster]:
    """Group detections into clusters.

    Args:
        points: Detections from one scan, in feed order.
        eps_km: Maximum neighbour radius in kilometres.
        min_pts: Minimum neighbourhood size (self included) for a core point.
        include_noise_as_single_events: Emit every leftover noise point as
            its own singleton cluster, so every detection is represented.

    Returns:
        Dense clusters in discovery order (``cluster-0``, ``cluster-1``...)
        followed by noise singletons (``single-0``...) when enabled.
    """
    valid = [p for p in points if p.has_finite_position]
    dropped = len(points) - len(valid)
    if dropped:
        logger.debug("Dropped %d detection(s) with non-finite coordinates", dropped)

    groups, noise = _dbscan(valid, eps_km, min_pts)

    clusters = [
        _build_cluster(f"cluster-{k}", [valid[i] for i in idxs])
        for k, idxs in enumerate(groups)
    ]
    if include_noise_as_single_events:
        clusters.extend(
            _build_cluster(f"single-{k}", [valid[i]])
            for k, i in enumerate(noise)
        )

    logger.debug(
        "Clustered %d detection(s) into %d dense cluster(s) and %d noise point(s)",
        len(valid),
        len(groups),
        len(noise),
    )
    return clusters


# ── Internals ────────────────────────────────────────────────────────────────


def _region_query(points: Sequence[DetectionPoint], idx: int, eps_km: float) -> list[int]:
    p = points[idx]
    return [
        j
        for j, q in enumerate(points)
        if haversine_km(p.latitude, p.longitude, q.latitude, q.longitude) <= eps_km
    ]


def _dbscan(
    points: Sequence[DetectionPoint],
    eps_km: float,
    min_pts: int,
) -> tuple[list[list[int]], list[int]]:
    """Return (clusters as index lists, noise indices never claimed by a cluster)."""
    n = len(points)
    visited = [False] * n
    assigned = [False] * n
    groups: list[list[int]] = []
    provisional_noise: list[int] = []

    for i in range(n):
        if visited[i]:
            continue
        visited[i] = True

        neighbors = _region_query(points, i, eps_km)
        if len(neighbors) < min_pts:
            provisional_noise.append(i)
            continue

        group = [i]
        assigned[i] = True
        frontier = deque(neighbors)
        while frontier:
            j = frontier.popleft()
            if not visited[j]:
                visited[j] = True
                j_neighbors = _region_query(points, j, eps_km)
                if len(j_neighbors) >= min_pts:
                    frontier.extend(j_neighbors)
            if not assigned[j]:
                assigned[j] = True
                group.append(j)
        groups.append(group)

    noise = [i for i in provisional_noise if not assigned[i]]
    return groups, noise


def _build_cluster(cluster_id: str, members: list[DetectionPoint]) -> Cluster:
    count = len(members)
    latitude = sum(m.latitude for m in members) / count
    longitude = sum(m.longitude for m in members) / count
    stats = classify_severity(
        [m.frp for m in members],
        [m.confidence for m in members],
    )
    first_seen, last_seen = seen_window(members)

    return Cluster(
        id=cluster_id,
        latitude=latitude,
        longitude=longitude,
        focus_count=count,
        frp_sum=stats.frp_sum,
        frp_max=stats.frp_max,
        severity=stats.severity,
        first_seen=first_seen,
        last_seen=last_seen,
        members=members,
    )
