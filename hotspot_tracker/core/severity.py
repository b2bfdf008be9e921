"""SeverityClassifier — coarse, monotone intensity tiers for a cluster.

Rule (ordered, first match wins — the clauses overlap):
    critical:  any high-confidence member  OR frp_max >= 50 OR frp_sum >= 200
    high:      frp_max >= 20 OR frp_sum >= 80
    moderate:  frp_max >= 5  OR frp_sum >= 20
    low:       everything else

Not calibrated against ground truth; only the ordering matters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from hotspot_tracker.domain.enums import Severity

# VIIRS uses single letters, MODIS-derived feeds may spell the word out
_HIGH_CONFIDENCE_TAGS = frozenset({"h", "high"})


@dataclass(frozen=True)
class SeverityStats:
    """Severity tier plus the FRP aggregates it was derived from."""

    severity: Severity
    frp_max: float
    frp_sum: float


def is_high_confidence(tag: Optional[str]) -> bool:
    return tag is not None and tag.strip().lower() in _HIGH_CONFIDENCE_TAGS


def classify_severity(
    frps: Iterable[float],
    confidences: Iterable[Optional[str]],
) -> SeverityStats:
    """Classify a cluster from its member FRP values and confidence tags."""
    values = list(frps)
    frp_max = max(values) if values else 0.0
    frp_sum = sum(values)
    high_conf = any(is_high_confidence(c) for c in confidences)

    if high_conf or frp_max >= 50 or frp_sum >= 200:
        severity = Severity.CRITICAL
    elif frp_max >= 20 or frp_sum >= 80:
        severity = Severity.HIGH
    elif frp_max >= 5 or frp_sum >= 20:
        severity = Severity.MODERATE
    else:
        severity = Severity.LOW

    return SeverityStats(severity=severity, frp_max=frp_max, frp_sum=frp_sum)
