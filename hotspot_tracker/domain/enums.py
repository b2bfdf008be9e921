"""Controlled enumerations for the hotspot-tracker domain.

Every categorical field in the domain MUST reference an enum defined here.
Free-form strings are only accepted for raw sensor tags (e.g. detection
confidence), never for classification fields.
"""

from __future__ import annotations

from enum import Enum


class EventCategory(str, Enum):
    """Kinds of environmental event a scan can track."""

    FIRE = "fire"
    FLOOD = "flood"
    STORM = "storm"
    HEATWAVE = "heatwave"
    AIR_POLLUTION = "air-pollution"
    OCEAN_ANOMALY = "ocean-anomaly"


class Severity(str, Enum):
    """Coarse intensity tier of a cluster or event."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordinal used for comparisons: low < moderate < high < critical."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MODERATE: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class EventStatus(str, Enum):
    """Operational status, recomputed every merge from age and severity."""

    ACTIVE = "active"
    ESCALATING = "escalating"
    STABILIZING = "stabilizing"
    CONTAINED = "contained"
    RESOLVED = "resolved"


class Trend(str, Enum):
    """Trajectory of an event's intensity between the last two scans."""

    RISING = "rising"
    STABLE = "stable"
    FALLING = "falling"


class EvacuationLevel(str, Enum):
    """Advisory level.  Carried through persistence, never produced here."""

    NONE = "none"
    RECOMMENDED = "recommended"
    MANDATORY = "mandatory"


class NotificationReason(str, Enum):
    """Why a notification fired.  Checked in declaration order."""

    SEVERITY = "severity"
    STATUS = "status"
    TREND = "trend"
