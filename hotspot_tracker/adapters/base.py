"""Abstract base for detection adapters.

Detection adapters normalise raw payloads from heterogeneous hotspot
feeds into the canonical DetectionPoint model.

Architectural rules:
    1. Adapters must NOT mutate the incoming payload dict.
    2. adapt() must return a fully valid DetectionPoint or raise ValueError.
    3. No adapter may touch an EventRepository.
    4. No clustering or classification lives inside an adapter — only field mapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from hotspot_tracker.domain.detection import DetectionPoint


class DetectionAdapter(ABC):
    """Base class for converting raw feed records into DetectionPoints."""

    @abstractmethod
    def can_handle(self, raw: dict[str, Any]) -> bool:
        """Return True if this adapter knows how to translate *raw*.

        Must be a fast, non-destructive check (e.g. key presence).
        """
        ...

    @abstractmethod
    def adapt(self, raw: dict[str, Any], fallback_id: str) -> DetectionPoint:
        """Translate a raw record into a validated DetectionPoint.

        *fallback_id* is used when the record carries no identifier.
        The input dict must NOT be mutated.

        Raises:
            ValueError: If the record cannot be normalised.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Human-readable name of the feed format this adapter handles."""
        ...
