"""Persistence boundary for EventStores, one document per (category, region).

Design notes:
    - Reads never fail: a missing, unreadable or corrupt document loads as
      an empty store (every cluster of the next scan becomes a new event).
      Individually invalid entries are skipped with a warning.
    - Writes are all-or-nothing: the JSON repository writes a temporary
      file and atomically replaces the previous document.
    - Each (category, region) key has its own asyncio.Lock so scans of
      different partitions never wait on each other, while two scans of
      the same partition run one after the other.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from hotspot_tracker.domain.enums import EventCategory
from hotspot_tracker.domain.event import TrackedEvent
from hotspot_tracker.store.event_store import EventStore

logger = logging.getLogger(__name__)

# (category, region key): the unit of persistence and of mutual exclusion
StoreKey = tuple[EventCategory, str]


class StoreWriteError(Exception):
    """Raised when a store document could not be written."""

    def __init__(self, key: StoreKey, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Could not persist {key[0].value}/{key[1]}: {reason}")


class EventRepository(Protocol):
    """Protocol for loading and saving per-partition event stores."""

    def load(self, key: StoreKey) -> EventStore:
        """Return the stored events for *key*, or an empty store."""
        ...

    def save(self, key: StoreKey, store: EventStore) -> None:
        """Replace the stored events for *key*."""
        ...

    def lock(self, key: StoreKey) -> asyncio.Lock:
        """The lock guarding read-merge-write cycles on *key*."""
        ...


# ── Serialization ────────────────────────────────────────────────────────────


def serialize_events(store: EventStore) -> str:
    return json.dumps(store.to_wire(), ensure_ascii=False, indent=2)


def parse_events(raw: str | bytes) -> EventStore:
    """Parse a store document, degrading to whatever entries are valid."""
    try:
        payload: Any = json.loads(raw)
    except (ValueError, TypeError) as exc:
        logger.warning("Corrupt event store document, starting empty: %s", exc)
        return EventStore.empty()

    if not isinstance(payload, list):
        logger.warning(
            "Event store document is a %s, expected a list; starting empty",
            type(payload).__name__,
        )
        return EventStore.empty()

    events: list[TrackedEvent] = []
    for i, entry in enumerate(payload):
        try:
            events.append(TrackedEvent.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping invalid stored event #%d: %s", i, exc.errors()[:1])
    return EventStore.from_events(events)


# ── Implementations ──────────────────────────────────────────────────────────


class _KeyedLocks:
    """Lazily created asyncio.Lock per store key."""

    def __init__(self) -> None:
        self._locks: dict[StoreKey, asyncio.Lock] = {}

    def lock(self, key: StoreKey) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


class InMemoryEventRepository(_KeyedLocks):
    """Process-local repository.  Stores are immutable values, so no copies."""

    kind = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._stores: dict[StoreKey, EventStore] = {}

    def load(self, key: StoreKey) -> EventStore:
        return self._stores.get(key, EventStore.empty())

    def save(self, key: StoreKey, store: EventStore) -> None:
        self._stores[key] = store

    def keys(self) -> list[StoreKey]:
        return list(self._stores)

    def clear(self) -> None:
        self._stores.clear()


class JsonFileEventRepository(_KeyedLocks):
    """One JSON document per key under *directory*.

    Args:
        directory: Where documents live.  Created on first save.
    """

    kind = "json"

    _UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")

    def __init__(self, directory: str | Path) -> None:
        super().__init__()
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: StoreKey) -> Path:
        category, region = key
        safe_region = self._UNSAFE.sub("_", region).strip("_") or "default"
        return self._directory / f"{category.value}__{safe_region}.json"

    def load(self, key: StoreKey) -> EventStore:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return EventStore.empty()
        except OSError as exc:
            logger.warning("Could not read %s, starting empty: %s", path, exc)
            return EventStore.empty()
        return parse_events(raw)

    def save(self, key: StoreKey, store: EventStore) -> None:
        path = self.path_for(key)
        document = serialize_events(store)
        tmp_name: str | None = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory, prefix=f".{path.stem}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(document)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise StoreWriteError(key, str(exc)) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug("Saved %d event(s) to %s", len(store), path)
