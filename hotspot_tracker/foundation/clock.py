"""Timezone-aware clock utilities.

All instants in hotspot-tracker are UTC-aware datetimes.  This module is
the single source of "now", and ``Instant`` is the field type every model
uses, so instants parsed from the wire or from storage are always UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and normalise aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Pydantic field type for every instant in the domain.
Instant = Annotated[datetime, AfterValidator(ensure_utc)]
