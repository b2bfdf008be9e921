"""Stable identifier generation for tracked events."""

from __future__ import annotations

import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def new_event_id(prefix: str = "fire") -> str:
    """Return a new event identifier such as ``fire_m1x2k3_ab12cd``.

    The middle part is the creation time in milliseconds (base 36), the
    suffix is random so ids minted in the same millisecond never collide.
    """
    millis = _base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"{prefix}_{millis}_{suffix}"
