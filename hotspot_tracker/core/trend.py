"""TrendEngine — two-point relative change of event intensity.

    I   = frp_sum + 0.6 * frp_max + 0.25 * focus_count   (missing → 0)
    pct = (I_last - I_prev) / I_prev                      (0 when I_prev == 0)

    RISING   pct >  0.15
    FALLING  pct < -0.15
    STABLE   otherwise, or fewer than two snapshots

Re-evaluated every scan from the last two snapshots only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from hotspot_tracker.domain.enums import Trend
from hotspot_tracker.domain.event import HistoryPoint


@dataclass(frozen=True)
class TrendConfig:
    """Weights and thresholds of the intensity comparison."""

    frp_max_weight: float = 0.6
    focus_count_weight: float = 0.25
    rise_threshold: float = 0.15
    fall_threshold: float = 0.15


DEFAULT_TREND_CONFIG = TrendConfig()


def intensity(point: HistoryPoint, config: TrendConfig = DEFAULT_TREND_CONFIG) -> float:
    return (
        (point.frp_sum or 0.0)
        + (point.frp_max or 0.0) * config.frp_max_weight
        + (point.focus_count or 0) * config.focus_count_weight
    )


def relative_change(
    history: Sequence[HistoryPoint],
    config: TrendConfig = DEFAULT_TREND_CONFIG,
) -> float:
    """Relative intensity change between the last two snapshots."""
    if len(history) < 2:
        return 0.0
    before = intensity(history[-2], config)
    after = intensity(history[-1], config)
    if before == 0:
        return 0.0
    return (after - before) / before


def compute_trend(
    history: Sequence[HistoryPoint],
    config: TrendConfig = DEFAULT_TREND_CONFIG,
) -> Trend:
    if len(history) < 2:
        return Trend.STABLE

    pct = relative_change(history, config)
    if pct > config.rise_threshold:
        return Trend.RISING
    if pct < -config.fall_threshold:
        return Trend.FALLING
    return Trend.STABLE
