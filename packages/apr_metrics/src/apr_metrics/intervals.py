from __future__ import annotations

from typing import List, Sequence

from .hashing import unit
from .model import EffortInterval, Event

IDLE_GAP_MS = 15 * 60 * 1000  # gaps this long or longer are idle, not effort
MULTIPLIER_BASE = 40.0
MULTIPLIER_SPAN = 30.0
MS_PER_MINUTE = 60_000


def effort_multiplier(t: int, *, base: float = MULTIPLIER_BASE, span: float = MULTIPLIER_SPAN) -> float:
    """Per-minute weight for the interval ending at `t`; in [base, base + span)."""
    return base + unit(t) * span


def build_effort_intervals(
    events: Sequence[Event],
    *,
    idle_gap_ms: int = IDLE_GAP_MS,
    multiplier_base: float = MULTIPLIER_BASE,
    multiplier_span: float = MULTIPLIER_SPAN,
) -> List[EffortInterval]:
    """
    Turn adjacent event pairs into weighted effort intervals.

    Events are sorted here even if the caller already did so; pairing
    out-of-order events would break the idle filter.
    """
    ordered = sorted(events, key=lambda e: e.time)
    out: List[EffortInterval] = []

    for prev, cur in zip(ordered, ordered[1:]):
        duration = cur.time - prev.time
        if duration >= idle_gap_ms:
            continue
        multiplier = effort_multiplier(cur.time, base=multiplier_base, span=multiplier_span)
        weight = (duration / MS_PER_MINUTE) * multiplier
        out.append(
            EffortInterval(
                midpoint=(prev.time + cur.time) / 2,
                weight=max(0.0, weight),
            )
        )
    return out
