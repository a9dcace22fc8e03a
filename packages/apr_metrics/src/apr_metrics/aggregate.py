from __future__ import annotations

import math
from typing import Dict, Sequence, Tuple

from .model import EffortInterval, InfluenceWindow
from .windowing import is_influenced

THETA = 50.0  # influenced weight below this is assistance, at or above is collaboration
RATIO_MIN = 2
RATIO_MAX = 98
COLLAB_TAG_THRESHOLD = 35
MODE_RATIO_THRESHOLD = 60

PATTERN_COLLABORATION = "structured_collaboration"
PATTERN_AUTONOMOUS = "autonomous_construction"

TAGS: Dict[str, Tuple[str, ...]] = {
    PATTERN_COLLABORATION: ("structured collaboration", "algorithm-guided"),
    PATTERN_AUTONOMOUS: ("autonomous construction", "knowledge internalization"),
}


def round_half_up(x: float) -> int:
    # Python's round() is banker's rounding; reports round .5 upwards
    return int(math.floor(x + 0.5))


def aggregate_weights(
    intervals: Sequence[EffortInterval],
    windows: Sequence[InfluenceWindow],
    *,
    theta: float = THETA,
) -> Dict[str, float]:
    """
    Sum interval weights into total / ai / assist / collab buckets.
    """
    total = ai = assist = collab = 0.0
    for inv in intervals:
        total += inv.weight
        if not is_influenced(inv.midpoint, windows):
            continue
        ai += inv.weight
        if inv.weight < theta:
            assist += inv.weight
        else:
            collab += inv.weight
    return {"total": total, "ai": ai, "assist": assist, "collab": collab}


def breakdown(weights: Dict[str, float]) -> Tuple[int, int, int, int]:
    """
    Returns (ratio, self_pct, assist_pct, collab_pct).

    collab_pct takes the rounding remainder so the three always sum to 100.
    """
    total = weights["total"] or 1.0
    ai = weights["ai"]

    # clamp only with influenced effort; the dashboard clamped to 2 for any non-empty chat log
    if ai > 0:
        ratio = min(RATIO_MAX, max(RATIO_MIN, round_half_up(ai / total * 100)))
    else:
        ratio = 0

    self_pct = round_half_up(max(0.0, weights["total"] - ai) / total * 100)
    assist_pct = round_half_up(weights["assist"] / total * 100)
    # two .5 roundings up can overshoot by one
    assist_pct = min(assist_pct, 100 - self_pct)
    collab_pct = 100 - self_pct - assist_pct
    return ratio, self_pct, assist_pct, collab_pct


def pattern_for(collab_pct: int, *, threshold: int = COLLAB_TAG_THRESHOLD) -> str:
    return PATTERN_COLLABORATION if collab_pct > threshold else PATTERN_AUTONOMOUS


def mode_label(ratio: int, *, threshold: int = MODE_RATIO_THRESHOLD) -> str:
    return "deep_ai_collaboration" if ratio > threshold else "human_original_led"
