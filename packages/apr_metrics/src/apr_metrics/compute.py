from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Tuple

from .aggregate import (
    COLLAB_TAG_THRESHOLD,
    TAGS,
    THETA,
    aggregate_weights,
    breakdown,
    mode_label,
    pattern_for,
    round_half_up,
)
from .intervals import IDLE_GAP_MS, MS_PER_MINUTE, MULTIPLIER_BASE, MULTIPLIER_SPAN, build_effort_intervals
from .lock import audit_id
from .model import ChatExchange, ScoreResult, Session
from .validators import validate_session_minimal
from .windowing import TAU_MS, audit_horizon, filter_by_horizon, influence_windows

logger = logging.getLogger(__name__)

JsonDict = Dict[str, Any]


def _score(
    session: Session,
    exchanges: Sequence[ChatExchange],
    *,
    now: Optional[int],
    tau_ms: int,
    idle_gap_ms: int,
    theta: float,
    multiplier_base: float,
    multiplier_span: float,
    collab_tag_threshold: int,
) -> Tuple[ScoreResult, Dict[str, float], JsonDict]:
    horizon = audit_horizon(session, now)
    events_f, exchanges_f, summary = filter_by_horizon(session.events, exchanges, horizon)

    intervals = build_effort_intervals(
        events_f,
        idle_gap_ms=idle_gap_ms,
        multiplier_base=multiplier_base,
        multiplier_span=multiplier_span,
    )
    windows = influence_windows(exchanges_f, tau_ms=tau_ms)
    weights = aggregate_weights(intervals, windows, theta=theta)

    summary["intervals"] = len(intervals)
    summary["windows"] = len(windows)

    if not exchanges_f or weights["total"] <= 0:
        # fully autonomous default
        ratio, self_pct, assist_pct, collab_pct = 0, 100, 0, 0
    else:
        ratio, self_pct, assist_pct, collab_pct = breakdown(weights)

    pattern = pattern_for(collab_pct, threshold=collab_tag_threshold)
    result = ScoreResult(
        ratio=ratio,
        self_pct=self_pct,
        assist_pct=assist_pct,
        collab_pct=collab_pct,
        total_minutes=max(1, round_half_up((horizon - session.start_time) / MS_PER_MINUTE)),
        locked=session.locked,
        pattern=pattern,
        tags=TAGS[pattern],
        audit_id=audit_id(session),
    )
    return result, weights, summary


def compute_score(
    session: Session,
    exchanges: Sequence[ChatExchange],
    *,
    now: Optional[int] = None,
    tau_ms: int = TAU_MS,
    idle_gap_ms: int = IDLE_GAP_MS,
    theta: float = THETA,
    multiplier_base: float = MULTIPLIER_BASE,
    multiplier_span: float = MULTIPLIER_SPAN,
    collab_tag_threshold: int = COLLAB_TAG_THRESHOLD,
) -> ScoreResult:
    """
    AI-participation score for a session and its chat log.

    Pure in its inputs: the horizon is read from `session.submit_time` on
    every call, so a locked session scores identically no matter what is
    appended later. `now` (epoch ms) stands in for the wall clock while the
    session is still open.
    """
    result, weights, _ = _score(
        session,
        exchanges,
        now=now,
        tau_ms=tau_ms,
        idle_gap_ms=idle_gap_ms,
        theta=theta,
        multiplier_base=multiplier_base,
        multiplier_span=multiplier_span,
        collab_tag_threshold=collab_tag_threshold,
    )
    logger.debug(
        f"APR={result.ratio} self={result.self_pct} assist={result.assist_pct} "
        f"collab={result.collab_pct} total_weight={weights['total']:.3f} locked={result.locked}"
    )
    return result


def compute_audit(
    session: Session,
    exchanges: Sequence[ChatExchange],
    *,
    now: Optional[int] = None,
    tau_ms: int = TAU_MS,
    idle_gap_ms: int = IDLE_GAP_MS,
    theta: float = THETA,
    multiplier_base: float = MULTIPLIER_BASE,
    multiplier_span: float = MULTIPLIER_SPAN,
    collab_tag_threshold: int = COLLAB_TAG_THRESHOLD,
    include_warnings: bool = True,
) -> JsonDict:
    """
    Score plus the diagnostics an audit report needs:

      - score: ScoreResult as a dict
      - mode: headline label from the ratio
      - weights: raw total/ai/assist/collab sums
      - horizon_summary: horizon, counts before/after filtering
      - params: tuning constants in effect
      - warnings: validation hints (optional)
    """
    params: JsonDict = {
        "tau_ms": tau_ms,
        "idle_gap_ms": idle_gap_ms,
        "theta": theta,
        "multiplier_base": multiplier_base,
        "multiplier_span": multiplier_span,
        "collab_tag_threshold": collab_tag_threshold,
    }
    result, weights, summary = _score(session, exchanges, now=now, **params)

    out: JsonDict = {
        "score": result.to_dict(),
        "mode": mode_label(result.ratio),
        "weights": dict(weights),
        "horizon_summary": summary,
        "params": params,
    }

    if include_warnings:
        _, warnings = validate_session_minimal(session, exchanges)
        out["warnings"] = warnings

    return out
