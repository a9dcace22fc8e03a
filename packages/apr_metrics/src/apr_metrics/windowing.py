from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .model import ChatExchange, ChatRole, Event, InfluenceWindow, Session

JsonDict = Dict[str, Any]

TAU_MS = 10 * 60 * 1000  # influence window length after each AI reply


def now_ms() -> int:
    return int(time.time() * 1000)


def audit_horizon(session: Session, now: Optional[int] = None) -> int:
    """
    Submission time once locked, otherwise `now` (wall clock if not given).

    Read from the session on every call; never cached.
    """
    if session.submit_time is not None:
        return session.submit_time
    return int(now) if now is not None else now_ms()


def filter_by_horizon(
    events: Sequence[Event],
    exchanges: Sequence[ChatExchange],
    horizon: int,
) -> Tuple[List[Event], List[ChatExchange], JsonDict]:
    """
    Returns (events_sorted, exchanges_kept, horizon_summary).

    Entries with time > horizon are dropped. Events come back sorted by time;
    the sort is stable so equal timestamps keep insertion order.
    """
    events_f = sorted((e for e in events if e.time <= horizon), key=lambda e: e.time)
    exchanges_f = [x for x in exchanges if x.time <= horizon]

    summary: JsonDict = {
        "horizon": horizon,
        "counts": {
            "events_total": len(events),
            "events_used": len(events_f),
            "exchanges_total": len(exchanges),
            "exchanges_used": len(exchanges_f),
        },
    }
    return events_f, exchanges_f, summary


def influence_windows(exchanges: Sequence[ChatExchange], *, tau_ms: int = TAU_MS) -> List[InfluenceWindow]:
    """One window [t, t + tau] per MODEL exchange. Windows may overlap."""
    return [
        InfluenceWindow(start=x.time, end=x.time + tau_ms)
        for x in exchanges
        if x.role is ChatRole.MODEL
    ]


def is_influenced(t: float, windows: Sequence[InfluenceWindow]) -> bool:
    return any(w.contains(t) for w in windows)
