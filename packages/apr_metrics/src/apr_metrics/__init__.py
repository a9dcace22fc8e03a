from .compute import compute_audit, compute_score
from .lock import audit_id, submit
from .model import (
    ChatExchange,
    ChatRole,
    EffortInterval,
    Event,
    EventKind,
    InfluenceWindow,
    Intent,
    ScoreResult,
    Session,
)

__version__ = "0.1.0"

__all__ = [
    "compute_score",
    "compute_audit",
    "submit",
    "audit_id",
    "ChatExchange",
    "ChatRole",
    "EffortInterval",
    "Event",
    "EventKind",
    "InfluenceWindow",
    "Intent",
    "ScoreResult",
    "Session",
]
