from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

JsonDict = Dict[str, Any]


class EventKind(str, Enum):
    OPEN = "OPEN"
    ACTIVITY = "ACTIVITY"
    SWITCH_TAB = "SWITCH_TAB"
    AI_ASK = "AI_ASK"
    AI_REPLY = "AI_REPLY"
    SUBMIT = "SUBMIT"


class ChatRole(str, Enum):
    STUDENT = "STUDENT"
    MODEL = "MODEL"


class Intent(str, Enum):
    CONCEPT = "CONCEPT"
    METHOD = "METHOD"
    GENERATION = "GENERATION"


# Accept the chat transport's own role names as well
_ROLE_ALIASES = {
    "student": ChatRole.STUDENT,
    "user": ChatRole.STUDENT,
    "human": ChatRole.STUDENT,
    "model": ChatRole.MODEL,
    "ai": ChatRole.MODEL,
    "assistant": ChatRole.MODEL,
}


def parse_role(v: Any) -> ChatRole:
    if isinstance(v, ChatRole):
        return v
    role = _ROLE_ALIASES.get(str(v).strip().lower())
    if role is None:
        raise ValueError(f"Unknown chat role: {v!r}")
    return role


def to_millis(v: Any, name: str = "time") -> int:
    """
    Epoch milliseconds from a number or an ISO-8601 string.

    Chat transports stamp turns with ISO strings ('2026-01-31T12:00:00Z'),
    the activity log with epoch ms. A string without an offset is read as UTC.
    """
    if isinstance(v, bool):
        raise TypeError(f"{name} must be epoch ms or ISO-8601, got bool")
    if isinstance(v, (int, float)):
        return int(v)
    if not isinstance(v, str):
        raise TypeError(f"{name} must be epoch ms or ISO-8601, got {type(v).__name__}")

    text = v.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        stamp = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"{name} is not an ISO-8601 timestamp: {v!r}") from e
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return int(round(stamp.timestamp() * 1000))


@dataclass(frozen=True)
class Event:
    kind: EventKind
    time: int
    metadata: Optional[JsonDict] = None

    def to_dict(self) -> JsonDict:
        d: JsonDict = {"kind": self.kind.value, "time": self.time}
        if self.metadata is not None:
            d["metadata"] = dict(self.metadata)
        return d

    @classmethod
    def from_dict(cls, d: JsonDict) -> "Event":
        return cls(
            kind=EventKind(d["kind"]),
            time=to_millis(d["time"], "event time"),
            metadata=d.get("metadata"),
        )


@dataclass(frozen=True)
class ChatExchange:
    role: ChatRole
    text: str
    time: int
    intent: Optional[Intent] = None

    def to_dict(self) -> JsonDict:
        d: JsonDict = {"role": self.role.value, "text": self.text, "time": self.time}
        if self.intent is not None:
            d["intent"] = self.intent.value
        return d

    @classmethod
    def from_dict(cls, d: JsonDict) -> "ChatExchange":
        intent = d.get("intent")
        return cls(
            role=parse_role(d["role"]),
            text=str(d.get("text", "")),
            time=to_millis(d["time"], "exchange time"),
            intent=Intent(intent) if intent else None,
        )


@dataclass
class Session:
    """
    One learning activity, from app open to submission.

    Mutated only by appending events and by the lock authority, which writes
    `submit_time` exactly once.
    """

    start_time: int
    submit_time: Optional[int] = None
    events: List[Event] = field(default_factory=list)

    @property
    def locked(self) -> bool:
        return self.submit_time is not None

    def append(self, event: Event) -> None:
        self.events.append(event)

    def snapshot(self) -> "Session":
        return Session(
            start_time=self.start_time,
            submit_time=self.submit_time,
            events=list(self.events),
        )

    def to_dict(self) -> JsonDict:
        return {
            "start_time": self.start_time,
            "submit_time": self.submit_time,
            "events": [e.to_dict() for e in self.events],
        }

    @classmethod
    def from_dict(cls, d: JsonDict) -> "Session":
        submit = d.get("submit_time")
        return cls(
            start_time=to_millis(d["start_time"], "start_time"),
            submit_time=to_millis(submit, "submit_time") if submit is not None else None,
            events=[Event.from_dict(e) for e in d.get("events", [])],
        )


@dataclass(frozen=True)
class EffortInterval:
    midpoint: float
    weight: float


@dataclass(frozen=True)
class InfluenceWindow:
    start: int
    end: int

    def contains(self, t: float) -> bool:
        return self.start <= t <= self.end


@dataclass(frozen=True)
class ScoreResult:
    ratio: int
    self_pct: int
    assist_pct: int
    collab_pct: int
    total_minutes: int
    locked: bool
    pattern: str
    tags: Tuple[str, ...]
    audit_id: Optional[str] = None

    def to_dict(self) -> JsonDict:
        return {
            "ratio": self.ratio,
            "self_pct": self.self_pct,
            "assist_pct": self.assist_pct,
            "collab_pct": self.collab_pct,
            "total_minutes": self.total_minutes,
            "locked": self.locked,
            "pattern": self.pattern,
            "tags": list(self.tags),
            "audit_id": self.audit_id,
        }
