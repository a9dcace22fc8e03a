from __future__ import annotations

import logging
import platform
import threading
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import psutil

from apr_metrics import compute_audit, compute_score, submit
from apr_metrics.model import ChatExchange, ChatRole, Event, EventKind, ScoreResult, Session, parse_role
from apr_metrics.windowing import now_ms

from .schema import (
    ACTIVITY_THROTTLE_MS,
    APR_SCHEMA_VERSION,
    DEFAULT_APP_NAME,
    DEFAULT_APP_VERSION,
    DEFAULT_COURSE_TAG,
    EVENTS_SCHEMA_VERSION,
    SESSION_ARTIFACT_SCHEMA,
    classify_intent,
)
from .sinks import append_jsonl, write_json

logger = logging.getLogger(__name__)

JsonDict = Dict[str, Any]


def get_machine_metrics() -> JsonDict:
    try:
        return {
            "hostname": platform.node(),
            "os": f"{platform.system()} {platform.release()}",
            "cpu_count": psutil.cpu_count(),
            "ram_total_gb": float(psutil.virtual_memory().total >> 30),
        }
    except Exception as e:
        logger.warning(f"Failed to get machine metrics: {e}")
        return {"hostname": "unknown", "os": "unknown"}


@dataclass
class SessionRecorder:
    """
    Append-only recorder for one learning activity.

    Owns the Session handed to the scoring engine and the chat log next to
    it. Every append goes through one mutex, so several event sources can
    share a recorder; scoring runs on a copied snapshot.
    """

    log_dir: Optional[Path] = None
    course_tag: str = DEFAULT_COURSE_TAG
    app_name: str = DEFAULT_APP_NAME
    app_version: str = DEFAULT_APP_VERSION
    student_id: Optional[str] = None
    model_name: Optional[str] = None
    start_time: Optional[int] = None
    activity_throttle_ms: int = ACTIVITY_THROTTLE_MS
    collect_machine_metrics: bool = True

    # Internals
    session_id: str = ""
    run_id: str = ""
    _seq: int = 0
    _session: Session = None  # type: ignore
    _exchanges: List[ChatExchange] = None  # type: ignore
    _machine: JsonDict = None  # type: ignore
    _mutex: threading.Lock = None  # type: ignore
    _end_time: Optional[int] = None

    def __post_init__(self) -> None:
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir)
        self.session_id = str(uuid.uuid4())
        self.run_id = str(uuid.uuid4())
        self._seq = 0
        self._mutex = threading.Lock()
        self._exchanges = []
        self._machine = get_machine_metrics() if self.collect_machine_metrics else {}
        self._end_time = None

        if self.start_time is None:
            self.start_time = now_ms()
        self._session = Session(start_time=int(self.start_time))

        logger.info(f"Started session recording: {self.session_id}")
        self.record_event(EventKind.OPEN, time=self.start_time)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def exchanges(self) -> List[ChatExchange]:
        return list(self._exchanges)

    @property
    def locked(self) -> bool:
        return self._session.locked

    @property
    def events_path(self) -> Optional[Path]:
        if self.log_dir is None:
            return None
        return self.log_dir / f"run_{self.run_id}.jsonl"

    @property
    def artifact_path(self) -> Optional[Path]:
        if self.log_dir is None:
            return None
        return self.log_dir / f"apr_session_{self.run_id}.json"

    def run_metadata(self) -> JsonDict:
        return {
            "schema_version": APR_SCHEMA_VERSION,
            "run_id": self.run_id,
            "session_id": self.session_id,
            "course_tag": self.course_tag,
            "application": {"name": self.app_name, "version": self.app_version},
            "ai_system": {"model_name": self.model_name},
            "student": {"actor_id": self.student_id},
            "infrastructure": self._machine,
            "timestamps": {
                "start_time": self._session.start_time,
                "submit_time": self._session.submit_time,
                "end_time": self._end_time,
            },
        }

    def _emit(self, record_type: str, body: JsonDict) -> None:
        # caller holds the mutex
        self._seq += 1
        if self.events_path is None:
            return
        row: JsonDict = {
            "schema_version": EVENTS_SCHEMA_VERSION,
            "record_type": record_type,
            "seq": self._seq,
            "context": {
                "run_id": self.run_id,
                "session_id": self.session_id,
                "course_tag": self.course_tag,
                "app_version": self.app_version,
            },
            **body,
        }
        append_jsonl(self.events_path, row)

    def record_event(
        self,
        kind: Union[EventKind, str],
        *,
        time: Optional[int] = None,
        metadata: Optional[JsonDict] = None,
    ) -> Event:
        event = Event(
            kind=EventKind(kind),
            time=int(time) if time is not None else now_ms(),
            metadata=metadata,
        )
        with self._mutex:
            self._session.append(event)
            self._emit("event", event.to_dict())
        return event

    def record_activity(self, *, time: Optional[int] = None) -> Optional[Event]:
        """
        Idle-breaking activity (keystroke, pointer move).

        Recorded only when at least `activity_throttle_ms` passed since the
        last recorded event; returns None when throttled.
        """
        t = int(time) if time is not None else now_ms()
        with self._mutex:
            events = self._session.events
            if events and t - events[-1].time < self.activity_throttle_ms:
                return None
            event = Event(kind=EventKind.ACTIVITY, time=t)
            self._session.append(event)
            self._emit("event", event.to_dict())
        return event

    def switch_tab(self, to: str, *, time: Optional[int] = None) -> Event:
        return self.record_event(EventKind.SWITCH_TAB, time=time, metadata={"to": to})

    def record_exchange(
        self,
        role: Union[ChatRole, str],
        text: str,
        *,
        time: Optional[int] = None,
    ) -> ChatExchange:
        """
        One completed chat turn. Call after the model stream finishes, not per token.

        Mirrored into the event log as AI_ASK / AI_REPLY.
        """
        role = parse_role(role)
        intent = classify_intent(text)
        exchange = ChatExchange(
            role=role,
            text=text,
            time=int(time) if time is not None else now_ms(),
            intent=intent,
        )
        event = Event(
            kind=EventKind.AI_ASK if role is ChatRole.STUDENT else EventKind.AI_REPLY,
            time=exchange.time,
            metadata={"text_length": len(text), "intent": intent.value},
        )
        with self._mutex:
            self._exchanges.append(exchange)
            self._session.append(event)
            self._emit("exchange", exchange.to_dict())
            self._emit("event", event.to_dict())
        return exchange

    def lock(self, *, time: Optional[int] = None) -> bool:
        """
        Freeze the audit horizon. Called once by the upload flow on success.

        A second call is a no-op and returns False.
        """
        t = int(time) if time is not None else now_ms()
        with self._mutex:
            if not submit(self._session, t):
                return False
            event = Event(kind=EventKind.SUBMIT, time=t)
            self._session.append(event)
            self._emit("lock", {"submit_time": t})
            self._emit("event", event.to_dict())
        return True

    def snapshot(self) -> Tuple[Session, List[ChatExchange]]:
        with self._mutex:
            return self._session.snapshot(), list(self._exchanges)

    def score(self, *, now: Optional[int] = None, **kw: Any) -> ScoreResult:
        session, exchanges = self.snapshot()
        return compute_score(session, exchanges, now=now, **kw)

    def audit(self, *, now: Optional[int] = None, **kw: Any) -> JsonDict:
        session, exchanges = self.snapshot()
        return compute_audit(session, exchanges, now=now, **kw)

    def export_session_artifact(self, filename: Optional[Union[str, Path]] = None) -> Path:
        session, exchanges = self.snapshot()
        rm = self.run_metadata()
        artifact: JsonDict = {
            "artifact_schema": SESSION_ARTIFACT_SCHEMA,
            "schema_version": APR_SCHEMA_VERSION,
            "session_id": self.session_id,
            "run_id": self.run_id,
            "meta": {
                "course_tag": self.course_tag,
                "application": rm["application"],
                "ai_system": rm["ai_system"],
                "student": rm["student"],
                "infrastructure": self._machine,
                "timestamps": rm["timestamps"],
            },
            "session": session.to_dict(),
            "exchanges": [x.to_dict() for x in exchanges],
        }

        if filename is not None:
            out = Path(filename)
        elif self.artifact_path is not None:
            out = self.artifact_path
        else:
            raise ValueError("No filename given and recorder has no log_dir.")

        try:
            write_json(out, artifact)
        except OSError as e:
            logger.error(f"Failed to export session artifact: {e}")
            raise

        logger.info(f"Exported session artifact to: {out}")
        return out

    def close(self) -> None:
        if self._end_time is None:
            self._end_time = now_ms()
        logger.info(f"Ended session recording: {self.session_id}")

    def __enter__(self) -> "SessionRecorder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
