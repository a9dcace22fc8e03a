import json
import threading
from pathlib import Path

import pytest

from apr_logging import ActivityTracker, SessionRecorder, classify_intent
from apr_logging.validators import validate_stream_minimal
from apr_metrics.io import load_jsonl
from apr_metrics.model import ChatRole, EventKind, Intent


def _recorder(**kw):
    kw.setdefault("start_time", 0)
    kw.setdefault("collect_machine_metrics", False)
    return SessionRecorder(**kw)


def test_recorder_opens_session_with_open_event():
    rec = _recorder()
    assert [e.kind for e in rec.session.events] == [EventKind.OPEN]
    assert rec.session.start_time == 0
    assert rec.events_path is None


def test_activity_is_throttled_to_ten_seconds():
    rec = _recorder()
    assert rec.record_activity(time=5_000) is None
    assert rec.record_activity(time=10_000) is not None
    assert rec.record_activity(time=19_999) is None
    assert rec.record_activity(time=20_000) is not None
    assert [e.time for e in rec.session.events] == [0, 10_000, 20_000]


def test_exchange_is_mirrored_as_event():
    rec = _recorder()
    x = rec.record_exchange("model", "A" * 400, time=1_000)
    assert x.role is ChatRole.MODEL
    assert x.intent is Intent.GENERATION
    last = rec.session.events[-1]
    assert last.kind is EventKind.AI_REPLY
    assert last.metadata == {"text_length": 400, "intent": "GENERATION"}

    rec.record_exchange(ChatRole.STUDENT, "How to read this?", time=2_000)
    assert rec.session.events[-1].kind is EventKind.AI_ASK
    assert len(rec.exchanges) == 2


def test_switch_tab_metadata():
    rec = _recorder()
    e = rec.switch_tab("assignments", time=3_000)
    assert e.kind is EventKind.SWITCH_TAB
    assert e.metadata == {"to": "assignments"}


def test_double_lock_is_noop():
    rec = _recorder()
    assert rec.lock(time=100_000) is True
    assert rec.lock(time=200_000) is False
    assert rec.session.submit_time == 100_000
    kinds = [e.kind for e in rec.session.events]
    assert kinds.count(EventKind.SUBMIT) == 1


def test_score_is_stable_after_lock():
    rec = _recorder()
    rec.record_exchange("model", "explanation", time=10_000)
    rec.record_activity(time=30_000)
    rec.record_activity(time=60_000)
    rec.lock(time=100_000)
    frozen = rec.score()

    rec.record_activity(time=200_000)
    rec.record_exchange("model", "late reply", time=210_000)
    assert rec.score(now=1_000_000) == frozen
    assert frozen.locked


def test_snapshot_is_a_copy():
    rec = _recorder()
    session, exchanges = rec.snapshot()
    rec.record_activity(time=60_000)
    assert len(session.events) == 1
    assert len(rec.session.events) == 2
    assert exchanges == []


def test_concurrent_appends_are_all_kept():
    rec = _recorder()

    def worker(offset):
        for i in range(50):
            rec.record_event(EventKind.SWITCH_TAB, time=offset + i, metadata={"to": "ai"})

    threads = [threading.Thread(target=worker, args=(k * 1_000,)) for k in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(rec.session.events) == 1 + 4 * 50


def test_jsonl_stream_and_artifact(tmp_path: Path):
    with _recorder(log_dir=tmp_path, course_tag="history-201") as rec:
        rec.record_exchange("user", "explain the causes", time=1_000)
        rec.lock(time=5_000)
        out = rec.export_session_artifact()

    rows = load_jsonl(rec.events_path)
    ok, warnings = validate_stream_minimal(rows)
    assert ok and warnings == []
    assert rows[0]["record_type"] == "event"
    assert rows[0]["context"]["course_tag"] == "history-201"

    artifact = json.loads(out.read_text(encoding="utf-8"))
    assert artifact["artifact_schema"] == "apr.session_artifact.v1"
    assert artifact["session"]["submit_time"] == 5_000
    assert artifact["exchanges"][0]["intent"] == "METHOD"


def test_classify_intent():
    assert classify_intent("x" * 301) is Intent.GENERATION
    assert classify_intent("如何理解社会存在？") is Intent.METHOD
    assert classify_intent("Please explain the theorem") is Intent.METHOD
    assert classify_intent("What is entropy?") is Intent.CONCEPT


def test_tracker_attach_detach():
    rec = _recorder()
    registered = []

    def source(callback):
        registered.append(callback)
        return lambda: registered.remove(callback)

    tracker = ActivityTracker(rec)
    tracker.notify(time=50_000)
    assert len(rec.session.events) == 1

    tracker.attach(source)
    assert tracker.attached and len(registered) == 1
    registered[0]("keydown", time=60_000)
    assert rec.session.events[-1].time == 60_000

    tracker.detach()
    assert not tracker.attached and registered == []
    tracker.notify(time=120_000)
    assert rec.session.events[-1].time == 60_000


def test_tracker_context_manager():
    rec = _recorder()
    with ActivityTracker(rec) as tracker:
        tracker.notify(time=30_000)
    tracker.notify(time=90_000)
    assert [e.time for e in rec.session.events] == [0, 30_000]


def test_stream_write_failure_propagates(tmp_path: Path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(OSError):
        _recorder(log_dir=blocker)
