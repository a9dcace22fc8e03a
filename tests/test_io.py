import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from apr_metrics import compute_score
from apr_metrics.io import extract_session, load_jsonl, load_session_artifact
from apr_metrics.model import ChatExchange, ChatRole, Event, EventKind, Intent, Session, parse_role, to_millis
from apr_metrics.validators import validate_session_minimal


def test_session_dict_roundtrip():
    s = Session(
        start_time=0,
        submit_time=9_000,
        events=[Event(EventKind.OPEN, 0), Event(EventKind.SWITCH_TAB, 5, {"to": "ai"})],
    )
    assert Session.from_dict(json.loads(json.dumps(s.to_dict()))) == s


def test_exchange_from_transport_roles():
    x = ChatExchange.from_dict({"role": "user", "text": "hi", "time": 1, "intent": "CONCEPT"})
    assert x.role is ChatRole.STUDENT
    assert x.intent is Intent.CONCEPT
    assert parse_role("model") is ChatRole.MODEL
    with pytest.raises(ValueError):
        parse_role("teacher")


def test_event_time_must_be_epoch_or_iso():
    with pytest.raises(ValueError):
        Event.from_dict({"kind": "OPEN", "time": "noon"})
    with pytest.raises(TypeError):
        Event.from_dict({"kind": "OPEN", "time": [1]})
    with pytest.raises(TypeError):
        Event.from_dict({"kind": "OPEN", "time": True})


def test_to_millis_iso_forms():
    expected = int(datetime(2023, 11, 14, 0, 10, 0, tzinfo=timezone.utc).timestamp() * 1000)
    assert to_millis("2023-11-14T00:10:00Z") == expected
    assert to_millis("2023-11-14T02:10:00+02:00") == expected
    assert to_millis("2023-11-14T00:10:00") == expected
    assert to_millis(expected) == expected


def test_load_artifact_with_iso_timestamps(tmp_path: Path):
    p = tmp_path / "iso.json"
    p.write_text(
        json.dumps(
            {
                "session": {
                    "start_time": "2023-11-14T00:00:00Z",
                    "submit_time": "2023-11-14T00:10:00Z",
                    "events": [
                        {"kind": "OPEN", "time": "2023-11-14T00:00:00Z"},
                        {"kind": "ACTIVITY", "time": "2023-11-14T00:01:00Z"},
                    ],
                },
                "exchanges": [{"role": "model", "text": "a", "time": "2023-11-14T00:00:30Z"}],
            }
        ),
        encoding="utf-8",
    )
    session, exchanges = load_session_artifact(p)
    start = int(datetime(2023, 11, 14, tzinfo=timezone.utc).timestamp() * 1000)
    assert session.start_time == start
    assert session.submit_time == start + 600_000
    assert [e.time for e in session.events] == [start, start + 60_000]
    assert exchanges[0].time == start + 30_000
    assert compute_score(session, exchanges).total_minutes == 10


def test_load_session_artifact(tmp_path: Path):
    p = tmp_path / "artifact.json"
    p.write_text(
        json.dumps(
            {
                "session": {"start_time": 0, "submit_time": None, "events": [{"kind": "OPEN", "time": 0}]},
                "exchanges": [{"role": "MODEL", "text": "a", "time": 10}],
            }
        ),
        encoding="utf-8",
    )
    session, exchanges = load_session_artifact(p)
    assert session.submit_time is None
    assert exchanges[0].role is ChatRole.MODEL


def test_load_rejects_non_artifact(tmp_path: Path):
    p = tmp_path / "other.json"
    p.write_text(json.dumps({"decisions": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_session_artifact(p)
    with pytest.raises(TypeError):
        extract_session({"decisions": []})


def test_load_jsonl_reports_bad_line(tmp_path: Path):
    p = tmp_path / "run.jsonl"
    p.write_text('{"a": 1}\n\nnot json\n', encoding="utf-8")
    with pytest.raises(ValueError, match="line 3"):
        load_jsonl(p)


def test_validate_session_minimal_hints():
    s = Session(start_time=100, submit_time=500, events=[Event(EventKind.OPEN, 50), Event(EventKind.ACTIVITY, 600)])
    ok, warnings = validate_session_minimal(s, [ChatExchange(ChatRole.MODEL, "x", 700)])
    assert ok
    assert "1 events precede session start_time." in warnings
    assert "1 events after submit_time are excluded from scoring." in warnings
    assert "1 exchanges after submit_time are excluded from scoring." in warnings

    assert validate_session_minimal({}, []) == (False, ["session is not a Session"])
    assert validate_session_minimal(s, ["x"])[0] is False
