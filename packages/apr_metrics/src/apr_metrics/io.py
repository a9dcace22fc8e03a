import json
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from .model import ChatExchange, Session

JsonDict = Dict[str, Any]


def load_json(path: Union[str, Path]) -> JsonDict:
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_jsonl(path: Union[str, Path]) -> List[JsonDict]:
    path = Path(path)
    rows: List[JsonDict] = []
    with path.open("r", encoding="utf-8") as f:
        for i, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                rows.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON on line {i} of {path}: {e}") from e
    return rows


def extract_session(obj: JsonDict) -> Tuple[Session, List[ChatExchange]]:
    """
    Accept an artifact dict with:
      - session: {start_time, submit_time, events[]}
      - exchanges: List[dict] (optional)
    """
    if not isinstance(obj, dict) or not isinstance(obj.get("session"), dict):
        raise TypeError("Expected an artifact dict with key 'session'.")
    session = Session.from_dict(obj["session"])
    exchanges = [ChatExchange.from_dict(x) for x in obj.get("exchanges") or []]
    return session, exchanges


def load_session_artifact(path: Union[str, Path]) -> Tuple[Session, List[ChatExchange]]:
    """
    Loads a session artifact expected to contain at least:
      - session: {start_time, submit_time, events}
    Optionally:
      - exchanges
      - meta
      - schema_version
    """
    obj = load_json(path)
    if not isinstance(obj.get("session"), dict):
        raise ValueError(f"{path} is not a session artifact (missing 'session' object).")
    return extract_session(obj)
