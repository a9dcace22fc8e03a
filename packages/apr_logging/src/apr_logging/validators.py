from typing import Any, Dict, List, Tuple

from .schema import EVENTS_SCHEMA_VERSION

JsonDict = Dict[str, Any]

_STREAM_TYPES = ("event", "exchange", "lock")


def validate_stream_minimal(rows: List[JsonDict]) -> Tuple[bool, List[str]]:
    """Sanity hints for a recorder JSONL stream. Returns (ok, warnings)."""
    warnings: List[str] = []
    if not isinstance(rows, list):
        return False, ["stream is not a list"]
    for i, r in enumerate(rows[:10]):
        if not isinstance(r, dict):
            return False, [f"row[{i}] is not a dict"]
        if r.get("schema_version") != EVENTS_SCHEMA_VERSION:
            warnings.append(f"row[{i}] has unexpected schema_version {r.get('schema_version')!r}")
        if r.get("record_type") not in _STREAM_TYPES:
            warnings.append(f"row[{i}] missing record_type (event/exchange/lock)")
        if "seq" not in r:
            warnings.append(f"row[{i}] missing seq")
    return True, warnings
