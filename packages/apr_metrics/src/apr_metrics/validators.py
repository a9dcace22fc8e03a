from typing import Any, List, Sequence, Tuple

from .model import ChatExchange, Session


def validate_session_minimal(session: Any, exchanges: Sequence[Any]) -> Tuple[bool, List[str]]:
    """
    Minimal checks to prevent silent nonsense.
    Returns (ok, warnings).
    """
    warnings: List[str] = []
    if not isinstance(session, Session):
        return False, ["session is not a Session"]
    if not isinstance(exchanges, (list, tuple)):
        return False, ["exchanges is not a list"]

    for idx, x in enumerate(exchanges):
        if not isinstance(x, ChatExchange):
            return False, [f"exchange[{idx}] is not a ChatExchange"]

    if len(session.events) == 0:
        warnings.append("event log is empty")  # not fatal
    if len(exchanges) == 0:
        warnings.append("chat log is empty")

    early = sum(1 for e in session.events if e.time < session.start_time)
    if early:
        warnings.append(f"{early} events precede session start_time.")

    if session.submit_time is not None:
        if session.submit_time < session.start_time:
            warnings.append("submit_time precedes start_time.")
        late = sum(1 for e in session.events if e.time > session.submit_time)
        if late:
            warnings.append(f"{late} events after submit_time are excluded from scoring.")
        late_x = sum(1 for x in exchanges if x.time > session.submit_time)
        if late_x:
            warnings.append(f"{late_x} exchanges after submit_time are excluded from scoring.")

    return True, warnings
