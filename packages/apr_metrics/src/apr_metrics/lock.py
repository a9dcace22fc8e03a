from __future__ import annotations

import logging
from typing import Optional

from .model import Session

logger = logging.getLogger(__name__)

_B36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def submit(session: Session, time: int) -> bool:
    """
    Freeze the audit horizon at `time`.

    Returns False and leaves the session untouched if it is already locked.
    """
    if session.submit_time is not None:
        logger.warning(
            f"Ignoring submit at {time}: session already locked at {session.submit_time}"
        )
        return False
    session.submit_time = int(time)
    logger.info(f"Session locked at {session.submit_time}")
    return True


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    sign = "-" if n < 0 else ""
    n = abs(n)
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(_B36[r])
    return sign + "".join(reversed(digits))


def audit_id(session: Session) -> Optional[str]:
    """Archive id shown on a locked report, derived from the submit time only."""
    if session.submit_time is None:
        return None
    return f"HASH-{_base36(session.submit_time).upper()}"
