from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from .logger import SessionRecorder

logger = logging.getLogger(__name__)

# A source registers a callback and returns a function that unregisters it
ActivitySource = Callable[[Callable[..., Any]], Callable[[], None]]


class ActivityTracker:
    """
    Bridges UI input listeners (keydown, pointer move) to a SessionRecorder.

    attach() subscribes `notify` to a source; detach() unsubscribes it.
    Notifications arriving while detached are dropped.
    """

    def __init__(self, recorder: SessionRecorder) -> None:
        self.recorder = recorder
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._attached = False
        self._guard = threading.Lock()

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self, source: Optional[ActivitySource] = None) -> None:
        with self._guard:
            if self._attached:
                return
            self._unsubscribe = source(self.notify) if source is not None else None
            self._attached = True
        logger.debug(f"Activity tracker attached to session {self.recorder.session_id}")

    def detach(self) -> None:
        with self._guard:
            if not self._attached:
                return
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            self._attached = False
        if unsubscribe is not None:
            unsubscribe()
        logger.debug(f"Activity tracker detached from session {self.recorder.session_id}")

    def notify(self, *args: Any, time: Optional[int] = None, **kwargs: Any) -> None:
        """Input callback; extra positional/keyword args from the source are ignored."""
        if not self._attached:
            return
        self.recorder.record_activity(time=time)

    def __enter__(self) -> "ActivityTracker":
        self.attach()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.detach()
