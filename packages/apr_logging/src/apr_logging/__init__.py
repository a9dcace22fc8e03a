from .logger import SessionRecorder
from .schema import classify_intent
from .tracker import ActivityTracker

__version__ = "0.1.0"

__all__ = ["SessionRecorder", "ActivityTracker", "classify_intent"]
