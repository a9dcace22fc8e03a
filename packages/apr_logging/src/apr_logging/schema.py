from apr_metrics.model import Intent

# -------------------------
# APR schema constants
# -------------------------
APR_SCHEMA_VERSION = "apr.run.v1"
EVENTS_SCHEMA_VERSION = "apr.events.v1"
SESSION_ARTIFACT_SCHEMA = "apr.session_artifact.v1"
DEFAULT_APP_NAME = "elearning_dashboard"
DEFAULT_APP_VERSION = "0.1.0"
DEFAULT_COURSE_TAG = "unknown-course"

ACTIVITY_THROTTLE_MS = 10_000  # re-record idle-breaking activity at most every 10 s

GENERATION_MIN_CHARS = 300
METHOD_MARKERS = ("如何", "解释", "how to", "explain")


def classify_intent(text: str) -> Intent:
    """Coarse intent of a chat turn: long text is generation, how/explain asks for method."""
    if len(text) > GENERATION_MIN_CHARS:
        return Intent.GENERATION
    lowered = text.lower()
    if any(m in lowered for m in METHOD_MARKERS):
        return Intent.METHOD
    return Intent.CONCEPT
