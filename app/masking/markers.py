import re

from app.logging.logger import Log

CONTENT_TRIGGER = "[CONTENT TRIGGER]"

# Spellings models produce when they "helpfully" rewrite the marker.
_MARKER_VARIANT_RE = re.compile(r"\[\s*content[\s_-]*trigger\s*\]", re.IGNORECASE)


def count_markers(text: str) -> int:
    return text.count(CONTENT_TRIGGER)


def contains_marker(text: str) -> bool:
    return CONTENT_TRIGGER in text


def restore_markers(source: str, translated: str) -> str:
    """Make sure every marker present in ``source`` survives in ``translated``.

    Variant spellings are normalized back to the exact marker first; markers
    that are still missing are appended on their own lines.
    """
    expected = count_markers(source)
    if expected == 0:
        return translated

    restored = _MARKER_VARIANT_RE.sub(CONTENT_TRIGGER, translated)
    missing = expected - count_markers(restored)
    if missing > 0:
        Log.warning(f"Translation dropped {missing} of {expected} content markers, re-appending")
        restored = "\n".join([restored.rstrip(), *([CONTENT_TRIGGER] * missing)])
    return restored
