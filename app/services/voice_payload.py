"""Normalization helpers for loosely-typed voice-platform payloads.

The voice platform sends whatever its conversation analysis produced: values
can be missing, blank, numbers-as-strings, ``"yes"``/``"no"`` booleans, or
wrapped in ``{"value": ...}`` objects. Everything here is pure and never
raises on bad input; unusable values come back as ``None``.
"""


import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

# Longest call accepted as a real duration (one day)
MAX_CALL_SECONDS = 24 * 60 * 60

_TRUE_STRINGS = frozenset({"true", "yes", "y", "1", "on"})
_FALSE_STRINGS = frozenset({"false", "no", "n", "0", "off"})

_ROLE_LABELS: dict[str, str] = {
    "agent": "Agent",
    "assistant": "Agent",
    "ai": "Agent",
    "user": "Caller",
    "caller": "Caller",
    "customer": "Caller",
}


def normalize_string(value: Any) -> str | None:
    """Return a trimmed string, or None for missing / blank / non-scalar values."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def parse_boolean(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def parse_int(value: Any) -> int | None:
    """Whole-number view of *value*; non-finite and unparseable values are None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    return None


def parse_duration(value: Any, maximum: int = MAX_CALL_SECONDS) -> int | None:
    """Call length in seconds, or None when negative or longer than *maximum*."""
    seconds = parse_int(value)
    if seconds is None or seconds < 0 or seconds > maximum:
        return None
    return seconds


def parse_unix_timestamp(value: Any) -> datetime | None:
    """UTC datetime for a positive epoch-seconds value the platform can represent."""
    seconds = parse_int(value)
    if seconds is None or seconds <= 0:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def build_transcript_text(transcript: Any) -> str | None:
    """Flatten a transcript into ``"Role: text"`` lines.

    Accepts a plain string or a list of turns shaped like
    ``{"role": "agent", "message": "..."}`` (``text`` is accepted in place of
    ``message``). Turns without text are skipped.
    """
    if isinstance(transcript, str):
        return normalize_string(transcript)
    if not isinstance(transcript, list):
        return None

    lines: list[str] = []
    for turn in transcript:
        if not isinstance(turn, Mapping):
            continue
        text = normalize_string(turn.get("message")) or normalize_string(turn.get("text"))
        if not text:
            continue
        role = normalize_string(turn.get("role")) or "unknown"
        label = _ROLE_LABELS.get(role.lower(), role.replace("_", " ").title())
        lines.append(f"{label}: {text}")
    return "\n".join(lines) or None


def detect_emergency(text: str | None, keywords: Iterable[str]) -> list[str]:
    """Return the keywords found in *text* (case-insensitive), in keyword order."""
    if not text:
        return []
    haystack = text.lower()
    matched: list[str] = []
    for keyword in keywords:
        needle = (keyword or "").strip().lower()
        if needle and needle in haystack and keyword not in matched:
            matched.append(keyword)
    return matched


def format_ticket_number(ticket_number: int | None) -> str:
    """``7`` -> ``MR-0007``."""
    return f"MR-{str(ticket_number if ticket_number is not None else 0).zfill(4)}"


def collected_value(results: Any, *keys: str) -> Any:
    """Read the first non-empty value among *keys* from a data-collection mapping.

    Entries may be raw values or ``{"value": ...}`` objects.
    """
    if not isinstance(results, Mapping):
        return None
    for key in keys:
        entry = results.get(key)
        if isinstance(entry, Mapping):
            entry = entry.get("value")
        if entry is None or (isinstance(entry, str) and not entry.strip()):
            continue
        return entry
    return None


def dig(payload: Any, *path: str) -> Any:
    """Safe nested lookup: ``dig(p, "data", "metadata", "call_duration_secs")``."""
    current = payload
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current
