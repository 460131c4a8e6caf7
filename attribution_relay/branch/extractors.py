"""Field extractors: device id, timestamp and event type from a Branch payload."""

import math
import time
from datetime import date, datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, NamedTuple

from .payload import PayloadView

# Recognized identifier keys, compared after lower-casing the payload key.
DEVICE_ID_KEYS = frozenset({"idfa", "idfv", "adid", "advertising_id", "gaid"})

# Numbers at or below this are epoch seconds, above it epoch milliseconds.
MILLIS_THRESHOLD = 1e12

DEFAULT_EVENT_LABEL = "Branch Event"


class EventKind(str, Enum):
    INSTALL = "install"
    REINSTALL = "reinstall"
    OPEN = "open"
    OTHER = "other"


class EventType(NamedTuple):
    kind: EventKind
    label: str


# Checked in order; REINSTALL must precede INSTALL since it contains it.
_EVENT_RULES = (
    ("REINSTALL", EventKind.REINSTALL, "Branch Reinstall"),
    ("INSTALL", EventKind.INSTALL, "Branch Attributed Install"),
    ("OPEN", EventKind.OPEN, "Branch Open"),
)


def pick_device_id(user_data: Any) -> str | None:
    """Return the first usable device identifier in `user_data`, or None.

    Keys are matched case-insensitively against DEVICE_ID_KEYS and scanned in
    the order the mapping yields them, so {"adid": "a", "idfa": "b"} gives "a".
    Values must be strings with non-blank content; they are returned trimmed.
    """
    view = user_data if isinstance(user_data, PayloadView) else PayloadView(user_data)
    for key, value in view.items():
        if not isinstance(key, str) or key.lower() not in DEVICE_ID_KEYS:
            continue
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _now_millis() -> int:
    return int(time.time() * 1000)


def _scale_number(number: float) -> int | None:
    if isinstance(number, float) and not math.isfinite(number):
        return None
    if number > MILLIS_THRESHOLD:
        return int(number)
    scaled = number * 1000
    if isinstance(scaled, float) and not math.isfinite(scaled):
        return None
    return int(round(scaled))


def _datetime_millis(value: date) -> int:
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(round(value.timestamp() * 1000))


def _parse_datetime(text: str) -> datetime | None:
    iso = text[:-1] + "+00:00" if text[-1:] in ("Z", "z") else text
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None


def _coerce_millis(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, date):
        return _datetime_millis(value)

    if isinstance(value, (int, float)):
        return _scale_number(value)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            scaled = _scale_number(float(text))
        except ValueError:
            scaled = None
        if scaled is not None:
            return scaled
        parsed = _parse_datetime(text)
        if parsed is not None:
            return _datetime_millis(parsed)

    return None


def to_millis(value: Any, now: int | None = None) -> int:
    """Coerce a Branch timestamp to integer epoch milliseconds.

    Accepts numbers (seconds or milliseconds, see MILLIS_THRESHOLD), numeric
    strings, ISO-8601 / RFC 2822 date strings and datetime objects. Anything
    missing or unparseable yields the current time; this never raises.
    """
    millis = _coerce_millis(value)
    if millis is None:
        return _now_millis() if now is None else now
    return millis


def pick_timestamp(payload: PayloadView) -> Any:
    """`timestamp_millis` when usable, else the generic `timestamp` field.

    Empty, zero, false or unparseable `timestamp_millis` values do not hide
    a valid `timestamp`.
    """
    millis = payload.get("timestamp_millis")
    if millis and _coerce_millis(millis) is not None:
        return millis
    return payload.get("timestamp")



def normalize_event_type(name: Any, alt: Any = None) -> EventType:
    """Map Branch's event name (or the alternate `event` field) to a kind and label.

    Matching is a case-insensitive substring test in REINSTALL, INSTALL, OPEN
    order. Unrecognized names keep their uppercased text as the label.
    """
    raw = ""
    for candidate in (name, alt):
        if isinstance(candidate, str) and candidate:
            raw = candidate
            break
    upper = raw.upper()

    for needle, kind, label in _EVENT_RULES:
        if needle in upper:
            return EventType(kind, label)
    return EventType(EventKind.OTHER, upper or DEFAULT_EVENT_LABEL)
