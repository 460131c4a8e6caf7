"""
Branch payload handling

Normalizes Branch attribution webhooks into Amplitude records.
"""

from .composer import Composition, NormalizedEvent, Skipped, compose
from .extractors import EventKind, normalize_event_type, pick_device_id, to_millis
from .insert_id import build_insert_id

__all__ = [
    "Composition",
    "EventKind",
    "NormalizedEvent",
    "Skipped",
    "build_insert_id",
    "compose",
    "normalize_event_type",
    "pick_device_id",
    "to_millis",
]
