"""Deterministic Amplitude insert ids for Branch events."""

import hashlib
import json
from typing import Any

INSERT_ID_LENGTH = 64


def build_insert_id(
    event_id: Any,
    name: Any,
    event: Any,
    when: int,
    label: str,
    link_id: Any,
) -> str:
    """Hash the fields identifying a Branch delivery into a stable insert id.

    Branch retries a webhook until it gets a 2xx; every retry of the same
    event hashes to the same id, and Amplitude drops the duplicates. Values
    are serialized as received, with absent fields as null.
    """
    seed = json.dumps(
        {
            "id": event_id,
            "name": name,
            "event": event,
            "when": when,
            "label": label,
            "link": link_id,
        },
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:INSERT_ID_LENGTH]
