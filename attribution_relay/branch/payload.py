"""Optional-field access over loosely typed Branch webhook bodies."""

from collections.abc import Mapping
from typing import Any


class PayloadView:
    """Read-only view over a string-keyed mapping where every field is optional.

    Branch payloads vary by account setup and SDK version, so nothing is
    assumed present or well-typed. Accessors return None (or an empty view)
    instead of raising.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Any = None):
        self._data: Mapping[str, Any] = data if isinstance(data, Mapping) else {}

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def get_str(self, key: str) -> str | None:
        value = self._data.get(key)
        return value if isinstance(value, str) else None

    def get_mapping(self, key: str) -> "PayloadView":
        return PayloadView(self._data.get(key))

    def items(self):
        return self._data.items()

    def __len__(self) -> int:
        return len(self._data)


def flatten_payload(raw: Any) -> PayloadView:
    """Merge a payload wrapped under `data` into its envelope.

    Some Branch setups nest the event one level deeper. Inner keys win on
    conflict; a non-mapping `data` value is left alone.
    """
    if not isinstance(raw, Mapping):
        return PayloadView()
    inner = raw.get("data")
    if isinstance(inner, Mapping):
        return PayloadView({**raw, **inner})
    return PayloadView(raw)
