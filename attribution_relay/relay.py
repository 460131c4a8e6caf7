"""Relay one Branch webhook to Amplitude: compose, then deliver in order."""

from typing import Any

from pydantic import BaseModel, ConfigDict

from attribution_relay.branch import Composition, Skipped, compose
from attribution_relay.providers import DeliveryProvider


class Delivered(BaseModel):
    model_config = ConfigDict(frozen=True)

    insert_id: str
    event_type: str
    identification: dict[str, Any]
    event: dict[str, Any]

    @classmethod
    def from_composition(cls, composition: Composition) -> "Delivered":
        return cls(
            insert_id=composition.normalized.insert_id,
            event_type=composition.normalized.event_label,
            identification=composition.identification,
            event=composition.event,
        )


async def relay(raw: Any, provider: DeliveryProvider, now: int | None = None) -> Delivered | Skipped:
    """Compose Amplitude records for `raw` and deliver them.

    The identify call must succeed before the event is sent, so user
    properties are in place when the event lands. DeliveryError propagates
    to the caller untouched; nothing is retried here.
    """
    outcome = compose(raw, now=now)
    if isinstance(outcome, Skipped):
        return outcome

    await provider.identify([outcome.identification])
    await provider.send_events([outcome.event])
    return Delivered.from_composition(outcome)
