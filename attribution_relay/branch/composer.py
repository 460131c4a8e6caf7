"""Build Amplitude identify and event records from a Branch webhook payload."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from .extractors import (
    EventKind,
    normalize_event_type,
    pick_device_id,
    pick_timestamp,
    to_millis,
)
from .insert_id import build_insert_id
from .payload import PayloadView, flatten_payload

SKIP_NO_DEVICE_ID = "no_device_id"


class Platform(str, Enum):
    IOS = "iOS"
    ANDROID = "Android"


class AttributionFields(BaseModel):
    """Branch last-touch attribution, as forwarded to Amplitude."""
    model_config = ConfigDict(frozen=True)

    channel: str | None = None
    campaign: str | None = None
    ad_partner: str | None = None
    ad_set: str | None = None
    creative: str | None = None
    feature: str | None = None
    link_id: str | None = None
    campaign_id: str | None = None
    ad_set_id: str | None = None
    tags: tuple[str, ...] | None = None
    web_to_app: bool | None = None


class DeviceMetaFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    platform: Platform
    app_version: str | None = None
    os_name: str | None = None
    os_version: str | None = None
    device_model: str | None = None


class NormalizedEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    device_id: str
    timestamp_millis: int
    event_kind: EventKind
    event_label: str
    attribution: AttributionFields
    device_meta: DeviceMetaFields
    insert_id: str


class Composition(BaseModel):
    """Records ready for delivery, in delivery order."""
    model_config = ConfigDict(frozen=True)

    normalized: NormalizedEvent
    identification: dict[str, Any]
    event: dict[str, Any]


class Skipped(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str


def _attribution_value(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def extract_attribution(touch: PayloadView) -> AttributionFields:
    tags = touch.get("tags")
    web_to_app = touch.get("web_to_app")
    return AttributionFields(
        channel=_attribution_value(touch.get("channel")),
        campaign=_attribution_value(touch.get("campaign")),
        ad_partner=_attribution_value(touch.get("ad_partner")),
        ad_set=_attribution_value(touch.get("ad_set")),
        creative=_attribution_value(touch.get("creative")),
        feature=_attribution_value(touch.get("feature")),
        link_id=_attribution_value(touch.get("link_id")),
        campaign_id=_attribution_value(touch.get("campaign_id")),
        ad_set_id=_attribution_value(touch.get("ad_set_id")),
        tags=tuple(t for t in tags if isinstance(t, str)) if isinstance(tags, list) else None,
        web_to_app=None if web_to_app is None else bool(web_to_app),
    )


def extract_device_meta(user_data: PayloadView) -> DeviceMetaFields:
    os_name = user_data.get_str("os") or None
    platform = Platform.ANDROID if os_name and "android" in os_name.lower() else Platform.IOS
    return DeviceMetaFields(
        platform=platform,
        app_version=user_data.get_str("app_version") or None,
        os_name=os_name,
        os_version=user_data.get_str("os_version") or None,
        device_model=user_data.get_str("device_model") or None,
    )


def normalize(raw: Any, now: int | None = None) -> NormalizedEvent | Skipped:
    """Extract the fields of a Branch payload, or skip it when it has no device id."""
    payload = flatten_payload(raw)
    user_data = payload.get_mapping("user_data")

    device_id = pick_device_id(user_data)
    if device_id is None:
        return Skipped(reason=SKIP_NO_DEVICE_ID)

    touch = payload.get_mapping("last_attributed_touch_data")
    when = to_millis(pick_timestamp(payload), now=now)
    event_type = normalize_event_type(payload.get("name"), payload.get("event"))

    return NormalizedEvent(
        device_id=device_id,
        timestamp_millis=when,
        event_kind=event_type.kind,
        event_label=event_type.label,
        attribution=extract_attribution(touch),
        device_meta=extract_device_meta(user_data),
        insert_id=build_insert_id(
            payload.get("id"),
            payload.get("name"),
            payload.get("event"),
            when,
            event_type.label,
            touch.get("link_id"),
        ),
    )


def build_identification(event: NormalizedEvent) -> dict[str, Any]:
    """Identify record: first touch is $setOnce, last touch is $set."""
    a = event.attribution

    set_once: dict[str, Any] = {
        "acq_channel_first": a.channel,
        "acq_campaign_first": a.campaign,
        "acq_partner_first": a.ad_partner,
        "acq_adset_first": a.ad_set,
        "acq_creative_first": a.creative,
    }
    if event.event_kind is EventKind.INSTALL:
        set_once["acq_install_ts"] = event.timestamp_millis

    return {
        "device_id": event.device_id,
        "user_id": None,
        "user_properties": {
            "$setOnce": set_once,
            "$set": {
                "acq_channel_last": a.channel,
                "acq_campaign_last": a.campaign,
                "acq_partner_last": a.ad_partner,
                "acq_adset_last": a.ad_set,
                "acq_creative_last": a.creative,
                "acq_last_touch_ts": event.timestamp_millis,
            },
        },
    }


def build_event(event: NormalizedEvent) -> dict[str, Any]:
    a = event.attribution
    meta = event.device_meta

    record: dict[str, Any] = {
        "device_id": event.device_id,
        "user_id": None,
        "event_type": event.event_label,
        "time": event.timestamp_millis,
        "insert_id": event.insert_id,
        "event_properties": {
            "install_type": event.event_kind.value,
            "branch_channel": a.channel,
            "branch_campaign": a.campaign,
            "branch_partner": a.ad_partner,
            "branch_adset": a.ad_set,
            "branch_creative": a.creative,
            "branch_feature": a.feature,
            "branch_link_id": a.link_id,
            "branch_campaign_id": a.campaign_id,
            "branch_adset_id": a.ad_set_id,
            "branch_tags": list(a.tags) if a.tags is not None else None,
            "web_to_app": bool(a.web_to_app),
        },
        "platform": meta.platform.value,
    }

    # Device metadata is omitted, not nulled, when Branch did not send it
    optional = {
        "app_version": meta.app_version,
        "os_name": meta.os_name,
        "os_version": meta.os_version,
        "device_model": meta.device_model,
    }
    record.update({key: value for key, value in optional.items() if value is not None})
    return record


def compose(raw: Any, now: int | None = None) -> Composition | Skipped:
    """Turn a raw Branch webhook body into Amplitude records.

    Returns Skipped when no device id can be found: an event without a stable
    identity cannot be merged with the rest of the user's history.
    """
    normalized = normalize(raw, now=now)
    if isinstance(normalized, Skipped):
        return normalized
    return Composition(
        normalized=normalized,
        identification=build_identification(normalized),
        event=build_event(normalized),
    )
