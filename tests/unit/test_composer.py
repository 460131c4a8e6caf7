"""Unit tests for Amplitude record composition."""

import pytest

from attribution_relay.branch.composer import (
    SKIP_NO_DEVICE_ID,
    Composition,
    Skipped,
    compose,
)
from attribution_relay.branch.extractors import EventKind
from attribution_relay.branch.insert_id import build_insert_id

WHEN = 1_700_000_000_000

ATTRIBUTION_KEYS = [
    "branch_channel",
    "branch_campaign",
    "branch_partner",
    "branch_adset",
    "branch_creative",
    "branch_feature",
    "branch_link_id",
    "branch_campaign_id",
    "branch_adset_id",
    "branch_tags",
]


@pytest.fixture
def install_payload():
    return {
        "name": "INSTALL",
        "user_data": {"idfa": "ABC123"},
        "last_attributed_touch_data": {"channel": "Facebook Ads"},
        "timestamp_millis": WHEN,
    }


def test_install_scenario(install_payload):
    result = compose(install_payload)

    assert isinstance(result, Composition)
    assert result.identification == {
        "device_id": "ABC123",
        "user_id": None,
        "user_properties": {
            "$setOnce": {
                "acq_channel_first": "Facebook Ads",
                "acq_campaign_first": None,
                "acq_partner_first": None,
                "acq_adset_first": None,
                "acq_creative_first": None,
                "acq_install_ts": WHEN,
            },
            "$set": {
                "acq_channel_last": "Facebook Ads",
                "acq_campaign_last": None,
                "acq_partner_last": None,
                "acq_adset_last": None,
                "acq_creative_last": None,
                "acq_last_touch_ts": WHEN,
            },
        },
    }
    assert result.event == {
        "device_id": "ABC123",
        "user_id": None,
        "event_type": "Branch Attributed Install",
        "time": WHEN,
        "insert_id": build_insert_id(None, "INSTALL", None, WHEN, "Branch Attributed Install", None),
        "event_properties": {
            "install_type": "install",
            "branch_channel": "Facebook Ads",
            "branch_campaign": None,
            "branch_partner": None,
            "branch_adset": None,
            "branch_creative": None,
            "branch_feature": None,
            "branch_link_id": None,
            "branch_campaign_id": None,
            "branch_adset_id": None,
            "branch_tags": None,
            "web_to_app": False,
        },
        "platform": "iOS",
    }
    assert result.normalized.event_kind is EventKind.INSTALL


def test_install_ts_is_set_once_only(install_payload):
    result = compose(install_payload)
    assert "acq_install_ts" not in result.identification["user_properties"]["$set"]


@pytest.mark.parametrize("name", ["OPEN", "REINSTALL", "PURCHASE"])
def test_install_ts_only_for_installs(install_payload, name):
    result = compose({**install_payload, "name": name})
    set_once = result.identification["user_properties"]["$setOnce"]
    assert "acq_install_ts" not in set_once
    assert result.identification["user_properties"]["$set"]["acq_last_touch_ts"] == WHEN


def test_missing_device_id_is_skipped():
    result = compose({"name": "INSTALL", "user_data": {"os": "iOS"}, "timestamp": 1_700_000_000})
    assert result == Skipped(reason=SKIP_NO_DEVICE_ID)


@pytest.mark.parametrize("raw", [{}, None, [], "INSTALL", {"user_data": None}])
def test_unusable_bodies_are_skipped(raw):
    assert isinstance(compose(raw), Skipped)


def test_data_envelope_is_flattened():
    raw = {
        "id": "evt-7",
        "data": {
            "name": "OPEN",
            "timestamp": 1_700_000_000,
            "user_data": {"gaid": "g-1", "os": "Android"},
            "last_attributed_touch_data": {"campaign": "spring"},
        },
    }
    result = compose(raw)

    assert result.event["device_id"] == "g-1"
    assert result.event["event_type"] == "Branch Open"
    assert result.event["time"] == WHEN
    assert result.event["event_properties"]["branch_campaign"] == "spring"
    assert result.event["insert_id"] == build_insert_id("evt-7", "OPEN", None, WHEN, "Branch Open", None)


def test_full_attribution_and_device_meta():
    raw = {
        "event": "reinstall",
        "timestamp": "2023-11-14T22:13:20Z",
        "user_data": {
            "ADID": " droid-1 ",
            "os": "ANDROID",
            "os_version": "14",
            "app_version": "3.2.1",
            "device_model": "Pixel 8",
        },
        "last_attributed_touch_data": {
            "channel": "Google",
            "campaign": "winter",
            "ad_partner": "Google AdWords",
            "ad_set": "set-a",
            "ad_set_id": 555,
            "campaign_id": "c-9",
            "creative": "banner",
            "feature": "paid advertising",
            "tags": ["a", 3, "b"],
            "link_id": "link-1",
            "web_to_app": True,
        },
    }
    event = compose(raw).event

    assert event["device_id"] == "droid-1"
    assert event["platform"] == "Android"
    assert event["os_name"] == "ANDROID"
    assert event["os_version"] == "14"
    assert event["app_version"] == "3.2.1"
    assert event["device_model"] == "Pixel 8"
    assert event["event_properties"] == {
        "install_type": "reinstall",
        "branch_channel": "Google",
        "branch_campaign": "winter",
        "branch_partner": "Google AdWords",
        "branch_adset": "set-a",
        "branch_creative": "banner",
        "branch_feature": "paid advertising",
        "branch_link_id": "link-1",
        "branch_campaign_id": "c-9",
        "branch_adset_id": "555",
        "branch_tags": ["a", "b"],
        "web_to_app": True,
    }


def test_device_meta_omitted_unless_non_empty_string(install_payload):
    install_payload["user_data"] = {"idfa": "ABC123", "os_version": 17, "app_version": "", "device_model": None}
    event = compose(install_payload).event

    for key in ("app_version", "os_name", "os_version", "device_model"):
        assert key not in event
    assert event["platform"] == "iOS"


def test_attribution_fields_null_when_absent_or_unusable(install_payload):
    install_payload["last_attributed_touch_data"] = {"channel": {"nested": 1}}
    props = compose(install_payload).event["event_properties"]

    for key in ATTRIBUTION_KEYS:
        assert key in props
        assert props[key] is None
    assert props["web_to_app"] is False


def test_missing_timestamp_uses_now():
    result = compose({"name": "OPEN", "user_data": {"idfv": "v-1"}}, now=WHEN)
    assert result.event["time"] == WHEN
    assert result.identification["user_properties"]["$set"]["acq_last_touch_ts"] == WHEN


def test_retried_delivery_gets_same_insert_id(install_payload):
    assert compose(install_payload).event["insert_id"] == compose(dict(install_payload)).event["insert_id"]


def test_link_id_changes_insert_id(install_payload):
    other = {**install_payload, "last_attributed_touch_data": {"channel": "Facebook Ads", "link_id": "l-2"}}
    assert compose(install_payload).event["insert_id"] != compose(other).event["insert_id"]


@pytest.mark.parametrize("flag,expected", [(True, True), ("true", True), (1, True), (False, False), (0, False), ("", False)])
def test_web_to_app_follows_truthiness(install_payload, flag, expected):
    install_payload["last_attributed_touch_data"] = {"web_to_app": flag}
    assert compose(install_payload).event["event_properties"]["web_to_app"] is expected


def test_huge_negative_timestamp_falls_back_to_now(install_payload):
    del install_payload["timestamp_millis"]
    install_payload["timestamp"] = -1e306
    assert compose(install_payload, now=WHEN).event["time"] == WHEN


def test_unusable_millis_field_does_not_hide_timestamp(install_payload):
    install_payload["timestamp_millis"] = ""
    install_payload["timestamp"] = 1_700_000_000
    assert compose(install_payload, now=123).event["time"] == WHEN
