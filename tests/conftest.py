"""Pytest configuration for attribution relay tests."""

import json
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from attribution_relay.config import Settings
from attribution_relay.dependencies import get_provider
from attribution_relay.main import create_app
from attribution_relay.providers import AmplitudeProvider, DeliveryProvider

BRANCH_TOKEN = "branch-webhook-secret"
AMPLITUDE_KEY = "amp-test-key"
AMPLITUDE_ENDPOINT = "https://amplitude.test"


class AmplitudeStub:
    """httpx.MockTransport handler standing in for the Amplitude HTTP API.

    `responses` maps a URL path to (status, body) or to an exception to raise.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, Any] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses.get(request.url.path, (200, '{"code":200}'))
        if isinstance(outcome, Exception):
            raise outcome
        status, body = outcome
        return httpx.Response(status, text=body)

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def bodies(self, path: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.url.path == path]

    def provider(self) -> AmplitudeProvider:
        return AmplitudeProvider(
            api_key=AMPLITUDE_KEY,
            endpoint=AMPLITUDE_ENDPOINT,
            transport=httpx.MockTransport(self.handler),
        )


class RecordingProvider(DeliveryProvider):
    """In-memory provider recording calls in order; optionally fails a stage."""

    def __init__(self, fail_on: str | None = None, error: Exception | None = None):
        self.calls: list[tuple[str, list[dict]]] = []
        self.fail_on = fail_on
        self.error = error

    @property
    def provider_name(self) -> str:
        return "recording"

    async def identify(self, identifications):
        self.calls.append(("identify", identifications))
        if self.fail_on == "identify":
            raise self.error

    async def send_events(self, events):
        self.calls.append(("event", events))
        if self.fail_on == "event":
            raise self.error


def make_settings(**overrides) -> Settings:
    values = {
        "amplitude_api_key": AMPLITUDE_KEY,
        "amplitude_http_endpoint": AMPLITUDE_ENDPOINT,
        "branch_token": BRANCH_TOKEN,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def amplitude() -> AmplitudeStub:
    return AmplitudeStub()


@pytest.fixture
def client(settings, amplitude):
    app = create_app(settings)
    app.dependency_overrides[get_provider] = amplitude.provider
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {BRANCH_TOKEN}"}


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def recording_provider():
    return RecordingProvider
