"""Shared FastAPI dependencies: settings, delivery provider and webhook auth."""

import secrets

from fastapi import HTTPException, Query, Request

from attribution_relay.config import Settings
from attribution_relay.providers import AmplitudeProvider, DeliveryProvider


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_provider(request: Request) -> DeliveryProvider:
    settings: Settings = request.app.state.settings
    return AmplitudeProvider(
        api_key=settings.amplitude_api_key,
        endpoint=settings.amplitude_http_endpoint,
        timeout=settings.amplitude_timeout_seconds,
    )


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def verify_branch_token(
    request: Request,
    token: str | None = Query(default=None, description="Webhook token (Branch URL form)"),
) -> None:
    """Require BRANCH_TOKEN as a bearer header or `?token=` query parameter."""
    expected = get_settings(request).branch_token
    supplied = _bearer_token(request) or token
    if not expected or not supplied or not secrets.compare_digest(supplied.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")
