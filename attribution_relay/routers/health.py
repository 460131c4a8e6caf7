from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from attribution_relay import __version__
from attribution_relay.config import Settings
from attribution_relay.dependencies import get_settings


router = APIRouter(tags=["health"])

_startup_time = datetime.now(timezone.utc)


class EndpointInfo(BaseModel):
    path: str
    description: str
    provider: str | None = None


class IntegrationStatus(BaseModel):
    configured: bool
    status: str


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    endpoints: list[EndpointInfo]
    amplitude: IntegrationStatus
    branch: IntegrationStatus


ENDPOINTS = [
    EndpointInfo(path="/health", description="Relay status"),
    EndpointInfo(
        path="/api/branch-to-amplitude",
        description="Branch attribution webhook relay",
        provider="Branch, Amplitude",
    ),
]


def _check_amplitude(settings: Settings) -> IntegrationStatus:
    if not settings.amplitude_api_key:
        return IntegrationStatus(configured=False, status="api key not configured")
    return IntegrationStatus(configured=True, status=f"ok ({settings.amplitude_http_endpoint})")


def _check_branch(settings: Settings) -> IntegrationStatus:
    if not settings.branch_token:
        return IntegrationStatus(configured=False, status="webhook token not configured")
    return IntegrationStatus(configured=True, status="ok")


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    uptime = (datetime.now(timezone.utc) - _startup_time).total_seconds()

    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(uptime, 2),
        endpoints=ENDPOINTS,
        amplitude=_check_amplitude(settings),
        branch=_check_branch(settings),
    )
