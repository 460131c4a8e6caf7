"""Amplitude HTTP API provider."""

import logging
from typing import Any

import httpx

from attribution_relay.errors import DeliveryHTTPError, DeliveryTransportError

from .base import DeliveryProvider

logger = logging.getLogger(__name__)

IDENTIFY_PATH = "/identify"
HTTP_API_PATH = "/2/httpapi"


class AmplitudeProvider(DeliveryProvider):
    """Amplitude ingestion client.

    One short-lived httpx client per call; `transport` lets tests swap in
    httpx.MockTransport.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "amplitude"

    async def _post(self, stage: str, path: str, payload: dict) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.endpoint}{path}",
                    headers={"Content-Type": "application/json"},
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise DeliveryTransportError(stage, f"Amplitude {stage} request failed: {e!r}") from e

        if not response.is_success:
            raise DeliveryHTTPError(stage, response.status_code, response.text)

        logger.debug(f"Amplitude {stage} accepted ({response.status_code})")
        return response

    async def identify(self, identifications: list[dict[str, Any]]) -> None:
        await self._post(
            "identify",
            IDENTIFY_PATH,
            {"api_key": self.api_key, "identification": identifications},
        )

    async def send_events(self, events: list[dict[str, Any]]) -> None:
        await self._post(
            "event",
            HTTP_API_PATH,
            {"api_key": self.api_key, "events": events},
        )
