"""Error types and error-body parsing for the Amplitude integration."""

import json


class ConfigurationError(RuntimeError):
    """Required settings are missing; the process must not start."""


class DeliveryError(Exception):
    """An outbound delivery to Amplitude failed.

    Always retryable: the caller answers with a 5xx so Branch repeats the
    webhook, and the insert id lets Amplitude drop the duplicate.
    """

    retryable = True

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage

    @property
    def error_code(self) -> str:
        return f"{self.stage}_failed"


class DeliveryHTTPError(DeliveryError):
    """Amplitude answered with a non-2xx status."""

    def __init__(self, stage: str, status_code: int, body: str):
        super().__init__(stage, f"Amplitude {stage} returned {status_code}: {parse_amplitude_error(body)}")
        self.status_code = status_code
        self.body = body


class DeliveryTransportError(DeliveryError):
    """The request never produced a response (connect error, timeout, ...)."""


def parse_amplitude_error(response_text: str) -> str:
    """Extract a readable message from an Amplitude HTTP API error response.

    Amplitude returns JSON like {"code": 400, "error": "...", "missing_field": "..."}.
    Returns "error (field)" when parseable, raw text otherwise.
    """
    try:
        body = json.loads(response_text)
    except ValueError:
        return response_text
    if not isinstance(body, dict):
        return response_text
    msg = body.get("error", "")
    field = body.get("missing_field") or body.get("events_with_invalid_fields")
    if msg:
        return f"{msg} ({field})" if field else str(msg)
    return response_text
