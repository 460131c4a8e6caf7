"""Branch webhook endpoint - relays attribution events to Amplitude."""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from attribution_relay.branch import Skipped
from attribution_relay.dependencies import get_provider
from attribution_relay.errors import DeliveryError, DeliveryHTTPError
from attribution_relay.providers import DeliveryProvider
from attribution_relay.relay import relay

logger = logging.getLogger(__name__)
router = APIRouter()


async def _read_body(request: Request) -> Any:
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError:
        raise HTTPException(400, "Request body is not valid JSON")


def _delivery_failure(e: DeliveryError) -> JSONResponse:
    # 500 makes Branch retry; the insert id keeps the retry idempotent
    if isinstance(e, DeliveryHTTPError):
        content = {"error": e.error_code, "status": e.status_code, "body": e.body}
    else:
        content = {"error": e.error_code, "message": str(e)}
    return JSONResponse(status_code=500, content=content)


@router.post("/branch-to-amplitude")
async def branch_to_amplitude(request: Request, provider: DeliveryProvider = Depends(get_provider)):
    """Receive a Branch attribution webhook and forward it to Amplitude."""
    raw = await _read_body(request)

    try:
        outcome = await relay(raw, provider)
    except DeliveryError as e:
        logger.warning(f"Amplitude delivery failed: {e}")
        return _delivery_failure(e)
    except Exception as e:
        logger.exception("Branch webhook relay failed")
        return JSONResponse(status_code=500, content={"error": "server_error", "message": str(e)})

    if isinstance(outcome, Skipped):
        logger.info(f"Skipped Branch webhook: {outcome.reason}")
        return JSONResponse(status_code=202, content={"skipped": True, "reason": outcome.reason})

    logger.debug(f"Amplitude identify: {json.dumps(outcome.identification)}")
    logger.debug(f"Amplitude event: {json.dumps(outcome.event)}")
    logger.info(f"Relayed '{outcome.event_type}' to Amplitude (insert_id={outcome.insert_id})")
    return {"ok": True, "insert_id": outcome.insert_id, "event_type": outcome.event_type}
