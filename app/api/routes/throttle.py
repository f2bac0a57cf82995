from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from app.core.rate_limit import enforce_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Throttle"])


@router.get(
    "/",
    response_class=PlainTextResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
@router.post(
    "/",
    response_class=PlainTextResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def echo_client(request: Request) -> str:
    """Rate-limited endpoint echoing the caller's identity.

    Returns:
        str: ``Your IP: <client key> - Request received``.

    Raises:
        RateLimitAppError: 429 when the caller exceeded its budget.
    """
    client_ip = request.app.state.client_key_extractor(request)
    logger.info("echo.called", extra={"client_ip": client_ip})
    return f"Your IP: {client_ip} - Request received"
