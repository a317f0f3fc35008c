import json
import logging
from typing import Any, Awaitable, Callable, Dict

from fastapi import APIRouter, HTTPException, Request

from ..client import TenpayBusinessClient
from ..tbep.constants import AUTHORIZATION_HEADER

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[Dict[str, Any]], Awaitable[None]]


def create_notification_router(
    client: TenpayBusinessClient,
    handler: NotificationHandler,
    path: str = "/tbep/notify",
) -> APIRouter:
    """
    Router for platform notifications (payment/refund/transfer results).
    The raw body is checked against TBEP-Authorization before `handler` sees it.
    """
    router = APIRouter()

    @router.post(path)
    async def tbep_notification(request: Request):
        body = await request.body()
        result = client.verify_event(request.headers.get(AUTHORIZATION_HEADER), body)
        if not result.ok:
            raise HTTPException(status_code=401, detail=result.error.to_dict())

        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise HTTPException(status_code=400, detail="Invalid JSON")
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid JSON")

        logger.info("TBEP notification accepted: %s", payload.get("event_type") or payload.get("id"))
        await handler(payload)
        return {"ok": True}

    return router
