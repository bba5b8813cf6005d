"""
WhatsApp webhook: GET for subscription verification, POST for events.

POST always answers 200 "OK" for a JSON body and processes the batch after
the response is sent, so slow replies never trigger channel retries.
"""
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from app.api.deps import get_ingestor
from app.core.config import Settings, get_settings
from app.whatsapp.ingestor import WebhookIngestor, verify_subscription

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
def webhook_verification(
    mode: Optional[str] = Query(None, alias="hub.mode"),
    token: Optional[str] = Query(None, alias="hub.verify_token"),
    challenge: Optional[str] = Query(None, alias="hub.challenge"),
    settings: Settings = Depends(get_settings),
):
    result = verify_subscription(mode, token, challenge, settings.VERIFY_TOKEN)
    if result is None:
        return PlainTextResponse("Forbidden", status_code=403)
    return PlainTextResponse(result, status_code=200)


@router.post("")
async def webhook_receiver(
    request: Request,
    background_tasks: BackgroundTasks,
    ingestor: WebhookIngestor = Depends(get_ingestor),
):
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Webhook body is not valid JSON")
        return PlainTextResponse("Bad Request", status_code=400)

    if not isinstance(payload, dict):
        logger.warning("Webhook body is not a JSON object")
        return PlainTextResponse("OK", status_code=200)

    logger.info(f"Webhook received: object={payload.get('object')!r}, entries={len(payload.get('entry') or [])}")
    background_tasks.add_task(ingestor.handle_payload, payload)
    return PlainTextResponse("OK", status_code=200)
