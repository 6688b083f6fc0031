from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from booking_bot.application.dto.webhook_event import WebhookEventDTO
from booking_bot.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from booking_bot.core.config import settings
from booking_bot.infrastructure.whatsapp.webhook_verify import verify_signature, verify_subscription
from booking_bot.wiring.dependencies import get_handle_incoming_message_use_case

router = APIRouter()
logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhooks/whatsapp"
ACKNOWLEDGEMENT = "EVENT_RECEIVED"


@router.get(WEBHOOK_PATH)
def verify_webhook(
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
):
    challenge = verify_subscription(hub_mode, hub_verify_token, hub_challenge, settings.WHATSAPP_VERIFY_TOKEN)
    if challenge is None:
        raise HTTPException(status_code=403, detail="Verification failed")
    return PlainTextResponse(challenge)


@router.post(WEBHOOK_PATH)
async def whatsapp_webhook(request: Request) -> Response:
    try:
        use_case = get_handle_incoming_message_use_case()
    except Exception as e:
        logger.exception("Failed to initialize use case", extra={"error": str(e)})
        return Response(status_code=500)

    body = await request.body()
    if not _is_signed_by_meta(body, request.headers.get("X-Hub-Signature-256")):
        logger.warning("Rejected webhook with invalid signature")
        return Response(status_code=403)

    try:
        payload = _decode_body(body)
    except ValueError:
        logger.exception("Failed to parse webhook body")
        return Response(status_code=400)

    try:
        await _process_event(use_case, payload)
    except Exception as e:
        logger.exception("Error processing webhook event", extra={"error": str(e)})
        return Response(status_code=500)
    return PlainTextResponse(ACKNOWLEDGEMENT)


def _is_signed_by_meta(body: bytes, signature: str | None) -> bool:
    # Local runs post unsigned payloads from scripts/send_webhook.py.
    allow_unsigned = settings.ENV.lower() in {"dev", "local"}
    return verify_signature(body, signature, settings.WHATSAPP_APP_SECRET, allow_unsigned=allow_unsigned)


def _decode_body(body: bytes) -> dict[str, Any]:
    if not body:
        return {}
    payload = json.loads(body.decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("Webhook body is not a JSON object")
    return payload


async def _process_event(use_case: HandleIncomingMessageUseCase, payload: dict[str, Any]) -> None:
    messages = WebhookEventDTO.model_validate(payload).extract_messages()
    logger.info("Webhook received", extra={"reason": f"message_count={len(messages)}"})

    # One at a time, each to completion, before Meta gets the acknowledgement.
    for message in messages:
        await run_in_threadpool(use_case.handle, message)
