#!/usr/bin/env python3
from __future__ import annotations

import argparse
import hashlib
import hmac
import json
import time
from typing import Any

import httpx
from httpx import ConnectError


def build_payload(sender: str, text: str, option_id: str | None, option_kind: str) -> dict[str, Any]:
    now = int(time.time())
    message: dict[str, Any] = {"from": sender, "id": f"wamid.local_{now}", "timestamp": str(now)}
    if option_id:
        message["type"] = "interactive"
        message["interactive"] = {
            "type": option_kind,
            option_kind: {"id": option_id, "title": text or option_id},
        }
    else:
        message["type"] = "text"
        message["text"] = {"body": text}

    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "local_waba",
                "changes": [
                    {
                        "field": "messages",
                        "value": {
                            "messaging_product": "whatsapp",
                            "messages": [message],
                        },
                    }
                ],
            }
        ],
    }


def sign_body(secret: str, body: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def main() -> None:
    parser = argparse.ArgumentParser(description="Send a test WhatsApp webhook POST")
    parser.add_argument("--url", default="http://127.0.0.1:8001/webhooks/whatsapp")
    parser.add_argument("--sender", default="5511999990000")
    parser.add_argument("--text", default="agendar")
    parser.add_argument("--option", default=None, help="Option id, e.g. category_1 or confirm")
    parser.add_argument("--kind", default="list_reply", choices=["list_reply", "button_reply"])
    parser.add_argument("--app-secret", default="", help="Meta app secret for signature")
    args = parser.parse_args()

    payload = build_payload(args.sender, args.text, args.option, args.kind)
    body = json.dumps(payload).encode("utf-8")

    headers = {"Content-Type": "application/json"}
    if args.app_secret:
        headers["X-Hub-Signature-256"] = sign_body(args.app_secret, body)

    try:
        resp = httpx.post(args.url, content=body, headers=headers, timeout=30.0)
    except ConnectError:
        print("Connection refused. Is the FastAPI server running?")
        print("Try: uvicorn booking_bot.main:app --reload --port 8001")
        return

    print(resp.status_code)
    if resp.text:
        print(resp.text)


if __name__ == "__main__":
    main()
