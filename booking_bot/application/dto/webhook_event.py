from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from booking_bot.domain.entities.message import InboundMessage

WHATSAPP_OBJECT = "whatsapp_business_account"


class WebhookEventDTO(BaseModel):
    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def extract_messages(self) -> list[InboundMessage]:
        messages: list[InboundMessage] = []
        if self.object != WHATSAPP_OBJECT:
            return messages

        for entry in self.entry or []:
            for change in entry.get("changes", []) or []:
                if change.get("field") != "messages":
                    continue
                value = change.get("value") or {}
                for msg in value.get("messages", []) or []:
                    message = _parse_message(msg)
                    if message is not None:
                        messages.append(message)

        return messages


def _parse_message(msg: dict[str, Any]) -> InboundMessage | None:
    sender = msg.get("from")
    msg_type = msg.get("type")
    text = ""
    option_id: str | None = None

    if msg_type == "text" and msg.get("text"):
        text = msg["text"].get("body") or ""
    elif msg_type == "button" and msg.get("button"):
        # Quick-reply button on a template message.
        option_id = msg["button"].get("payload")
        text = msg["button"].get("text") or ""
    elif msg_type == "interactive" and msg.get("interactive"):
        interactive = msg["interactive"]
        reply = interactive.get("button_reply") or interactive.get("list_reply")
        if reply:
            option_id = reply.get("id")
            text = reply.get("title") or ""

    if not sender or not (text or option_id):
        return None

    timestamp = msg.get("timestamp")
    return InboundMessage(
        id=str(msg.get("id") or ""),
        sender_id=str(sender),
        text=str(text),
        option_id=str(option_id) if option_id else None,
        timestamp=int(timestamp) if str(timestamp or "").isdigit() else 0,
    )
