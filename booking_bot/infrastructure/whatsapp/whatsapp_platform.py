from __future__ import annotations

from typing import Any, Sequence

from booking_bot.application.ports.message_platform import MessagePlatformPort
from booking_bot.infrastructure.whatsapp.whatsapp_client import WhatsAppClient

MAX_REPLY_BUTTONS = 3


class WhatsAppPlatform(MessagePlatformPort):
    def __init__(self, client: WhatsAppClient) -> None:
        self._client = client

    def send_text(self, recipient_id: str, text: str) -> None:
        self._client.send_message(recipient_id, {"type": "text", "text": {"body": text}})

    def send_buttons(self, recipient_id: str, body: str, buttons: Sequence[tuple[str, str]]) -> None:
        if not buttons or len(buttons) > MAX_REPLY_BUTTONS:
            raise ValueError(f"WhatsApp reply buttons must number 1-{MAX_REPLY_BUTTONS}, got {len(buttons)}")
        self._send_interactive(
            recipient_id,
            {
                "type": "button",
                "body": {"text": body},
                "action": {
                    "buttons": [
                        {"type": "reply", "reply": {"id": button_id, "title": title}}
                        for button_id, title in buttons
                    ]
                },
            },
        )

    def send_list(
        self,
        recipient_id: str,
        body: str,
        button_label: str,
        rows: Sequence[tuple[str, str, str]],
        section_title: str | None = None,
    ) -> None:
        section: dict[str, Any] = {
            "rows": [
                {"id": row_id, "title": title, "description": description}
                for row_id, title, description in rows
            ]
        }
        if section_title:
            section["title"] = section_title
        self._send_interactive(
            recipient_id,
            {
                "type": "list",
                "body": {"text": body},
                "action": {"button": button_label, "sections": [section]},
            },
        )

    def send_link_button(self, recipient_id: str, body: str, url: str, label: str) -> None:
        self._send_interactive(
            recipient_id,
            {
                "type": "cta_url",
                "body": {"text": body},
                "action": {
                    "name": "cta_url",
                    "parameters": {"display_text": label, "url": url},
                },
            },
        )

    def _send_interactive(self, recipient_id: str, interactive: dict[str, Any]) -> None:
        self._client.send_message(recipient_id, {"type": "interactive", "interactive": interactive})
