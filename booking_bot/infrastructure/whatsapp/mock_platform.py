from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from booking_bot.application.ports.message_platform import MessagePlatformPort


@dataclass(frozen=True)
class SentMessage:
    recipient_id: str
    kind: str  # "text", "buttons", "list", "link"
    body: str
    options: tuple[Any, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def option_ids(self) -> list[str]:
        return [option[0] for option in self.options]


class MockWhatsAppPlatform(MessagePlatformPort):
    """Logs outbound messages instead of sending them and keeps them in `sent`."""

    def __init__(self) -> None:
        self.sent: list[SentMessage] = []
        self._logger = logging.getLogger(__name__)

    def send_text(self, recipient_id: str, text: str) -> None:
        self._record(SentMessage(recipient_id=recipient_id, kind="text", body=text))

    def send_buttons(self, recipient_id: str, body: str, buttons: Sequence[tuple[str, str]]) -> None:
        if not buttons or len(buttons) > 3:
            raise ValueError(f"Reply buttons must number 1-3, got {len(buttons)}")
        self._record(SentMessage(recipient_id=recipient_id, kind="buttons", body=body, options=tuple(buttons)))

    def send_list(
        self,
        recipient_id: str,
        body: str,
        button_label: str,
        rows: Sequence[tuple[str, str, str]],
        section_title: str | None = None,
    ) -> None:
        self._record(
            SentMessage(
                recipient_id=recipient_id,
                kind="list",
                body=body,
                options=tuple(rows),
                extra={"button_label": button_label, "section_title": section_title},
            )
        )

    def send_link_button(self, recipient_id: str, body: str, url: str, label: str) -> None:
        self._record(
            SentMessage(recipient_id=recipient_id, kind="link", body=body, extra={"url": url, "label": label})
        )

    def _record(self, message: SentMessage) -> None:
        self.sent.append(message)
        self._logger.info(
            "Mock send to WhatsApp",
            extra={"user_id": message.recipient_id, "reason": f"{message.kind}: {message.body}"},
        )
