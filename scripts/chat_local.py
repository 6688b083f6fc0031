#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no WhatsApp, no booking API).

Usage:
  python3 scripts/chat_local.py

Type text to send a plain message, or `/opt <id>` to tap an option
(e.g. `/opt schedule`, `/opt category_1`, `/opt confirm`). Every outbound
message the bot produces is printed along with the stored step.
"""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from booking_bot.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from booking_bot.application.use_cases.send_reply import SendReplyUseCase
from booking_bot.domain.entities.message import InboundMessage
from booking_bot.infrastructure.booking_api.mock_booking_api import MockBookingApi
from booking_bot.infrastructure.store.memory_store import MemorySessionStore
from booking_bot.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform, SentMessage


def _print_header(user_id: str) -> None:
    print("\nLocal Chat Harness")
    print("-" * 60)
    print(f"user_id: {user_id}")
    print("Type a message, or /opt <option_id> to tap a button or list row.")
    print("Commands: /new (new user), /session, /quit, /help")
    print("-" * 60)


def _print_sent(message: SentMessage) -> None:
    print(f"(bot:{message.kind}) {message.body}")
    for option in message.options:
        print(f"    [{option[0]}] {option[1]}")
    if message.kind == "link":
        print(f"    -> {message.extra.get('url') or '(no url configured)'}")


def main() -> None:
    user_id = os.getenv("CHAT_USER_ID", "5511999990000")
    platform = MockWhatsAppPlatform()
    store = MemorySessionStore()
    use_case = HandleIncomingMessageUseCase(
        sessions=store,
        booking_api=MockBookingApi(),
        replies=SendReplyUseCase(
            platform=platform,
            business_name="Local Barber Shop",
            schedule_url="https://example.com/agendar",
            instagram_url="https://instagram.com/example",
        ),
        reservation_salon_id=101539,
    )
    _print_header(user_id)

    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue

        cmd = user_text.lower()
        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/help":
            print("Commands:")
            print("  /opt <id> -> tap an option (schedule, instagram, category_1, hour_540, confirm, ...)")
            print("  /new      -> start over as a new user")
            print("  /session  -> show the stored session")
            print("  /quit     -> exit")
            continue
        if cmd == "/new":
            user_id = f"55119{int(time.time())}"
            print(f"New user_id: {user_id}")
            continue
        if cmd == "/session":
            print(store.get(user_id))
            continue

        option_id = None
        text = user_text
        if cmd.startswith("/opt "):
            option_id = user_text[5:].strip()
            text = option_id

        already_sent = len(platform.sent)
        use_case.handle(
            InboundMessage(
                id=f"local_{int(time.time() * 1000)}",
                sender_id=user_id,
                text=text,
                option_id=option_id,
                timestamp=int(time.time()),
            )
        )

        new_messages = platform.sent[already_sent:]
        if not new_messages:
            print("(no outbound message)")
        for message in new_messages:
            _print_sent(message)

        session = store.get(user_id)
        print(f"-- step: {session.step if session else '(none)'}")


if __name__ == "__main__":
    main()
