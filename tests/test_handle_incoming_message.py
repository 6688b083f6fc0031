"""
Tests for the booking conversation, driven end to end through the mock
booking API, the mock WhatsApp platform and the in-memory session store.
"""

from __future__ import annotations

from dataclasses import replace

import pytest

from booking_bot.application.dto.webhook_event import WebhookEventDTO
from booking_bot.application.exceptions import BookingApiError
from booking_bot.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from booking_bot.application.use_cases.send_reply import (
    CANCELLED,
    DATE_FORMAT_CORRECTION,
    DATE_PROMPT,
    FAILURE,
    NO_AVAILABILITY,
    SUCCESS,
    SendReplyUseCase,
)
from booking_bot.domain.entities.catalog import AvailabilitySlot, Category, Professional, Service
from booking_bot.domain.entities.message import InboundMessage
from booking_bot.infrastructure.booking_api.mock_booking_api import MockBookingApi
from booking_bot.infrastructure.store.memory_store import MemorySessionStore
from booking_bot.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform

USER = "5511999990000"
SCHEDULE_URL = "https://example.com/agendar"


class Harness:
    def __init__(self, booking_api: MockBookingApi | None = None, schedule_url: str = SCHEDULE_URL) -> None:
        self.store = MemorySessionStore()
        self.api = booking_api or MockBookingApi()
        self.platform = MockWhatsAppPlatform()
        self.use_case = HandleIncomingMessageUseCase(
            sessions=self.store,
            booking_api=self.api,
            replies=SendReplyUseCase(
                platform=self.platform,
                business_name="Western Barber Shop",
                schedule_url=schedule_url,
                instagram_url="https://instagram.com/western",
            ),
            reservation_salon_id=777,
        )
        self._counter = 0

    def send(self, text: str = "", option_id: str | None = None):
        """Deliver one message and return what the bot sent in response."""
        self._counter += 1
        before = len(self.platform.sent)
        self.use_case.handle(
            InboundMessage(
                id=f"wamid.{self._counter}",
                sender_id=USER,
                text=text or (option_id or ""),
                option_id=option_id,
                timestamp=1_700_000_000 + self._counter,
            )
        )
        return self.platform.sent[before:]

    @property
    def session(self):
        return self.store.get(USER)

    def walk_to(self, step: int) -> None:
        """Take the happy path with the default mock data up to the given step."""
        self.send("oi")
        if step >= 2:
            self.send("Agendar", "schedule")
        if step >= 3:
            self.send("Cabelo", "category_1")
        if step >= 4:
            self.send("Corte", "service_10")
        if step >= 5:
            self.send("2025-05-01")
        if step >= 6:
            self.send("09:00", "hour_540")
        if step >= 7:
            self.send("Carlos", "professional_100")
        assert self.session.step == step


def test_first_message_creates_session_and_sends_welcome():
    harness = Harness()

    sent = harness.send("agendar")

    assert len(sent) == 1
    assert sent[0].kind == "buttons"
    assert sent[0].option_ids == ["schedule", "instagram"]
    assert "Western Barber Shop" in sent[0].body
    assert harness.session.step == 1


def test_schedule_trigger_sends_categories():
    harness = Harness()
    harness.send("oi")

    sent = harness.send("Quero agendar")

    assert len(sent) == 1
    assert sent[0].kind == "list"
    assert sent[0].option_ids == ["category_1", "category_2"]
    assert harness.session.step == 2


def test_plain_text_at_start_sends_welcome_again():
    harness = Harness()
    harness.send("oi")

    sent = harness.send("bom dia")

    assert [m.option_ids for m in sent] == [["schedule", "instagram"]]
    assert harness.session.step == 1


def test_instagram_option_sends_link_without_changing_step():
    harness = Harness()
    harness.walk_to(3)

    sent = harness.send("Instagram", "instagram")

    assert len(sent) == 1
    assert sent[0].kind == "link"
    assert sent[0].extra["url"] == "https://instagram.com/western"
    assert harness.session.step == 3


def test_category_choice_stores_name_and_sends_services():
    api = MockBookingApi(
        categories=[Category(id=1, name="Hair")],
        services={1: [Service(id=10, name="Cut", description="Classic cut")]},
    )
    harness = Harness(api)
    harness.walk_to(2)

    sent = harness.send("Hair", "category_1")

    assert harness.session.step == 3
    assert harness.session.category_id == 1
    assert harness.session.category_name == "Hair"
    assert sent[0].kind == "list"
    assert sent[0].options == (("service_10", "Cut", "Classic cut"),)


def test_category_without_services_resends_categories():
    """Welcome, then agendar, then a category with no services keeps the user at step 2."""
    api = MockBookingApi(categories=[Category(id=5, name="Spa")], services={})
    harness = Harness(api)

    harness.send("oi")
    harness.send("agendar")
    sent = harness.send("Spa", "category_5")

    assert len(sent) == 1
    assert sent[0].option_ids == ["category_5"]
    assert harness.session.step == 2


def test_empty_categories_sends_failure():
    harness = Harness(MockBookingApi(categories=[]))
    harness.send("oi")

    sent = harness.send("agendar")

    assert sent[0].body == FAILURE
    assert sent[1].kind == "link"
    assert sent[1].extra["url"] == SCHEDULE_URL
    assert harness.session.step == 1


def test_service_choice_stores_details_and_prompts_date():
    harness = Harness()
    harness.walk_to(3)

    sent = harness.send("Corte", "service_10")

    assert [m.body for m in sent] == [DATE_PROMPT]
    session = harness.session
    assert session.step == 4
    assert session.service_id == 10
    assert session.service_name == "Corte"
    assert session.service_duration == 30
    assert session.service_price == 50.0


def test_wrong_date_format_asks_again():
    harness = Harness()
    harness.walk_to(4)

    sent = harness.send("05/01/2025")

    assert [m.body for m in sent] == [DATE_FORMAT_CORRECTION]
    assert harness.session.step == 4
    assert harness.session.date is None


def test_date_without_availability_keeps_step():
    harness = Harness(MockBookingApi(slots_by_date={"2025-12-25": []}))
    harness.walk_to(4)

    sent = harness.send("2025-12-25")

    assert [m.body for m in sent] == [NO_AVAILABILITY]
    assert harness.session.step == 4


def test_valid_date_lists_hours():
    harness = Harness()
    harness.walk_to(4)

    sent = harness.send(" 2025-05-01 ")

    assert sent[0].kind == "list"
    assert sent[0].options == (("hour_540", "09:00", ""), ("hour_600", "10:00", ""), ("hour_780", "13:00", ""))
    assert harness.session.step == 5
    assert harness.session.date == "2025-05-01"


def test_hour_choice_sends_professional_buttons():
    harness = Harness()
    harness.walk_to(5)

    sent = harness.send("09:00", "hour_540")

    assert sent[0].kind == "buttons"
    assert sent[0].options == (("professional_100", "Carlos"), ("professional_101", "Rafael"))
    assert harness.session.step == 6
    assert harness.session.hour == 540
    assert harness.session.hour_formatted == "09:00"


def test_many_professionals_use_a_list():
    professionals = {i: Professional(id=i, name=f"Pro {i}") for i in range(1, 5)}
    api = MockBookingApi(
        slots=[AvailabilitySlot(schedule=600, professional_ids=(1, 2, 3, 4))],
        professionals=professionals,
    )
    harness = Harness(api)
    harness.send("oi")
    harness.send("agendar")
    harness.send("Cabelo", "category_1")
    harness.send("Corte", "service_10")
    harness.send("2025-05-01")

    sent = harness.send("10:00", "hour_600")

    assert sent[0].kind == "list"
    assert sent[0].option_ids == ["professional_1", "professional_2", "professional_3", "professional_4"]
    assert harness.session.step == 6


def test_professional_lookup_failure_skips_that_professional():
    harness = Harness(MockBookingApi(failing_professional_ids={100}))
    harness.walk_to(5)

    sent = harness.send("09:00", "hour_540")

    assert sent[0].options == (("professional_101", "Rafael"),)
    assert harness.session.step == 6


def test_hour_without_professionals_sends_failure():
    api = MockBookingApi(failing_professional_ids={101})
    harness = Harness(api)
    harness.walk_to(5)

    sent = harness.send("13:00", "hour_780")

    assert sent[0].body == FAILURE
    assert harness.session.step == 5


def test_professional_choice_sends_confirmation():
    harness = Harness()
    harness.walk_to(6)

    sent = harness.send("Carlos", "professional_100")

    assert len(sent) == 1
    assert sent[0].body == "Data 2025-05-01 - 09:00\nServiço: Corte\nProfissional: Carlos"
    assert sent[0].option_ids == ["confirm", "cancel"]
    assert harness.session.step == 7
    assert harness.session.professional_name == "Carlos"


def test_confirm_creates_reservation_and_resets():
    harness = Harness()
    harness.walk_to(7)

    sent = harness.send("Confirmar e Agendar", "confirm")

    assert [m.body for m in sent] == [SUCCESS]
    request = harness.api.reservations[0]
    assert request.professional_id == 100
    assert request.service_id == 10
    assert request.salon_id == 777
    assert request.date == "2025-05-01"
    assert request.hour == 540
    session = harness.session
    assert session.step == 1
    assert session.service_id is None
    assert session.professional_id is None


def test_rejected_reservation_sends_failure_and_resets():
    harness = Harness(MockBookingApi(fail_reservations=True))
    harness.walk_to(7)

    sent = harness.send("Confirmar e Agendar", "confirm")

    assert sent[0].body == FAILURE
    assert sent[1].kind == "link"
    assert harness.api.reservations == []
    assert harness.session.step == 1


def test_failure_without_schedule_url_is_text_only():
    harness = Harness(MockBookingApi(fail_reservations=True), schedule_url="")
    harness.walk_to(7)

    sent = harness.send("Confirmar e Agendar", "confirm")

    assert [m.kind for m in sent] == ["text"]
    assert harness.session.step == 1


def test_cancel_resets_without_reservation():
    harness = Harness()
    harness.walk_to(7)

    sent = harness.send("Cancelar", "cancel")

    assert [m.body for m in sent] == [CANCELLED]
    assert "create_reservation" not in harness.api.calls
    assert harness.session.step == 1


def test_other_option_at_confirmation_sends_welcome_and_resets():
    harness = Harness()
    harness.walk_to(7)

    sent = harness.send("Rafael", "professional_101")

    assert sent[0].option_ids == ["schedule", "instagram"]
    assert harness.session.step == 1


@pytest.mark.parametrize("step", [2, 3, 5, 6, 7])
def test_free_text_on_option_steps_resends_prompt(step):
    harness = Harness()
    harness.walk_to(step)
    before = harness.session

    sent = harness.send("qualquer coisa")

    assert len(sent) == 1
    assert harness.session == before


@pytest.mark.parametrize("step", [2, 3, 5, 6])
def test_malformed_option_resends_prompt(step):
    harness = Harness()
    harness.walk_to(step)

    sent = harness.send("???", "bogus_1")

    assert len(sent) == 1
    assert sent[0].kind in ("list", "buttons")
    assert harness.session.step == step


@pytest.mark.parametrize(
    "step, expected_kind, expected_ids",
    [
        (2, "list", ["category_1", "category_2"]),
        (3, "list", ["service_10"]),
        (4, "text", []),
        (5, "list", ["hour_540", "hour_600", "hour_780"]),
        (6, "buttons", ["professional_100", "professional_101"]),
        (7, "buttons", ["confirm", "cancel"]),
    ],
)
def test_resend_current_step_does_not_write(step, expected_kind, expected_ids):
    harness = Harness()
    harness.walk_to(step)
    before = harness.session
    sent_before = len(harness.platform.sent)

    harness.use_case.resend_current_step(before)

    sent = harness.platform.sent[sent_before:]
    assert len(sent) == 1
    assert sent[0].kind == expected_kind
    assert sent[0].option_ids == expected_ids
    assert harness.session == before


def test_unknown_step_resets_to_welcome():
    harness = Harness()
    harness.send("oi")
    harness.store.update(replace(harness.session, step=9))

    sent = harness.send("olá")

    assert sent[0].option_ids == ["schedule", "instagram"]
    assert harness.session.step == 1


def test_inconsistent_session_sends_failure():
    harness = Harness()
    harness.send("oi")
    harness.store.update(replace(harness.session, step=5))

    sent = harness.send("09:00", "hour_540")

    assert sent[0].body == FAILURE


def test_api_error_sends_failure_and_keeps_step():
    class BrokenHoursApi(MockBookingApi):
        def get_available_hours(self, service_id, date):
            raise BookingApiError("timeout")

    harness = Harness(BrokenHoursApi())
    harness.walk_to(4)

    sent = harness.send("2025-05-01")

    assert sent[0].body == FAILURE
    assert harness.session.step == 4


def test_schedule_trigger_restarts_mid_flow():
    harness = Harness()
    harness.walk_to(5)

    sent = harness.send("agendar")

    assert sent[0].option_ids == ["category_1", "category_2"]
    session = harness.session
    assert session.step == 2
    assert session.date is None
    assert session.service_id is None


def test_sessions_are_isolated_per_user():
    harness = Harness()
    harness.walk_to(3)

    harness.use_case.handle(
        InboundMessage(id="wamid.other", sender_id="5521888880000", text="agendar", option_id=None, timestamp=0)
    )

    assert harness.store.get("5521888880000").step == 1
    assert harness.session.step == 3


def test_confirm_button_from_webhook_books_despite_title():
    """The confirm button title contains "Agendar"; the tap must still submit the reservation."""
    harness = Harness()
    harness.walk_to(7)
    confirm_button = harness.platform.sent[-1].options[0]
    event = WebhookEventDTO.model_validate(
        {
            "object": "whatsapp_business_account",
            "entry": [
                {
                    "changes": [
                        {
                            "field": "messages",
                            "value": {
                                "messages": [
                                    {
                                        "from": USER,
                                        "id": "wamid.confirm",
                                        "type": "interactive",
                                        "interactive": {
                                            "type": "button_reply",
                                            "button_reply": {"id": confirm_button[0], "title": confirm_button[1]},
                                        },
                                    }
                                ]
                            },
                        }
                    ]
                }
            ],
        }
    )
    [message] = event.extract_messages()
    assert message.text == "Confirmar e Agendar"
    before = len(harness.platform.sent)

    harness.use_case.handle(message)

    assert [m.body for m in harness.platform.sent[before:]] == [SUCCESS]
    assert len(harness.api.reservations) == 1
    assert harness.session.step == 1


def test_option_tap_titled_agendar_is_not_a_schedule_request():
    api = MockBookingApi(categories=[Category(id=1, name="Agendar Especial")])
    harness = Harness(api)
    harness.walk_to(2)

    sent = harness.send("Agendar Especial", "category_1")

    assert sent[0].option_ids == ["service_10"]
    assert harness.session.step == 3
    assert harness.session.category_name == "Agendar Especial"
